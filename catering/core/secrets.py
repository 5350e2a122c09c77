"""
secrets.py — Centralized configuration and credential registry

Every environment-driven setting the app reads is declared here once.

Env vars:
  SECRET_KEY               — Flask session key
  DASH_USER / DASH_PASS    — Dashboard HTTP Basic Auth
  SMTP_HOST / SMTP_PORT    — Outbound mail server
  SMTP_USER / SMTP_PASSWORD
  MAIL_FROM                — Sender address (defaults to SMTP_USER)
  MAIL_DAILY_LIMIT         — Max sends per calendar day
  ENABLE_RETENTION_SWEEP   — "true" starts the daily retention thread
  RETENTION_SWEEP_INTERVAL — Seconds between sweeps

Security:
  - Sensitive values are never logged (masked)
  - Health endpoint shows which keys are set, not their values
"""

import os
import logging

log = logging.getLogger("secrets")

# ─── Secret Definitions ─────────────────────────────────────────────────────

_REGISTRY = {
    "secret_key": {
        "env": "SECRET_KEY",
        "required": False,
        "desc": "Flask session key",
        "default": "catering-quotes-dev",
        "sensitive": True,
    },
    "dash_user": {
        "env": "DASH_USER",
        "required": True,
        "desc": "Dashboard login username",
        "default": "catering",
    },
    "dash_pass": {
        "env": "DASH_PASS",
        "required": True,
        "desc": "Dashboard login password",
        "default": "changeme",
        "sensitive": True,
    },
    "smtp_host": {
        "env": "SMTP_HOST",
        "required": False,
        "desc": "SMTP server host",
        "default": "smtp.gmail.com",
    },
    "smtp_port": {
        "env": "SMTP_PORT",
        "required": False,
        "desc": "SMTP server port (STARTTLS)",
        "default": "587",
    },
    "smtp_user": {
        "env": "SMTP_USER",
        "required": False,
        "desc": "SMTP login",
    },
    "smtp_password": {
        "env": "SMTP_PASSWORD",
        "required": False,
        "desc": "SMTP password / app password",
        "sensitive": True,
    },
    "mail_from": {
        "env": "MAIL_FROM",
        "fallback": "SMTP_USER",
        "required": False,
        "desc": "Sender address for quote emails",
    },
    "mail_daily_limit": {
        "env": "MAIL_DAILY_LIMIT",
        "required": False,
        "desc": "Maximum quote emails per day",
        "default": "100",
    },
    "retention_sweep": {
        "env": "ENABLE_RETENTION_SWEEP",
        "required": False,
        "desc": "Run the daily quote retention sweep",
        "default": "false",
    },
    "retention_interval": {
        "env": "RETENTION_SWEEP_INTERVAL",
        "required": False,
        "desc": "Seconds between retention sweeps",
        "default": "86400",
    },
}


# ─── Public API ──────────────────────────────────────────────────────────────

def get_key(name: str) -> str:
    """Get a value by registry name. Returns empty string if not set."""
    entry = _REGISTRY.get(name)
    if not entry:
        log.warning("Unknown secret requested: %s", name)
        return ""

    val = os.environ.get(entry["env"], "")
    if not val and "fallback" in entry:
        val = os.environ.get(entry["fallback"], "")
    if not val and "default" in entry:
        val = entry["default"]
    return val


def get_int(name: str, default: int = 0) -> int:
    try:
        return int(get_key(name))
    except ValueError:
        log.warning("%s is not an integer, using %d", _REGISTRY[name]["env"], default)
        return default


def get_flag(name: str) -> bool:
    return get_key(name).strip().lower() in ("1", "true", "yes", "on")


def mail_config() -> dict:
    """Keyword config for EmailSender."""
    return {
        "smtp_host": get_key("smtp_host"),
        "smtp_port": get_int("smtp_port", 587),
        "smtp_user": get_key("smtp_user"),
        "smtp_password": get_key("smtp_password"),
        "email": get_key("mail_from"),
        "daily_limit": get_int("mail_daily_limit", 100),
    }


def mask(value: str) -> str:
    """Mask a secret for safe logging. Shows first 8 chars."""
    if not value:
        return "(not set)"
    if len(value) <= 12:
        return value[:4] + "****"
    return value[:8] + "****" + f"({len(value)} chars)"


def validate_all() -> dict:
    """Validate all settings. Returns status report."""
    results = {}
    warnings = []
    for name, entry in _REGISTRY.items():
        val = get_key(name)
        is_set = bool(val)
        results[name] = {
            "set": is_set,
            "env": entry["env"],
            "desc": entry["desc"],
            "masked": mask(val) if not entry.get("sensitive") else ("set" if is_set else "not set"),
            "required": entry.get("required", False),
        }
        if entry.get("required") and not is_set:
            warnings.append(f"REQUIRED setting missing: {entry['env']} ({entry['desc']})")
        if entry.get("sensitive") and val and val == entry.get("default"):
            warnings.append(f"{entry['env']} is using its development default")

    return {
        "secrets": results,
        "total": len(results),
        "set": sum(1 for r in results.values() if r["set"]),
        "missing": sum(1 for r in results.values() if not r["set"]),
        "warnings": warnings,
    }


def startup_check():
    """Run on startup. Logs warnings for missing critical settings."""
    report = validate_all()
    log.info("Secrets: %d/%d configured", report["set"], report["total"])
    for w in report["warnings"]:
        log.warning("SECRET: %s", w)
    return report
