"""
catering/core/paths.py — Centralized Path Configuration

Single source of truth for the data directory. Every module imports from
here instead of computing its own DATA_DIR.

Priority: CATERING_DATA_DIR env → Railway volume mount → project data/
"""

import os
import logging

log = logging.getLogger("catering.paths")

# ── Project Root ──────────────────────────────────────────────────────────────
_THIS_FILE = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(_THIS_FILE)))

_LOCAL_DATA_DIR = os.path.join(PROJECT_ROOT, "data")


def _resolve_data_dir() -> str:
    """Find the best persistent data directory."""
    # 1. Explicit override
    env_dir = os.environ.get("CATERING_DATA_DIR", "")
    if env_dir:
        return env_dir

    # 2. Railway volume detection
    vol_mount = os.environ.get("RAILWAY_VOLUME_MOUNT_PATH", "")
    if vol_mount and os.path.isdir(vol_mount):
        return os.path.join(vol_mount, "data") if not vol_mount.endswith("/data") else vol_mount

    # 3. Fallback: project data/ (local dev)
    return _LOCAL_DATA_DIR


DATA_DIR = _resolve_data_dir()
DB_PATH = os.path.join(DATA_DIR, "catering.db")
LOG_DIR = os.path.join(DATA_DIR, "logs")

os.makedirs(DATA_DIR, exist_ok=True)


def find_logo(data_dir: str = None):
    """Find a logo for the PDF header: <data>/logo.{png,jpg,jpeg}"""
    for ext in ("png", "jpg", "jpeg"):
        p = os.path.join(data_dir or DATA_DIR, f"logo.{ext}")
        if os.path.exists(p):
            return p
    return None


def validate_paths() -> dict:
    """Runtime validation — call at app startup to catch path issues early.

    Returns:
        {"ok": bool, "errors": [str], "resolved": {name: path}}
    """
    result = {"ok": True, "errors": [], "resolved": {
        "PROJECT_ROOT": PROJECT_ROOT,
        "DATA_DIR": DATA_DIR,
        "DB_PATH": DB_PATH,
    }}

    test_file = os.path.join(DATA_DIR, ".write_test")
    try:
        with open(test_file, "w") as f:
            f.write("ok")
        os.remove(test_file)
    except OSError as e:
        result["errors"].append(f"DATA_DIR not writable: {e}")
        result["ok"] = False

    if DATA_DIR == _LOCAL_DATA_DIR and os.environ.get("RAILWAY_ENVIRONMENT"):
        log.warning("DATA_DIR: %s (project dir, WILL RESET ON DEPLOY)", DATA_DIR)
    return result
