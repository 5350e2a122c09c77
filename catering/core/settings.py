"""
Settings repository — label/value rows for store metadata and templates.

Lookups are first-match-by-label. set_setting() never creates a label:
an unknown label returns False and callers must check it.
"""
import logging

from . import db

log = logging.getLogger("catering.settings")

SETTINGS_TABLE = "Settings"
SETTINGS_WINDOW = 50   # rows read by get_all_settings()

DEFAULT_EMAIL_BODY = """Hi {{contact}},

Thank you for choosing us for your catering order! Attached is quote {{quoteId}} for {{customer}}, prepared on {{date}}.

Quote total: ${{total}}

If you have any questions or would like to make changes, please call our {{location}} location at {{phone}}.

Thank you!"""

DEFAULT_SETTINGS = [
    ("Store Name", "Catering Co."),
    ("Location 1 Name", "Main Street"),
    ("Location 1 Address", "123 Main St"),
    ("Location 1 Phone", "555-0100"),
    ("Location 2 Name", "Uptown"),
    ("Location 2 Address", "456 Oak Ave"),
    ("Location 2 Phone", "555-0200"),
    ("Default Tax Rate", "8.25"),
    ("Logo URL", ""),
    ("Sender Name", "Catering Co."),
    ("BCC Email", ""),
    ("Email Subject", "Your catering quote {{quoteId}}"),
    ("Email Body", DEFAULT_EMAIL_BODY),
    ("Retention Days", "30"),
]


def init_settings() -> bool:
    """Seed defaults into an empty Settings table. Returns True if seeded."""
    if db.read_rows(SETTINGS_TABLE, 1):
        return False
    for label, value in DEFAULT_SETTINGS:
        db.append_row(SETTINGS_TABLE, {"label": label, "value": value})
    log.info("Seeded %d default settings", len(DEFAULT_SETTINGS))
    return True


def get_all_settings() -> dict:
    """Every non-blank label in the settings window, in source order."""
    settings = {}
    for row in db.read_rows(SETTINGS_TABLE, SETTINGS_WINDOW):
        label = (row.get("label") or "").strip()
        if not label or label in settings:
            continue
        settings[label] = row.get("value") or ""
    return settings


def get_setting(label: str, default: str = "") -> str:
    value = get_all_settings().get(label.strip())
    return default if value is None else value


def set_setting(label: str, value) -> bool:
    """Write the value of the first row whose label matches (trimmed)."""
    wanted = (label or "").strip()
    for row in db.read_rows(SETTINGS_TABLE, SETTINGS_WINDOW):
        if (row.get("label") or "").strip() == wanted:
            db.write_cell(SETTINGS_TABLE, row["id"], "value", value)
            log.info("Setting '%s' updated", wanted)
            return True
    log.warning("Setting '%s' not found — nothing written", wanted)
    return False
