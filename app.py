#!/usr/bin/env python3
"""
Catering Quotes — Application Entry Point
Creates Flask app and registers the dashboard Blueprint.
"""

import os
import logging
from flask import Flask

from logging_config import setup_logging


def create_app(start_background: bool = True):
    """Application factory."""
    setup_logging()
    log = logging.getLogger("catering")

    from catering.core.secrets import get_key, get_flag, startup_check
    app = Flask(__name__)
    app.secret_key = get_key("secret_key")
    startup_check()

    from catering.core.paths import validate_paths
    paths = validate_paths()
    for err in paths["errors"]:
        log.error("PATHS: %s", err)

    # ── Persistent database init ──────────────────────────────────────────────
    from catering.core.db import startup as db_startup
    result = db_startup()
    log.info("DB: %s | settings seeded=%s | quotes=%d menu=%d",
             result["db_path"], result["settings_seeded"],
             result["stats"].get("quotes", 0), result["stats"].get("menu", 0))

    # Register the dashboard blueprint (all routes)
    from catering.api.dashboard import bp, start_retention_sweep
    app.register_blueprint(bp)

    # Daily retention sweep in background (production only)
    if start_background and get_flag("retention_sweep"):
        start_retention_sweep(app)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=False)
