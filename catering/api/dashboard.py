"""
Catering Quotes Dashboard
Menu + settings admin, quote creation, print/PDF views, email, retention.
Password protected (HTTP Basic Auth), env var config, gunicorn-compatible.
"""
import io
import csv
import time
import logging
import functools
import threading
from datetime import datetime

from flask import (Blueprint, request, jsonify, Response, render_template_string)

from ..core import db
from ..core.errors import NotFoundError, ValidationError, QuotaExceededError
from ..core.menu import (list_menu, add_menu_item, update_menu_item,
                         remove_menu_item, group_by_category)
from ..core.parsing import to_number, money
from ..core.quotes import (create_quote, list_quotes, get_quote, remove_quote,
                           sweep_expired, reuse_quote, build_draft,
                           DEFAULT_RETENTION_DAYS)
from ..core.sequence import peek_next_quote_id
from ..core.secrets import get_key, get_int
from ..core.settings import get_all_settings, set_setting
from ..forms.quote_generator import (build_document, render_html, render_pdf,
                                     format_quote_date)
from ..agents.email_sender import send_quote
from .templates import BASE_CSS, PAGE_QUOTES

log = logging.getLogger("dashboard")

bp = Blueprint("dashboard", __name__)

SWEEP_STATUS = {"running": False, "last_run": None, "last_deleted": 0, "error": None}


# ── Request-level structured logging ────────────────────────────────────────
@bp.before_app_request
def _log_request_start():
    request._start_time = time.time()


@bp.after_app_request
def _log_request_end(response):
    if hasattr(request, "_start_time"):
        duration_ms = round((time.time() - request._start_time) * 1000, 1)
        if request.path not in ("/api/health",):
            log.info("%s %s → %d (%.0fms)",
                     request.method, request.path, response.status_code, duration_ms,
                     extra={"route": request.path, "method": request.method,
                            "duration_ms": duration_ms})
    return response


# ═══════════════════════════════════════════════════════════════════════
# Password Protection
# ═══════════════════════════════════════════════════════════════════════
def check_auth(username, password):
    return username == get_key("dash_user") and password == get_key("dash_pass")


def auth_required(f):
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        auth = request.authorization
        if not auth or not check_auth(auth.username, auth.password):
            return Response(
                "Catering Quotes — Login Required",
                401, {"WWW-Authenticate": 'Basic realm="Catering Quotes"'})
        return f(*args, **kwargs)
    return decorated


# ═══════════════════════════════════════════════════════════════════════
# Error mapping
# ═══════════════════════════════════════════════════════════════════════
def _error(e, status):
    return jsonify({"ok": False, "error": str(e)}), status


@bp.errorhandler(NotFoundError)
def _not_found(e):
    return _error(e, 404)


@bp.errorhandler(ValidationError)
def _invalid(e):
    return _error(e, 400)


@bp.errorhandler(QuotaExceededError)
def _quota(e):
    log.warning("Email quota exhausted: %s", e)
    return _error(e, 429)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


# ═══════════════════════════════════════════════════════════════════════
# Health + home
# ═══════════════════════════════════════════════════════════════════════
@bp.route("/api/health")
def health():
    try:
        stats = db.get_db_stats()
        return jsonify({"status": "ok", "db": stats, "sweep": SWEEP_STATUS})
    except Exception as e:
        log.error("Health check failed: %s", e, exc_info=True)
        return jsonify({"status": "degraded", "error": str(e)}), 503


@bp.route("/")
@auth_required
def home():
    settings = get_all_settings()
    quotes = list_quotes()
    for q in quotes:
        q["date"] = format_quote_date(q["created_at"])
        q["total_fmt"] = money(q["total"])
    return render_template_string(PAGE_QUOTES, css=BASE_CSS, quotes=quotes,
                                  store_name=settings.get("Store Name", ""),
                                  menu_count=len(list_menu()))


# ═══════════════════════════════════════════════════════════════════════
# Menu
# ═══════════════════════════════════════════════════════════════════════
@bp.route("/api/menu", methods=["GET"])
@auth_required
def api_menu_list():
    items = list_menu()
    grouped = group_by_category(items)
    return jsonify({"ok": True, "items": items,
                    "categories": [{"category": k, "items": v} for k, v in grouped.items()]})


@bp.route("/api/menu", methods=["POST"])
@auth_required
def api_menu_add():
    item_id = add_menu_item(_json_body())
    return jsonify({"ok": True, "id": item_id}), 201


@bp.route("/api/menu/<int:item_id>", methods=["PUT"])
@auth_required
def api_menu_update(item_id):
    update_menu_item(item_id, _json_body())
    return jsonify({"ok": True, "id": item_id})


@bp.route("/api/menu/<int:item_id>", methods=["DELETE"])
@auth_required
def api_menu_delete(item_id):
    if not remove_menu_item(item_id):
        raise NotFoundError(f"Menu item {item_id} not found")
    return jsonify({"ok": True})


# ═══════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════
@bp.route("/api/settings", methods=["GET"])
@auth_required
def api_settings():
    return jsonify({"ok": True, "settings": get_all_settings()})


@bp.route("/api/settings", methods=["PUT"])
@auth_required
def api_settings_update():
    data = _json_body()
    label = str(data.get("label", ""))
    if not set_setting(label, data.get("value", "")):
        return jsonify({"ok": False, "error": f"Unknown setting: {label}"}), 404
    return jsonify({"ok": True, "label": label.strip()})


# ═══════════════════════════════════════════════════════════════════════
# Quotes
# ═══════════════════════════════════════════════════════════════════════
@bp.route("/api/quotes", methods=["GET"])
@auth_required
def api_quotes():
    return jsonify({"ok": True, "quotes": list_quotes()})


@bp.route("/api/quotes/next")
@auth_required
def api_quote_next():
    return jsonify({"ok": True, "next": peek_next_quote_id()})


@bp.route("/api/quotes/price", methods=["POST"])
@auth_required
def api_quote_price():
    """Price a draft from menu selections without saving it."""
    draft = build_draft(_json_body(), list_menu(), get_all_settings())
    return jsonify({"ok": True, "draft": draft})


@bp.route("/api/quotes", methods=["POST"])
@auth_required
def api_quote_create():
    """Body is either a priced draft, or a form with `selections` to price first."""
    data = _json_body()
    if "selections" in data:
        data = build_draft(data, list_menu(), get_all_settings())
    quote_id = create_quote(data)
    return jsonify({"ok": True, "quote_id": quote_id, "quote": get_quote(quote_id)}), 201


@bp.route("/api/quotes/<quote_id>", methods=["GET"])
@auth_required
def api_quote_get(quote_id):
    return jsonify({"ok": True, "quote": get_quote(quote_id)})


@bp.route("/api/quotes/<quote_id>", methods=["DELETE"])
@auth_required
def api_quote_delete(quote_id):
    if not remove_quote(quote_id):
        raise NotFoundError(f"Quote not found: {quote_id}")
    return jsonify({"ok": True})


@bp.route("/api/quotes/<quote_id>/reuse", methods=["POST"])
@auth_required
def api_quote_reuse(quote_id):
    """Edit & Reuse — always a new quote; the original is never modified."""
    overrides = _json_body() if request.get_data() else {}
    if "selections" in overrides:
        base = get_quote(quote_id)
        base.update(overrides)
        overrides = build_draft(base, list_menu(), get_all_settings())
    new_id = reuse_quote(quote_id, overrides)
    return jsonify({"ok": True, "quote_id": new_id, "source_quote_id": quote_id}), 201


@bp.route("/api/quotes/<quote_id>/email", methods=["POST"])
@auth_required
def api_quote_email(quote_id):
    data = request.get_json(silent=True) or {}
    result = send_quote(quote_id, to=data.get("to"))
    return jsonify(result)


@bp.route("/quotes/<quote_id>/print")
@auth_required
def quote_print(quote_id):
    doc = build_document(get_quote(quote_id), get_all_settings())
    return Response(render_html(doc), mimetype="text/html")


@bp.route("/quotes/<quote_id>/pdf")
@auth_required
def quote_pdf(quote_id):
    doc = build_document(get_quote(quote_id), get_all_settings())
    return Response(render_pdf(doc), mimetype="application/pdf",
                    headers={"Content-Disposition": f'inline; filename="{doc["filename"]}"'})


# ═══════════════════════════════════════════════════════════════════════
# Admin: retention + raw export
# ═══════════════════════════════════════════════════════════════════════
def _retention_days() -> int:
    days = int(to_number(get_all_settings().get("Retention Days")))
    return days if days > 0 else DEFAULT_RETENTION_DAYS


def run_retention_sweep() -> int:
    """One sweep using the Retention Days setting. Used by thread + manual trigger."""
    try:
        deleted = sweep_expired(_retention_days())
        SWEEP_STATUS["last_deleted"] = deleted
        SWEEP_STATUS["error"] = None
        return deleted
    except Exception as e:
        SWEEP_STATUS["error"] = str(e)
        log.error("Retention sweep failed: %s", e, exc_info=True)
        raise
    finally:
        SWEEP_STATUS["last_run"] = datetime.now().isoformat()


@bp.route("/api/admin/sweep", methods=["POST"])
@auth_required
def api_sweep():
    deleted = run_retention_sweep()
    return jsonify({"ok": True, "deleted": deleted, "retention_days": _retention_days()})


@bp.route("/api/export/<table>")
@auth_required
def api_export(table):
    """Raw table as CSV, header row first, in the stored column order."""
    rows = db.export_table(table)
    buf = io.StringIO()
    csv.writer(buf).writerows(rows)
    return Response(buf.getvalue(), mimetype="text/csv",
                    headers={"Content-Disposition": f'attachment; filename="{table}.csv"'})


# ═══════════════════════════════════════════════════════════════════════
# Background retention sweep
# ═══════════════════════════════════════════════════════════════════════
def retention_sweep_loop(interval: int):
    """Background thread: sweep every `interval` seconds.

    Sweeps are not guarded against overlapping; one sweep is expected to
    finish long before the next is due.
    """
    SWEEP_STATUS["running"] = True
    while SWEEP_STATUS["running"]:
        try:
            run_retention_sweep()
        except Exception:
            pass  # logged in run_retention_sweep; keep the thread alive
        time.sleep(interval)


def start_retention_sweep(app=None):
    """Start the daily sweep thread. Returns the thread."""
    interval = get_int("retention_interval", 86400)
    t = threading.Thread(target=retention_sweep_loop, args=(interval,),
                         daemon=True, name="retention-sweep")
    t.start()
    log.info("Retention sweep started (every %ds)", interval)
    return t
