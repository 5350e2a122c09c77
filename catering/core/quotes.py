"""
Quote repository — frozen, priced catering quotes.

A stored quote is a snapshot: its line items and money fields are copied at
creation time and never rewritten, so later menu price changes do not touch
it. "Edit & Reuse" always creates a new quote with a new id.

Draft keys:
    customer_name, contact_name, order_type (Pickup|Delivery),
    delivery_address, location_name, customer_email, event_time,
    tax_exempt, tax_rate, subtotal, tax_amount, total,
    line_items: [{quantity, description, unit_price, amount}]
"""

import json
import logging
from datetime import datetime, timedelta

from . import db
from .errors import NotFoundError, ValidationError
from .parsing import to_number, to_price, to_bool, bool_cell
from .sequence import next_quote_id

log = logging.getLogger("catering.quotes")

QUOTES_TABLE = "Quotes"
ORDER_TYPES = ("Pickup", "Delivery")
DEFAULT_RETENTION_DAYS = 30

_TEXT_FIELDS = ("customer_name", "contact_name", "delivery_address",
                "location_name", "customer_email", "event_time")
_MONEY_FIELDS = ("subtotal", "tax_rate", "tax_amount", "total")


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def normalize_order_type(value) -> str:
    """Case-insensitive match against Pickup/Delivery; anything else is rejected."""
    s = str(value or "").strip().lower()
    for ot in ORDER_TYPES:
        if s == ot.lower():
            return ot
    raise ValidationError(f"Order type must be Pickup or Delivery, got '{value}'")


def validate_draft(draft: dict) -> str:
    """Returns the canonical order type."""
    order_type = normalize_order_type(draft.get("order_type"))
    if order_type == "Delivery" and not str(draft.get("delivery_address") or "").strip():
        raise ValidationError("Delivery address is required for Delivery orders")
    return order_type


def _clean_line_items(items) -> list:
    cleaned = []
    for it in items or []:
        cleaned.append({
            "quantity": to_number(it.get("quantity")),
            "description": str(it.get("description") or ""),
            "unit_price": to_number(it.get("unit_price")),
            "amount": to_number(it.get("amount")),
        })
    return cleaned


def _parse_line_items(raw) -> list:
    if isinstance(raw, list):
        return _clean_line_items(raw)
    try:
        items = json.loads(raw or "[]")
    except (TypeError, ValueError):
        log.warning("Unreadable line items: %r", str(raw)[:60])
        return []
    return _clean_line_items(items if isinstance(items, list) else [])


def _quote_from_row(row: dict) -> dict:
    quote = {"quote_id": row.get("quote_id") or "",
             "created_at": row.get("created_at") or "",
             "order_type": row.get("order_type") or ""}
    for f in _TEXT_FIELDS:
        quote[f] = row.get(f) or ""
    for f in _MONEY_FIELDS:
        quote[f] = to_number(row.get(f))
    quote["tax_exempt"] = to_bool(row.get("tax_exempt"))
    quote["line_items"] = _parse_line_items(row.get("line_items"))
    return quote


def _local_naive(dt: datetime) -> datetime:
    """created_at is stored as naive local time; aware inputs are converted to it."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def _parse_created(value):
    try:
        return _local_naive(datetime.fromisoformat(str(value)))
    except (TypeError, ValueError):
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════════════════════════

def create_quote(draft: dict, now: datetime = None) -> str:
    """Validate, number, timestamp and append a quote. Returns the quote id."""
    order_type = validate_draft(draft)
    now = _local_naive(now or datetime.now())
    quote_id = next_quote_id(now)

    row = {
        "quote_id": quote_id,
        "created_at": now.isoformat(),
        "order_type": order_type,
        "line_items": json.dumps(_clean_line_items(draft.get("line_items"))),
        "tax_exempt": bool_cell(draft.get("tax_exempt")),
    }
    for f in _TEXT_FIELDS:
        row[f] = str(draft.get(f) or "").strip()
    for f in _MONEY_FIELDS:
        row[f] = to_number(draft.get(f))
    if order_type != "Delivery":
        row["delivery_address"] = ""

    db.append_row(QUOTES_TABLE, row)
    log.info("Quote %s created for %s: $%.2f",
             quote_id, row["customer_name"][:40] or "?", row["total"],
             extra={"quote_id": quote_id, "total": row["total"]})
    return quote_id


def list_quotes() -> list:
    """All quotes, newest first by created_at."""
    quotes = [_quote_from_row(r) for r in db.read_table(QUOTES_TABLE)]
    quotes.sort(key=lambda q: q.get("created_at", ""), reverse=True)
    return quotes


def _find_row(quote_id: str) -> dict:
    for row in db.read_table(QUOTES_TABLE):
        if row.get("quote_id") == quote_id:
            return row
    raise NotFoundError(f"Quote not found: {quote_id}")


def get_quote(quote_id: str) -> dict:
    return _quote_from_row(_find_row(quote_id))


def remove_quote(quote_id: str) -> bool:
    try:
        row = _find_row(quote_id)
    except NotFoundError:
        return False
    removed = db.delete_row(QUOTES_TABLE, row["id"])
    if removed:
        log.info("Quote %s removed", quote_id)
    return removed


def sweep_expired(retention_days: int = DEFAULT_RETENTION_DAYS,
                  now: datetime = None) -> int:
    """Delete quotes strictly older than now - retention_days.

    Walks storage from the newest row back to the oldest. A quote exactly
    retention_days old is kept. Returns the number deleted.
    """
    now = _local_naive(now or datetime.now())
    cutoff = now - timedelta(days=retention_days)
    deleted = 0
    for row in reversed(db.read_table(QUOTES_TABLE)):
        created = _parse_created(row.get("created_at"))
        if created is None:
            log.warning("Retention sweep: skipping %s, bad created_at %r",
                        row.get("quote_id"), row.get("created_at"))
            continue
        if created < cutoff and db.delete_row(QUOTES_TABLE, row["id"]):
            deleted += 1
    log.info("Retention sweep: %d quote(s) older than %d days deleted",
             deleted, retention_days)
    return deleted


# ═══════════════════════════════════════════════════════════════════════════════
# EDIT & REUSE
# ═══════════════════════════════════════════════════════════════════════════════

def draft_from_quote(quote_id: str) -> dict:
    """Editable copy of a stored quote, without its id or timestamp."""
    draft = get_quote(quote_id)
    draft.pop("quote_id", None)
    draft.pop("created_at", None)
    return draft


PRICING_FIELDS = ("order_type", "tax_exempt", "tax_rate", "line_items")


def reprice(draft: dict) -> dict:
    """Recompute subtotal, tax and total from the draft's line amounts."""
    subtotal = round(sum(to_number(it.get("amount")) for it in draft.get("line_items") or []), 2)
    rate = to_number(draft.get("tax_rate"))
    exempt = to_bool(draft.get("tax_exempt"))
    tax = 0.0 if exempt else round(subtotal * rate / 100, 2)
    draft.update({"subtotal": subtotal, "tax_rate": rate, "tax_exempt": exempt,
                  "tax_amount": tax, "total": round(subtotal + tax, 2)})
    return draft


def reuse_quote(quote_id: str, overrides: dict = None, now: datetime = None) -> str:
    """Create a NEW quote from an existing one. The original row is untouched.

    Overriding a pricing field reprices the copy. Switching the order type
    needs new line_items, since stored lines keep the old type's prices.
    """
    overrides = overrides or {}
    draft = draft_from_quote(quote_id)
    if ("order_type" in overrides and "line_items" not in overrides
            and normalize_order_type(overrides["order_type"]) != draft["order_type"]):
        raise ValidationError("Changing the order type needs new menu selections")
    draft.update(overrides)
    if any(f in overrides for f in PRICING_FIELDS):
        reprice(draft)
    new_id = create_quote(draft, now=now)
    log.info("Quote %s reused as %s", quote_id, new_id)
    return new_id


# ═══════════════════════════════════════════════════════════════════════════════
# QUOTE BUILDER — price a draft from menu selections
# ═══════════════════════════════════════════════════════════════════════════════

def build_draft(form: dict, menu: list, settings: dict) -> dict:
    """
    Price a draft the way the item picker does.

    form keys: the draft text fields, order_type, tax_exempt, tax_rate?,
        selections: [{menu_id, quantity}] or [{description, unit_price, quantity}]
    """
    order_type = normalize_order_type(form.get("order_type"))
    by_id = {str(m["id"]): m for m in menu}
    price_key = "delivery_price" if order_type == "Delivery" else "pickup_price"

    line_items = []
    subtotal = 0.0
    for sel in form.get("selections", []):
        qty = to_number(sel.get("quantity"))
        if sel.get("menu_id") not in (None, ""):
            item = by_id.get(str(sel["menu_id"]))
            if item is None:
                raise ValidationError(f"Unknown menu item: {sel['menu_id']}")
            desc, unit = item["name"], item[price_key]
        else:
            desc, unit = str(sel.get("description") or ""), to_price(sel.get("unit_price"))
        amount = round(qty * unit, 2)
        subtotal += amount
        line_items.append({"quantity": qty, "description": desc,
                           "unit_price": unit, "amount": amount})

    subtotal = round(subtotal, 2)
    exempt = to_bool(form.get("tax_exempt"))
    rate_src = form.get("tax_rate")
    rate = to_number(settings.get("Default Tax Rate") if rate_src in (None, "") else rate_src)
    tax = 0.0 if exempt else round(subtotal * rate / 100, 2)

    draft = {f: str(form.get(f) or "") for f in _TEXT_FIELDS}
    draft.update({
        "order_type": order_type,
        "tax_exempt": exempt,
        "line_items": line_items,
        "subtotal": subtotal,
        "tax_rate": rate,
        "tax_amount": tax,
        "total": round(subtotal + tax, 2),
    })
    return draft
