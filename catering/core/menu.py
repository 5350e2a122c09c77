"""
Menu repository — priced catalog entries grouped by a freeform category.

Prices are parsed tolerantly (catering.core.parsing.to_price) so a bad cell
shows up as 0.00 on the menu instead of breaking quote creation.
"""
import logging

from . import db
from .errors import ValidationError
from .parsing import to_price

log = logging.getLogger("catering.menu")

MENU_TABLE = "Menu"


def _item_from_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "category": row.get("category") or "",
        "name": (row.get("name") or "").strip(),
        "pickup_price": to_price(row.get("pickup_price")),
        "delivery_price": to_price(row.get("delivery_price")),
    }


def _row_from_item(item: dict) -> dict:
    name = str(item.get("name") or "").strip()
    if not name:
        raise ValidationError("Menu item name is required")
    return {
        "category": str(item.get("category") or ""),
        "name": name,
        "pickup_price": to_price(item.get("pickup_price")),
        "delivery_price": to_price(item.get("delivery_price")),
    }


def list_menu() -> list:
    """All menu items with a non-blank name, in storage order."""
    return [_item_from_row(r) for r in db.read_table(MENU_TABLE)
            if (r.get("name") or "").strip()]


def get_menu_item(item_id: int) -> dict:
    return _item_from_row(db.get_row(MENU_TABLE, item_id))


def add_menu_item(item: dict) -> int:
    row = _row_from_item(item)
    item_id = db.append_row(MENU_TABLE, row)
    log.info("Menu item added: %s (%s)", row["name"], row["category"] or "-")
    return item_id


def update_menu_item(item_id: int, item: dict) -> bool:
    """Overwrite category, name and both prices."""
    row = _row_from_item(item)
    db.update_row(MENU_TABLE, item_id, row)
    log.info("Menu item %s updated: %s", item_id, row["name"])
    return True


def remove_menu_item(item_id: int) -> bool:
    removed = db.delete_row(MENU_TABLE, item_id)
    if removed:
        log.info("Menu item %s removed", item_id)
    return removed


def group_by_category(items: list) -> dict:
    """Group by exact category text, keeping first-seen category order.

    "Trays" and "trays" are two different groups.
    """
    groups = {}
    for item in items:
        groups.setdefault(item.get("category", ""), []).append(item)
    return groups
