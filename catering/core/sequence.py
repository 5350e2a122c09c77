"""
Quote numbering — Q-{YYYY}-{NNNN}

One global counter per deployment. It is never reset at new year; only
the displayed year prefix follows the calendar. Deleted quotes never give
their number back.
"""
import logging
from datetime import datetime

from . import db
from .parsing import to_number

log = logging.getLogger("catering.sequence")

SEQUENCE_TABLE = "Sequence"
QUOTE_COUNTER = "quote"


def format_quote_id(counter: int, year: int) -> str:
    return f"Q-{year}-{counter:04d}"


def current_counter() -> int:
    value = db.read_cell(SEQUENCE_TABLE, "name", QUOTE_COUNTER, "value", default="0")
    return int(to_number(value))


def next_quote_id(now: datetime = None) -> str:
    """Consume the next counter value and format it with the current year."""
    now = now or datetime.now()
    seq = db.increment_counter(SEQUENCE_TABLE, QUOTE_COUNTER)
    quote_id = format_quote_id(seq, now.year)
    log.debug("Issued quote id %s", quote_id)
    return quote_id


def peek_next_quote_id(now: datetime = None) -> str:
    """Preview what the next id would be without consuming it."""
    now = now or datetime.now()
    return format_quote_id(current_counter() + 1, now.year)
