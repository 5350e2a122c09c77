"""
Quote email templating.

Subject and body come from the "Email Subject" / "Email Body" settings and
use literal {{token}} placeholders. Unknown tokens are left as written.
"""
import logging

from ..core.parsing import to_number
from .quote_generator import (build_document, render_pdf, resolve_location,
                              format_quote_date, pdf_filename)

log = logging.getLogger("quote_email")

TOKENS = ("customer", "contact", "location", "phone", "quoteId", "total", "date")


def substitute_tokens(template: str, values: dict) -> str:
    """Plain find-and-replace of {{name}} for each known token."""
    out = template or ""
    for name in TOKENS:
        if name in values:
            out = out.replace("{{" + name + "}}", str(values[name]))
    return out


def token_values(quote: dict, settings: dict) -> dict:
    store = resolve_location(quote.get("location_name", ""), settings)
    return {
        "customer": quote.get("customer_name", ""),
        "contact": quote.get("contact_name", ""),
        "location": store["name"],
        "phone": store["phone"],
        "quoteId": quote.get("quote_id", ""),
        "total": f"{to_number(quote.get('total')):,.2f}",
        "date": format_quote_date(quote.get("created_at")),
    }


def render_email(quote: dict, settings: dict) -> dict:
    """{subject, body} for a quote snapshot."""
    values = token_values(quote, settings)
    return {
        "subject": substitute_tokens(settings.get("Email Subject", ""), values),
        "body": substitute_tokens(settings.get("Email Body", ""), values),
    }


def build_quote_email(quote: dict, settings: dict, to: str = None) -> dict:
    """Everything the mail collaborator needs, PDF attached.

    bcc is only present when the BCC Email setting is filled in.
    """
    rendered = render_email(quote, settings)
    pdf = render_pdf(build_document(quote, settings))
    message = {
        "to": (to or quote.get("customer_email", "")).strip(),
        "subject": rendered["subject"],
        "body": rendered["body"],
        "attachments": [(pdf_filename(quote), pdf)],
        "sender_display_name": settings.get("Sender Name", "") or settings.get("Store Name", ""),
    }
    bcc = settings.get("BCC Email", "").strip()
    if bcc:
        message["bcc"] = bcc
    return message
