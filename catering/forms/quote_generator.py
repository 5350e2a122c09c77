"""
Catering Quote Document Generator
=================================
Turns a stored quote snapshot plus Settings into:

  - a document model (plain dict, no markup)   build_document()
  - a print-ready HTML page                    render_html()
  - PDF bytes named <quote_id>.pdf             render_pdf()

Everything here is a pure function of (quote, settings). Dates come from the
quote's created_at, never from the clock, and the PDF canvas runs in
reportlab's invariant mode, so rendering the same quote twice gives the
same bytes.
"""

import io
import logging
from datetime import datetime

from jinja2 import Environment
from reportlab.lib.pagesizes import letter
from reportlab.lib.colors import Color, HexColor
from reportlab.lib.utils import simpleSplit, ImageReader
from reportlab.pdfgen import canvas

from ..core.parsing import to_number, to_bool, money
from ..core.paths import find_logo

log = logging.getLogger("quote_gen")

# ═══════════════════════════════════════════════════════════════════════════════
# COLORS
# ═══════════════════════════════════════════════════════════════════════════════
FILL    = Color(0.93, 0.93, 0.93)      # header cell fill
BORDER  = Color(0.35, 0.35, 0.35)      # table grid
BLACK   = HexColor("#000000")
GRAY    = HexColor("#555555")
BRAND   = HexColor("#8a1c1c")          # wordmark color
ALT_ROW = Color(0.97, 0.97, 0.97)

DATE_FMT = "%m/%d/%Y"

# ═══════════════════════════════════════════════════════════════════════════════
# LOCATION RESOLUTION
# ═══════════════════════════════════════════════════════════════════════════════

def resolve_location(location_name: str, settings: dict) -> dict:
    """Match the quote's location against the two configured locations.

    No match falls back to Location 1.
    """
    wanted = location_name or ""
    for n in (1, 2):
        if wanted and wanted == settings.get(f"Location {n} Name", ""):
            break
    else:
        n = 1
    return {
        "name": settings.get(f"Location {n} Name", ""),
        "address": settings.get(f"Location {n} Address", ""),
        "phone": settings.get(f"Location {n} Phone", ""),
    }


def format_quote_date(created_at) -> str:
    try:
        return datetime.fromisoformat(str(created_at)).strftime(DATE_FMT)
    except (TypeError, ValueError):
        return str(created_at or "")


def _qty(value) -> str:
    return f"{to_number(value):g}"


def tax_line(quote: dict) -> tuple:
    """(label, value) for the totals block."""
    if to_bool(quote.get("tax_exempt")):
        return "TAX EXEMPT", money(0)
    return (f"SALES TAX ({to_number(quote.get('tax_rate')):g}%)",
            money(quote.get("tax_amount")))


def pdf_filename(quote: dict) -> str:
    return f"{quote.get('quote_id', 'quote')}.pdf"


# ═══════════════════════════════════════════════════════════════════════════════
# DOCUMENT MODEL
# ═══════════════════════════════════════════════════════════════════════════════

def build_document(quote: dict, settings: dict) -> dict:
    """Printable document model for a quote snapshot. Values are raw text."""
    store = resolve_location(quote.get("location_name", ""), settings)
    store["store_name"] = settings.get("Store Name", "")
    store["logo_url"] = settings.get("Logo URL", "").strip()

    order_type = quote.get("order_type", "")
    if order_type == "Delivery":
        address = quote.get("delivery_address", "")
    else:
        address = store["address"]

    tax_label, tax_value = tax_line(quote)
    return {
        "quote_id": quote.get("quote_id", ""),
        "filename": pdf_filename(quote),
        "store": store,
        "date": format_quote_date(quote.get("created_at")),
        "time": str(quote.get("event_time") or "").strip(),
        "customer_name": quote.get("customer_name", ""),
        "contact_name": quote.get("contact_name", ""),
        "customer_email": quote.get("customer_email", ""),
        "order_type": order_type,
        "address": address,
        "lines": [
            {
                "qty": _qty(it.get("quantity")),
                "description": str(it.get("description", "")),
                "price": money(it.get("unit_price")),
                "amount": money(it.get("amount")),
            }
            for it in quote.get("line_items", [])
        ],
        "subtotal": money(quote.get("subtotal")),
        "tax_label": tax_label,
        "tax_value": tax_value,
        "total": money(quote.get("total")),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# HTML
# ═══════════════════════════════════════════════════════════════════════════════

QUOTE_HTML = """<!DOCTYPE html>
<html><head><meta charset="utf-8">
<title>Quote {{ doc.quote_id }}</title>
<style>
body{font-family:Helvetica,Arial,sans-serif;color:#000;margin:32px;font-size:13px}
.top{display:flex;justify-content:space-between;align-items:flex-start;border-bottom:2px solid #555;padding-bottom:12px}
.wordmark{font-size:24px;font-weight:700;color:#8a1c1c}
.logo{max-width:180px;max-height:60px}
.title{font-size:28px;font-weight:700;text-align:right}
.meta td{padding:2px 8px}.meta td.l{font-weight:700;background:#eee}
.cust{margin:16px 0}.cust td{padding:2px 8px 2px 0;vertical-align:top}.cust td.l{font-weight:700}
table.items{width:100%;border-collapse:collapse;margin-top:8px}
table.items th{background:#eee;border:1px solid #555;padding:6px;text-align:left}
table.items td{border:1px solid #555;padding:6px}
table.items td.n,table.items th.n{text-align:right}
table.totals{margin-left:auto;margin-top:8px;border-collapse:collapse}
table.totals td{border:1px solid #555;padding:6px 10px;text-align:right}
table.totals td.l{font-weight:700;background:#eee}
tr.grand td{font-weight:700;font-size:15px}
@media print{body{margin:0}}
</style></head><body>
<div class="top">
 <div>
  {% if doc.store.logo_url %}<img class="logo" src="{{ doc.store.logo_url }}" alt="{{ doc.store.store_name }}">
  {% else %}<div class="wordmark">{{ doc.store.store_name }}</div>{% endif %}
  <div>{{ doc.store.store_name }}</div>
  <div>{{ doc.store.address }}</div>
  <div>{{ doc.store.phone }}</div>
 </div>
 <div>
  <div class="title">QUOTE</div>
  <table class="meta">
   <tr><td class="l">QUOTE #</td><td>{{ doc.quote_id }}</td></tr>
   <tr><td class="l">DATE</td><td>{{ doc.date }}</td></tr>
   {% if doc.time %}<tr><td class="l">TIME</td><td>{{ doc.time }}</td></tr>{% endif %}
  </table>
 </div>
</div>
<table class="cust">
 <tr><td class="l">Customer:</td><td>{{ doc.customer_name }}</td></tr>
 <tr><td class="l">Order Type:</td><td>{{ doc.order_type }}</td></tr>
 <tr><td class="l">Address:</td><td>{{ doc.address }}</td></tr>
 <tr><td class="l">Contact:</td><td>{{ doc.contact_name }}</td></tr>
</table>
<table class="items">
 <thead><tr><th class="n">QTY</th><th>DESCRIPTION</th><th class="n">PRICE/ITEM</th><th class="n">AMOUNT</th></tr></thead>
 <tbody>
 {% for ln in doc.lines %}<tr><td class="n">{{ ln.qty }}</td><td>{{ ln.description }}</td><td class="n">{{ ln.price }}</td><td class="n">{{ ln.amount }}</td></tr>
 {% endfor %}</tbody>
</table>
<table class="totals">
 <tr><td class="l">SUBTOTAL</td><td>{{ doc.subtotal }}</td></tr>
 <tr><td class="l">{{ doc.tax_label }}</td><td>{{ doc.tax_value }}</td></tr>
 <tr class="grand"><td class="l">TOTAL</td><td>{{ doc.total }}</td></tr>
</table>
</body></html>
"""

_env = Environment(autoescape=True)
_quote_template = _env.from_string(QUOTE_HTML)


def render_html(document: dict) -> str:
    """Print view. Every text field is HTML-escaped by the template engine."""
    return _quote_template.render(doc=document)


# ═══════════════════════════════════════════════════════════════════════════════
# PDF
# ═══════════════════════════════════════════════════════════════════════════════

def render_pdf(document: dict) -> bytes:
    """Letter-size PDF of the document model."""
    buf = io.BytesIO()
    W, H = letter
    ML, MR = 36, W - 36

    c = canvas.Canvas(buf, pagesize=letter, invariant=1)
    c.setTitle(f"Quote {document['quote_id']}")
    c.setAuthor(document["store"].get("store_name", ""))

    # layout is written top-down; reportlab y grows from the bottom
    def Y(top_y):
        return H - top_y

    def text(x, yt, txt, font="Helvetica", size=9, color=BLACK, align="left"):
        c.setFont(font, size)
        c.setFillColor(color)
        s = str(txt) if txt else ""
        if align == "right":
            c.drawRightString(x, Y(yt), s)
        else:
            c.drawString(x, Y(yt), s)

    def cell(x, yt, w, h, fill=False):
        if fill:
            c.setFillColor(FILL)
            c.rect(x, Y(yt) - h, w, h, fill=1, stroke=0)
        c.setStrokeColor(BORDER)
        c.setLineWidth(0.5)
        c.rect(x, Y(yt) - h, w, h, fill=0, stroke=1)

    # ── Header: logo or wordmark + store block ───────────────────────────────
    store = document["store"]
    info_y = 72
    logo_path = find_logo()
    if logo_path:
        try:
            img = ImageReader(logo_path)
            iw, ih = img.getSize()
            scale = min(160 / iw, 44 / ih)
            c.drawImage(logo_path, ML, Y(40) - ih * scale, width=iw * scale,
                        height=ih * scale, preserveAspectRatio=True, mask="auto")
            info_y = 40 + ih * scale + 14
        except Exception as e:
            log.warning("Logo load failed: %s", e)
            logo_path = None
    if not logo_path:
        text(ML, 58, store.get("store_name", ""), "Helvetica-Bold", 20, BRAND)

    for i, line in enumerate((store.get("store_name", ""), store.get("address", ""),
                              store.get("phone", ""))):
        text(ML, info_y + i * 12, line, "Helvetica", 9)

    # ── QUOTE title + id/date/time boxes ─────────────────────────────────────
    text(MR, 58, "QUOTE", "Helvetica-Bold", 24, BLACK, "right")
    meta = [("QUOTE #", document["quote_id"]), ("DATE", document["date"])]
    if document.get("time"):
        meta.append(("TIME", document["time"]))
    my = 70
    for label, value in meta:
        cell(MR - 200, my, 70, 18, fill=True)
        text(MR - 196, my + 13, label, "Helvetica-Bold", 9)
        cell(MR - 130, my, 130, 18)
        text(MR - 6, my + 13, value, "Helvetica", 9, BLACK, "right")
        my += 18

    c.setStrokeColor(GRAY)
    c.setLineWidth(1.5)
    c.line(ML, Y(max(my, info_y + 36) + 6), MR, Y(max(my, info_y + 36) + 6))

    # ── Customer block ───────────────────────────────────────────────────────
    cy = max(my, info_y + 36) + 24
    for label, value in (("Customer:", document["customer_name"]),
                         ("Order Type:", document["order_type"]),
                         ("Address:", document["address"]),
                         ("Contact:", document["contact_name"])):
        text(ML, cy, label, "Helvetica-Bold", 10)
        text(ML + 80, cy, value, "Helvetica", 10)
        cy += 14

    # ── Line items table ─────────────────────────────────────────────────────
    COLS = [
        ("QTY",         ML,       50),
        ("DESCRIPTION", ML + 50,  300),
        ("PRICE/ITEM",  ML + 350, 95),
        ("AMOUNT",      ML + 445, MR - ML - 445),
    ]
    hdr_h = 20

    def table_header(ty):
        for name, cx, cw in COLS:
            cell(cx, ty, cw, hdr_h, fill=True)
            text(cx + 4, ty + 14, name, "Helvetica-Bold", 9)
        return ty + hdr_h

    page_num = 1

    def new_page():
        nonlocal page_num
        c.setFillColor(GRAY)
        c.setFont("Helvetica", 8)
        c.drawRightString(MR, 20, f"Page {page_num}")
        c.showPage()
        page_num += 1

    cur_y = table_header(cy + 8)
    for idx, ln in enumerate(document["lines"]):
        desc_lines = simpleSplit(ln["description"], "Helvetica", 9, COLS[1][2] - 8) or [""]
        row_h = max(18, len(desc_lines) * 11 + 7)
        if Y(cur_y) - row_h < 110:
            new_page()
            cur_y = table_header(40)
        if idx % 2 == 1:
            c.setFillColor(ALT_ROW)
            c.rect(ML, Y(cur_y) - row_h, MR - ML, row_h, fill=1, stroke=0)
        for _, cx, cw in COLS:
            cell(cx, cur_y, cw, row_h)
        base = cur_y + 12
        text(COLS[0][1] + COLS[0][2] - 6, base, ln["qty"], align="right")
        for i, dline in enumerate(desc_lines):
            text(COLS[1][1] + 4, base + i * 11, dline)
        text(COLS[2][1] + COLS[2][2] - 6, base, ln["price"], align="right")
        text(COLS[3][1] + COLS[3][2] - 6, base, ln["amount"], align="right")
        cur_y += row_h

    # ── Totals ───────────────────────────────────────────────────────────────
    if Y(cur_y) < 90:
        new_page()
        cur_y = 40
    ty = cur_y + 6
    lbl_x, lbl_w = ML + 300, 145
    val_x, val_w = ML + 445, MR - ML - 445
    for label, value, bold in (("SUBTOTAL", document["subtotal"], False),
                               (document["tax_label"], document["tax_value"], False),
                               ("TOTAL", document["total"], True)):
        cell(lbl_x, ty, lbl_w, 19, fill=True)
        cell(val_x, ty, val_w, 19)
        size = 11 if bold else 9
        text(lbl_x + lbl_w - 6, ty + 13, label, "Helvetica-Bold", size, BLACK, "right")
        text(val_x + val_w - 6, ty + 13, value,
             "Helvetica-Bold" if bold else "Helvetica", size, BLACK, "right")
        ty += 20

    c.setFillColor(GRAY)
    c.setFont("Helvetica", 8)
    c.drawRightString(MR, 20, f"Page {page_num}")
    c.save()

    data = buf.getvalue()
    log.info("Quote %s PDF rendered: %d lines, %d bytes",
             document["quote_id"], len(document["lines"]), len(data))
    return data
