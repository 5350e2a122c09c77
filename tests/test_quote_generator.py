"""Tests for the quote document model, print HTML and PDF rendering."""
import io

import pdfplumber

from catering.core.quotes import create_quote, get_quote
from catering.core.settings import get_all_settings
from catering.forms.quote_generator import (build_document, render_html, render_pdf,
                                            resolve_location, format_quote_date,
                                            tax_line)


def _quote(draft, now, **overrides):
    draft.update(overrides)
    return get_quote(create_quote(draft, now=now))


# ═══════════════════════════════════════════════════════════════════════════════
# Document model
# ═══════════════════════════════════════════════════════════════════════════════

class TestLocation:

    def test_second_location(self):
        loc = resolve_location("Uptown", get_all_settings())
        assert loc == {"name": "Uptown", "address": "456 Oak Ave", "phone": "555-0200"}

    def test_unknown_falls_back_to_first(self):
        loc = resolve_location("Airport Kiosk", get_all_settings())
        assert loc["name"] == "Main Street"
        assert loc["address"] == "123 Main St"

    def test_blank_falls_back_to_first(self):
        assert resolve_location("", get_all_settings())["name"] == "Main Street"


class TestBuildDocument:

    def test_fields(self, sample_draft, fixed_now):
        doc = build_document(_quote(sample_draft, fixed_now), get_all_settings())
        assert doc["quote_id"] == "Q-2026-0001"
        assert doc["filename"] == "Q-2026-0001.pdf"
        assert doc["date"] == "03/14/2026"
        assert doc["time"] == "11:30 AM"
        assert doc["store"]["store_name"] == "Catering Co."
        assert doc["address"] == "123 Main St"
        assert doc["lines"] == [{"qty": "2", "description": "Nuggets Tray - Small",
                                 "price": "$32.00", "amount": "$64.00"}]
        assert doc["subtotal"] == "$64.00"
        assert doc["tax_label"] == "SALES TAX (8.25%)"
        assert doc["tax_value"] == "$5.28"
        assert doc["total"] == "$69.28"

    def test_delivery_uses_customer_address(self, sample_draft, fixed_now):
        q = _quote(sample_draft, fixed_now, order_type="Delivery",
                   delivery_address="9 Elm St")
        assert build_document(q, get_all_settings())["address"] == "9 Elm St"

    def test_tax_exempt_bool_and_cell(self, sample_draft):
        for flag in (True, "TRUE"):
            label, value = tax_line({"tax_exempt": flag, "tax_amount": 5.28})
            assert (label, value) == ("TAX EXEMPT", "$0.00")

    def test_date_fallback(self):
        assert format_quote_date("not a date") == "not a date"


# ═══════════════════════════════════════════════════════════════════════════════
# HTML
# ═══════════════════════════════════════════════════════════════════════════════

class TestRenderHtml:

    def test_contents(self, sample_draft, fixed_now):
        html = render_html(build_document(_quote(sample_draft, fixed_now), get_all_settings()))
        assert "QUOTE #" in html
        assert "Q-2026-0001" in html
        assert "Nuggets Tray - Small" in html
        assert "$69.28" in html
        assert "TIME" in html

    def test_escapes_text(self, sample_draft, fixed_now):
        q = _quote(sample_draft, fixed_now, customer_name="O'Brien & <Co>")
        html = render_html(build_document(q, get_all_settings()))
        assert "O&#39;Brien &amp; &lt;Co&gt;" in html
        assert "<Co>" not in html

    def test_wordmark_without_logo(self, sample_draft, fixed_now):
        html = render_html(build_document(_quote(sample_draft, fixed_now), get_all_settings()))
        assert 'class="wordmark"' in html
        assert "<img" not in html

    def test_logo_url(self, sample_draft, fixed_now):
        settings = get_all_settings()
        settings["Logo URL"] = "https://cdn.example.test/logo.png"
        html = render_html(build_document(_quote(sample_draft, fixed_now), settings))
        assert 'src="https://cdn.example.test/logo.png"' in html

    def test_idempotent(self, sample_draft, fixed_now):
        doc = build_document(_quote(sample_draft, fixed_now), get_all_settings())
        assert render_html(doc) == render_html(doc)


# ═══════════════════════════════════════════════════════════════════════════════
# PDF
# ═══════════════════════════════════════════════════════════════════════════════

class TestRenderPdf:

    def test_is_pdf(self, sample_draft, fixed_now):
        pdf = render_pdf(build_document(_quote(sample_draft, fixed_now), get_all_settings()))
        assert pdf.startswith(b"%PDF")

    def test_text(self, sample_draft, fixed_now):
        pdf = render_pdf(build_document(_quote(sample_draft, fixed_now), get_all_settings()))
        with pdfplumber.open(io.BytesIO(pdf)) as doc:
            text = "\n".join(p.extract_text() or "" for p in doc.pages)
        assert "Q-2026-0001" in text
        assert "Acme Corp" in text
        assert "$69.28" in text
        assert "SALES TAX (8.25%)" in text

    def test_same_bytes_twice(self, sample_draft, fixed_now):
        doc = build_document(_quote(sample_draft, fixed_now), get_all_settings())
        assert render_pdf(doc) == render_pdf(doc)

    def test_long_quote_paginates(self, sample_draft, fixed_now):
        sample_draft["line_items"] = [
            {"quantity": 1, "description": f"Item {i}", "unit_price": 1, "amount": 1}
            for i in range(80)]
        pdf = render_pdf(build_document(_quote(sample_draft, fixed_now), get_all_settings()))
        with pdfplumber.open(io.BytesIO(pdf)) as doc:
            assert len(doc.pages) > 1
            last = doc.pages[-1].extract_text() or ""
        assert "TOTAL" in last
