"""Quote document rendering.

Key exports:
    build_document()     — Document model from a quote snapshot + settings
    render_html()        — Print view HTML
    render_pdf()         — PDF bytes (<quote_id>.pdf)
    render_email()       — Templated subject/body
    build_quote_email()  — Outbound message with the PDF attached
"""
