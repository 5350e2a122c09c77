"""Dashboard blueprint and page templates."""
