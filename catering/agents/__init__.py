"""Outbound integrations: SMTP delivery of quote emails."""
