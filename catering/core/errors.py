"""
Exception taxonomy shared by the repositories, renderer and mail sender.

An unknown settings label is NOT an error: set_setting() returns False.
"""


class CateringError(Exception):
    """Base class for every error raised on purpose by this package."""


class NotFoundError(CateringError):
    """Missing table, row, or quote."""


class ValidationError(CateringError):
    """A required field is missing or has an unaccepted value."""


class QuotaExceededError(CateringError):
    """The mail sender has no daily sends left."""
