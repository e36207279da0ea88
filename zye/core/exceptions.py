"""
Custom Exceptions

This module defines custom exceptions for the short-link service.

Only StoreError is ever surfaced to a client, and only as a generic
server error page; the rest are resolved inside the service layer.
"""


class ZyeException(Exception):
    """Base exception for the short-link service."""
    pass


class LinkNotFoundError(ZyeException):
    """Raised when a short code has no record in the link store."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Short code '{code}' not found")


class LinkOwnershipError(ZyeException):
    """Raised when a requester tries to manage a link they did not create."""

    def __init__(self, code: str, requester: str):
        self.code = code
        self.requester = requester
        super().__init__(f"'{requester}' is not the creator of '{code}'")


class StoreError(ZyeException):
    """Raised when a link store operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Link store error: {message}")


class TemplateNotFoundError(ZyeException):
    """Raised when an unknown page template is requested."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Template '{name}' does not exist")


class PreviewFetchError(ZyeException):
    """Raised when destination metadata cannot be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")
