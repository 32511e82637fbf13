"""Custom exceptions for the Crawl Console.

This module defines domain-specific exceptions so that callers of store
actions can tell transport failures apart from programming errors on the
named command set (mutations, actions, getters).
"""

from typing import Optional


class CrawlConsoleError(Exception):
    """Base exception for all Crawl Console errors."""

    pass


class TransportError(CrawlConsoleError):
    """Raised when a request to the REST API fails (network or HTTP status)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class UnknownMutationError(CrawlConsoleError):
    """Raised when a commit names a mutation the module does not define."""

    pass


class UnknownActionError(CrawlConsoleError):
    """Raised when a dispatch names an action the module does not define."""

    pass


class UnknownGetterError(CrawlConsoleError):
    """Raised when a getter is read that the module does not define."""

    pass


class UnknownModuleError(CrawlConsoleError):
    """Raised when a namespaced call targets an unregistered module."""

    pass


class SettingsError(CrawlConsoleError):
    """Raised when loading or saving console settings fails."""

    pass
