"""Custom exceptions for the email finder domain."""


class FinderError(Exception):
    """Base exception for this project."""


class ConfigError(FinderError):
    """Raised when runtime configuration is invalid."""


class FetchError(FinderError):
    """Raised when fetching a URL fails."""


class DeadlineExceeded(FetchError):
    """Raised when the run budget elapses or is cancelled mid-fetch."""


class RenderError(FinderError):
    """Raised when browser rendering of a page fails."""
