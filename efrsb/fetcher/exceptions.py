class FetchError(Exception):
    """Base exception for all registry fetching errors."""


class AccessBlockedError(FetchError):
    """Raised when the registry refuses access to the automated session."""


class CaptchaError(FetchError):
    """Raised when an anti-automation challenge cannot be resolved."""


class PageStructureError(FetchError):
    """Raised when expected form elements or result markup are missing."""


class FetchSessionError(FetchError):
    """Raised when the browser session itself is unusable. Aborts a batch."""


class SessionBusyError(FetchError):
    """Raised when a session is requested while another batch holds it."""
