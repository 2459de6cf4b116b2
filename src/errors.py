"""Exception types raised by the bump promotion service."""

from typing import Optional


class BumpError(Exception):
    """Base exception; ``status_code`` is the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BumpValidationError(BumpError):
    """Raised when bump activation parameters are malformed."""

    status_code = 400


class AdNotFoundError(BumpError):
    """Raised when the referenced vehicle ad does not exist."""

    status_code = 404

    def __init__(self, ad_id: int, message: Optional[str] = None):
        self.ad_id = ad_id
        if message is None:
            message = "Vehicle advertisement not found"
        super().__init__(message)


class ScheduleNotFoundError(BumpError):
    """Raised when an ad has no bump schedule."""

    status_code = 404

    def __init__(self, ad_id: int, message: Optional[str] = None):
        self.ad_id = ad_id
        if message is None:
            message = f"No bump schedule for ad {ad_id}"
        super().__init__(message)
