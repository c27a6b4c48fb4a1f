"""Shipping engine exceptions."""


class ShippingError(Exception):
    """Base class for shipping calculation errors."""


class PlatformAPIError(ShippingError):
    """Commerce platform API unreachable, unauthorized or returned an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DataStoreUnavailable(ShippingError):
    """Shared data store could not be queried for the request's stores."""
