"""Exceptions raised by the signing and dispatch layers."""


class MwsSigningError(Exception):
    """Base class for all library errors."""


class InvalidEndpointError(MwsSigningError, ValueError):
    """Raised when a host or path cannot form a valid endpoint URL."""


class UnsignedRequestError(MwsSigningError):
    """Raised when a request is sent before it has been signed."""

    def __init__(self, message: str = "Query is not signed"):
        super().__init__(message)


class TransportError(MwsSigningError):
    """Network-level failure (DNS, connect, TLS, timeout)."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class ResponseReadError(MwsSigningError):
    """The response body could not be fully read."""

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
