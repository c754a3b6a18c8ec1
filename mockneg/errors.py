"""
Error types raised by the fake NEG cloud.

Errors subclass the Kubernetes client's ApiException so callers that already
branch on ``exc.status`` (404, 409, ...) treat the fake like a real API.
"""

from kubernetes.client.rest import ApiException


class NotFoundError(ApiException):
    """No resource exists at the requested identity."""

    def __init__(self, reason: str = "Not Found"):
        super().__init__(status=404, reason=reason)


class ConflictError(ApiException):
    """A resource with the same identity already exists."""

    def __init__(self, reason: str = "Conflict"):
        super().__init__(status=409, reason=reason)


class InvalidArgumentError(ApiException):
    """The request was malformed."""

    def __init__(self, reason: str = "Bad Request"):
        super().__init__(status=400, reason=reason)


def is_not_found(exc: BaseException) -> bool:
    """Return True if exc is a 404 from either the fake or a real client."""
    return isinstance(exc, ApiException) and exc.status == 404
