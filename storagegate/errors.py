"""Gateway error types.

Every error carries an ``ErrorCode`` so the gateway can turn it into a
failed ``Outcome`` without inspecting the exception class.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error category reported in a failed Outcome."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_FETCH_ERROR = "UPSTREAM_FETCH_ERROR"
    STORAGE_CLIENT_ERROR = "STORAGE_CLIENT_ERROR"
    DECODE_ERROR = "DECODE_ERROR"


class StorageGatewayError(Exception):
    """Base exception for gateway operations."""

    code: ErrorCode = ErrorCode.STORAGE_CLIENT_ERROR

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidArgumentError(StorageGatewayError):
    """Request shape or argument type is wrong."""

    code = ErrorCode.INVALID_ARGUMENT


class NotFoundError(StorageGatewayError):
    """Local file does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, path: str):
        super().__init__(f"File does not exist at path: {path}", detail=path)
        self.path = path


class UpstreamFetchError(StorageGatewayError):
    """Fetching the remote source URL failed."""

    code = ErrorCode.UPSTREAM_FETCH_ERROR

    def __init__(self, url: str, reason: str):
        super().__init__(f"Fetch failed for {url}: {reason}", detail=reason)
        self.url = url


class StorageClientError(StorageGatewayError):
    """Underlying object storage call failed."""

    code = ErrorCode.STORAGE_CLIENT_ERROR


class ObjectNotFoundError(StorageClientError):
    """Requested object key does not exist in the bucket."""

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}", detail=key)
        self.key = key


class DecodeError(StorageGatewayError):
    """Payload could not be decoded with the requested encoding."""

    code = ErrorCode.DECODE_ERROR
