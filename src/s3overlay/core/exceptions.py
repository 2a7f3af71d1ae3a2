"""Exception hierarchy for s3overlay."""

from datetime import datetime
from typing import Optional


class S3OverlayError(Exception):
    """Base exception for all s3overlay errors."""

    pass


class ConfigError(S3OverlayError):
    """Raised when driver parameters are malformed."""

    pass


class MetadataLoadError(ConfigError):
    """Raised when the metadata map cannot be fetched or parsed."""

    pass


class PathNotFoundError(S3OverlayError):
    """Raised when a path is not found."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path not found: {path}")


class InvalidPathError(S3OverlayError):
    """Raised when a path does not follow the virtual path grammar."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid path: {path!r}")


class UnsupportedOperationError(S3OverlayError):
    """Raised for operations this read-only driver does not implement."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation not supported: {operation}")


class UnsupportedMethodError(UnsupportedOperationError):
    """Raised when a presigned URL is requested for an unsupported method."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"url_for with method {method}")


class TransportError(S3OverlayError):
    """Raised when the object store call fails for a reason other than a miss."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Object store request failed for '{path}': {cause}")


class WalkError(S3OverlayError):
    """Raised when a walk visitor fails with a plain detail."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class InvalidExpiryError(S3OverlayError):
    """Raised when a presigned URL is requested with an expiry in the past."""

    def __init__(self, expiry: datetime):
        self.expiry = expiry
        super().__init__(f"Expiry is not in the future: {expiry.isoformat()}")
