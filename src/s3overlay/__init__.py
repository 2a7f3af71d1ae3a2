"""A read-only virtual filesystem over a flat S3 bucket.

This package reconstructs a hierarchical directory view over S3 keys and
overlays a translated path space: paths under a managed prefix are resolved
through a metadata map onto content-addressed, sharded objects. It is meant
to serve registry-style layouts out of a bucket populated by another system.

Key Features:
    - Single-level listing and recursive, depth-first walks
    - Directory inference from sorted key listings
    - Subtree pruning and early stop through visitor results
    - Metadata-driven path translation and descriptor synthesis
    - Ranged reads, stat and presigned URLs
    - CLI interface

Recommended Usage:

    >>> from s3overlay import S3OverlayDriver, WalkResult
    >>> driver = S3OverlayDriver.from_parameters(
    ...     {"bucket": "mirror", "region": "us-east-1", "metadatapath": "/meta.json"}
    ... )
    >>> driver.walk("/", lambda info: print(info.path))
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ConfigError,
    InvalidExpiryError,
    InvalidPathError,
    MetadataLoadError,
    PathNotFoundError,
    S3OverlayError,
    TransportError,
    UnsupportedMethodError,
    UnsupportedOperationError,
    WalkError,
)
from .objectstorage import (
    FileInfo,
    PathTranslator,
    S3OverlayDriver,
    WalkAction,
    WalkResult,
    directory_diff,
)
from .schemas import OverlayStorageConfig

__all__ = [
    # Driver
    "S3OverlayDriver",
    "OverlayStorageConfig",
    "FileInfo",
    "PathTranslator",
    "WalkAction",
    "WalkResult",
    "directory_diff",
    # Errors
    "ConfigError",
    "InvalidExpiryError",
    "InvalidPathError",
    "MetadataLoadError",
    "PathNotFoundError",
    "S3OverlayError",
    "TransportError",
    "UnsupportedMethodError",
    "UnsupportedOperationError",
    "WalkError",
]
