"""Core utilities and shared components for s3overlay."""

from .config import settings
from .exceptions import ConfigError, PathNotFoundError, S3OverlayError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "ConfigError",
    "PathNotFoundError",
    "S3OverlayError",
    "get_logger",
    "get_tracer",
]
