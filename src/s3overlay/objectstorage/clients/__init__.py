"""S3 client management and configuration."""

from .s3_client import LIST_MAX_KEYS, S3ClientManager, error_code

__all__ = ["LIST_MAX_KEYS", "S3ClientManager", "error_code"]
