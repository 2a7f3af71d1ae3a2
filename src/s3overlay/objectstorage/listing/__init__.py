"""Object storage listing operations."""

from .directory_diff import directory_diff
from .lister import ListPage, S3Lister, directory_prefix

__all__ = ["ListPage", "S3Lister", "directory_diff", "directory_prefix"]
