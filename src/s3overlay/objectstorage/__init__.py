"""Object storage driver for a virtual filesystem over S3."""

from .clients import S3ClientManager
from .driver import DRIVER_NAME, S3OverlayDriver
from .file_info import FileInfo
from .listing import ListPage, S3Lister, directory_diff
from .translation import PathTranslator
from .walking import S3Walker, WalkAction, WalkResult

__all__ = [
    "DRIVER_NAME",
    "FileInfo",
    "ListPage",
    "PathTranslator",
    "S3ClientManager",
    "S3Lister",
    "S3OverlayDriver",
    "S3Walker",
    "WalkAction",
    "WalkResult",
    "directory_diff",
]
