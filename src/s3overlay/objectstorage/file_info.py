"""File metadata and virtual path grammar shared by listing, walking and stat."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from s3overlay.core.exceptions import InvalidPathError

PATH_PATTERN = re.compile(r"^(/[A-Za-z0-9._-]+)+$")


@dataclass(frozen=True)
class FileInfo:
    """Metadata about a virtual file or directory.

    Attributes:
        path: Absolute virtual path
        is_dir: True for directories inferred from key prefixes
        size: Object size in bytes (0 for directories)
        mod_time: Last modification time (None for directories)
    """

    path: str
    is_dir: bool
    size: int = 0
    mod_time: Optional[datetime] = None

    @classmethod
    def directory(cls, path: str) -> "FileInfo":
        return cls(path=path, is_dir=True)


def check_path(path: str, allow_root: bool = False) -> str:
    """Validate a virtual path.

    Raises:
        InvalidPathError: If the path is not absolute and well formed
    """
    if allow_root and path == "/":
        return path
    if not PATH_PATTERN.match(path):
        raise InvalidPathError(path)
    return path
