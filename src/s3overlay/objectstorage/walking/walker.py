"""Recursive walk over the virtual directory tree of a bucket.

A deep (delimiter-free) listing returns every key under the starting prefix
in sorted, depth-first order. Directories are never listed themselves, so
they are inferred by comparing each key with the last directory reported.
This needs no extra listing calls regardless of tree depth.

Visitors return a :class:`WalkResult` to steer the walk:

    >>> def visit(info):
    ...     if info.is_dir and info.path.endswith("/_uploads"):
    ...         return WalkResult.skip_subtree()
    ...     print(info.path)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from s3overlay.core import get_logger
from s3overlay.core.exceptions import WalkError
from s3overlay.objectstorage.file_info import FileInfo
from s3overlay.objectstorage.listing import S3Lister, directory_diff, directory_prefix

logger = get_logger(__name__)


class WalkAction(str, Enum):
    """What the walker does after a visitor returns."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"
    STOP = "stop"
    FAIL = "fail"


@dataclass(frozen=True)
class WalkResult:
    """Tagged visitor result; ``detail`` is only set for FAIL."""

    action: WalkAction
    detail: Union[str, Exception, None] = None

    @classmethod
    def proceed(cls) -> "WalkResult":
        return cls(WalkAction.CONTINUE)

    @classmethod
    def skip_subtree(cls) -> "WalkResult":
        return cls(WalkAction.SKIP_SUBTREE)

    @classmethod
    def stop(cls) -> "WalkResult":
        return cls(WalkAction.STOP)

    @classmethod
    def fail(cls, detail: Union[str, Exception]) -> "WalkResult":
        return cls(WalkAction.FAIL, detail)


Visitor = Callable[[FileInfo], Optional[WalkResult]]


@dataclass
class WalkState:
    """Mutable state of one walk.

    Attributes:
        prev_dir: Last directory reported to the visitor
        prev_skip_dir: Subtree currently being pruned, if any
        object_count: Number of visitor invocations
    """

    prev_dir: str
    prev_skip_dir: Optional[str] = None
    object_count: int = 0

    def is_skipped(self, path: str) -> bool:
        if self.prev_skip_dir is None:
            return False
        if path == self.prev_skip_dir or path.startswith(self.prev_skip_dir + "/"):
            return True
        # Sorted order: nothing later can fall back inside the pruned subtree
        self.prev_skip_dir = None
        return False


class S3Walker:
    """Drives deep listings and feeds inferred directories and files to a visitor."""

    def __init__(self, lister: S3Lister):
        self.lister = lister

    def walk(
        self, from_path: str, visitor: Visitor, start_after_hint: str = ""
    ) -> WalkState:
        """Walk every directory and file below a virtual path.

        Args:
            from_path: Absolute virtual directory to start from
            visitor: Called once per directory and file, in pre-order
            start_after_hint: Virtual path after which the listing resumes

        Returns:
            The final walk state

        Raises:
            WalkError: If the visitor fails with a plain detail
            Exception: Whatever exception the visitor raised or failed with
            PathNotFoundError, TransportError: If a listing request fails
        """
        state = WalkState(prev_dir=from_path)
        logger.info("Walking", from_path=from_path, start_after=start_after_hint)

        pages = self.lister.iter_pages(
            directory_prefix(from_path), start_after=start_after_hint or None
        )
        infos = (
            info
            for page in pages
            for entry in page.entries
            for info in self._infer(state, entry)
        )
        try:
            for info in infos:
                if not self._visit(state, info, visitor):
                    logger.info("Walk stopped by visitor", from_path=from_path)
                    break
        finally:
            pages.close()

        logger.info(
            "Walk completed", from_path=from_path, object_count=state.object_count
        )
        return state

    @staticmethod
    def _infer(state: WalkState, entry: FileInfo) -> list[FileInfo]:
        infos = []
        for directory in directory_diff(state.prev_dir, entry.path):
            infos.append(FileInfo.directory(directory))
            state.prev_dir = directory
        infos.append(entry)
        return infos

    @staticmethod
    def _visit(state: WalkState, info: FileInfo, visitor: Visitor) -> bool:
        """Call the visitor unless pruned; False means stop walking."""
        if state.is_skipped(info.path):
            return True

        result = visitor(info)
        state.object_count += 1

        if result is None or result.action is WalkAction.CONTINUE:
            return True
        if result.action is WalkAction.SKIP_SUBTREE:
            state.prev_skip_dir = info.path
            return True
        if result.action is WalkAction.STOP:
            return False

        detail = result.detail
        if isinstance(detail, Exception):
            raise detail
        raise WalkError(str(detail))
