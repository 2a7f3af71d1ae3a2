"""Translation of virtual paths onto the sharded physical layout.

Paths under the managed prefix do not exist in the bucket as-is. Their
suffix (everything after the prefix) is looked up in the metadata map to get
a content-address fragment, and the object lives at ``/<F[:2]>/<F>``.
Everything outside the managed prefix is stored verbatim.
"""

import posixpath
from typing import Mapping

from s3overlay.core import get_logger
from s3overlay.core.exceptions import PathNotFoundError

logger = get_logger(__name__)

SHARD_WIDTH = 2


def shard(fragment: str) -> str:
    """Shard a fragment under a directory named by its first characters."""
    return f"{fragment[:SHARD_WIDTH]}/{fragment}"


class PathTranslator:
    """Maps virtual paths to physical paths through a read-only metadata map."""

    def __init__(
        self,
        metadata: Mapping[str, str],
        managed_prefix: str = "/docker/registry/v2",
        pointer_name: str = "link",
        digest_algorithm: str = "sha256",
    ):
        self._metadata = metadata
        self.managed_prefix = managed_prefix.rstrip("/")
        self.pointer_name = pointer_name
        self.digest_algorithm = digest_algorithm

    def is_managed(self, path: str) -> bool:
        return path == self.managed_prefix or path.startswith(
            self.managed_prefix + "/"
        )

    def is_pointer(self, path: str) -> bool:
        """Whether reads of this path return a synthesized descriptor."""
        return self.is_managed(path) and posixpath.basename(path) == self.pointer_name

    def fragment(self, path: str) -> str:
        """Look up the fragment for a managed path.

        Raises:
            PathNotFoundError: If the metadata map has no usable entry
        """
        suffix = path[len(self.managed_prefix) :]
        fragment = self._metadata.get(suffix)
        if fragment is None or len(fragment) < SHARD_WIDTH:
            logger.debug("No metadata entry for path", path=path, suffix=suffix)
            raise PathNotFoundError(path)
        return fragment

    def translate(self, path: str) -> str:
        """Translate a virtual path to the physical virtual path.

        Args:
            path: Absolute virtual path

        Returns:
            The path unchanged if it is not managed, otherwise ``/`` followed
            by the sharded fragment

        Raises:
            PathNotFoundError: If a managed path has no metadata entry
        """
        if not self.is_managed(path):
            return path
        return "/" + shard(self.fragment(path))

    def descriptor(self, path: str) -> str:
        """Synthesize the ``algorithm:fragment`` descriptor for a pointer path."""
        return f"{self.digest_algorithm}:{self.fragment(path)}"
