"""Paginated S3 listing in shallow (one level) and deep (recursive) modes.

Shallow listings pass a delimiter so S3 groups everything below a child
directory into a single common prefix. Deep listings omit it and receive
every key under the prefix in sorted order, which is what the walker relies
on to infer directories.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from s3overlay.core import get_logger, get_tracer
from s3overlay.core.exceptions import PathNotFoundError, TransportError
from s3overlay.objectstorage.clients import (
    LIST_MAX_KEYS,
    S3ClientManager,
    error_code,
)
from s3overlay.objectstorage.file_info import FileInfo

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass(frozen=True)
class ListPage:
    """One page of a listing.

    Attributes:
        entries: Files in key order, followed by inferred directories
            (shallow mode only)
        continuation_token: Cursor for the next page, None on the last page
    """

    entries: tuple[FileInfo, ...]
    continuation_token: Optional[str] = None

    @property
    def is_truncated(self) -> bool:
        return self.continuation_token is not None


def directory_prefix(path: str) -> str:
    """Virtual path with exactly one trailing slash, except for the root."""
    if path == "/" or path.endswith("/"):
        return path
    return path + "/"


class S3Lister:
    """Lists virtual paths over the driver's bucket."""

    def __init__(self, client_manager: S3ClientManager):
        self.client_manager = client_manager

    def _params(
        self,
        path: str,
        delimiter: Optional[str] = None,
        start_after: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "Bucket": self.client_manager.bucket,
            "Prefix": self.client_manager.s3_path(path),
        }
        if delimiter:
            params["Delimiter"] = delimiter
        if start_after:
            params["StartAfter"] = self.client_manager.s3_path(start_after)
        return params

    @contextmanager
    def _request(self, path: str, params: Dict[str, Any]) -> Iterator[None]:
        """Trace one ListObjectsV2 request and map its errors."""
        with tracer.start_as_current_span(
            "s3.list_objects_v2",
            attributes={"s3.bucket": params["Bucket"], "s3.prefix": params["Prefix"]},
        ):
            try:
                yield
            except ClientError as e:
                if error_code(e) == "NoSuchKey":
                    raise PathNotFoundError(path) from e
                logger.error("S3 listing failed", path=path, error=str(e))
                raise TransportError(path, e) from e
            except BotoCoreError as e:
                logger.error("S3 listing failed", path=path, error=str(e))
                raise TransportError(path, e) from e

    def list_page(
        self,
        path: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        start_after: Optional[str] = None,
        max_keys: int = LIST_MAX_KEYS,
    ) -> ListPage:
        """Fetch a single listing page for keys under a virtual path.

        Args:
            path: Virtual prefix to list (used verbatim, add a trailing ``/``
                to list a directory)
            delimiter: Set for shallow listings, None for deep listings
            continuation_token: Cursor returned by the previous page
            start_after: Virtual path after which the listing starts
            max_keys: Page size limit

        Returns:
            ListPage with the page entries and the next cursor

        Raises:
            PathNotFoundError: If the store reports NoSuchKey
            TransportError: If any other store error occurs
        """
        params = self._params(path, delimiter=delimiter, start_after=start_after)
        params["MaxKeys"] = max_keys
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        with self._request(path, params):
            response = self.client_manager.client.list_objects_v2(**params)

        return self._to_page(response)

    def _to_page(self, response: Dict[str, Any]) -> ListPage:
        to_virtual = self.client_manager.virtual_path
        entries = [
            FileInfo(
                path=to_virtual(obj["Key"]),
                is_dir=False,
                size=obj.get("Size", 0),
                mod_time=obj.get("LastModified"),
            )
            for obj in response.get("Contents", [])
        ]
        for prefix_info in response.get("CommonPrefixes", []):
            # Drop the trailing delimiter
            entries.append(FileInfo.directory(to_virtual(prefix_info["Prefix"][:-1])))

        token = None
        if response.get("IsTruncated"):
            token = response.get("NextContinuationToken")

        logger.debug(
            "S3 listing page received",
            entry_count=len(entries),
            truncated=token is not None,
        )
        return ListPage(entries=tuple(entries), continuation_token=token)

    def iter_pages(
        self,
        path: str,
        delimiter: Optional[str] = None,
        start_after: Optional[str] = None,
    ) -> Iterator[ListPage]:
        """Lazily yield every page under a virtual prefix.

        The next page is only requested when the consumer asks for it, so
        closing the generator stops the listing.
        """
        params = self._params(path, delimiter=delimiter, start_after=start_after)

        paginator = self.client_manager.client.get_paginator("list_objects_v2")
        responses = iter(
            paginator.paginate(**params, PaginationConfig={"PageSize": LIST_MAX_KEYS})
        )

        # Each page is fetched by the paginator on demand
        while True:
            with self._request(path, params):
                response = next(responses, None)
            if response is None:
                return
            yield self._to_page(response)

    def list_directory(self, path: str) -> list[str]:
        """List the direct children of a virtual directory.

        Args:
            path: Absolute virtual directory path

        Returns:
            Child file paths followed by child directory paths

        Raises:
            PathNotFoundError: If a non-root directory has no children
            TransportError: If the store request fails
        """
        logger.info("Listing directory", path=path)

        files: list[str] = []
        directories: list[str] = []
        for page in self.iter_pages(directory_prefix(path), delimiter="/"):
            for entry in page.entries:
                (directories if entry.is_dir else files).append(entry.path)

        if path != "/" and not files and not directories:
            # No directories exist in S3, an empty listing means a missing one
            raise PathNotFoundError(path)

        logger.info(
            "Directory listed",
            path=path,
            file_count=len(files),
            directory_count=len(directories),
        )
        return files + directories
