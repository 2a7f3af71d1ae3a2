"""Read-only storage driver exposing an S3 bucket as a virtual filesystem.

The bucket holds two kinds of objects: plain objects stored at their virtual
path under the root directory, and content-addressed objects whose virtual
paths live under a managed prefix and are resolved through a metadata map
loaded once when the driver is created.

Because S3 is a flat key/value store, directories are an abstraction: they
exist only as common key prefixes, and ``stat`` reports no modification time
for them.

Example:
    >>> driver = S3OverlayDriver.from_parameters(
    ...     {
    ...         "bucket": "registry-mirror",
    ...         "region": "us-east-1",
    ...         "rootdirectory": "/artifactory",
    ...         "metadatapath": "/metadata.json",
    ...     }
    ... )
    >>> driver.list("/")
"""

import io
from datetime import datetime
from typing import IO, Any, Mapping, NoReturn, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError as PydanticValidationError

from s3overlay.core import get_logger, settings
from s3overlay.core.exceptions import (
    ConfigError,
    InvalidExpiryError,
    PathNotFoundError,
    TransportError,
    UnsupportedMethodError,
    UnsupportedOperationError,
)
from s3overlay.objectstorage.clients import S3ClientManager, error_code
from s3overlay.objectstorage.file_info import FileInfo, check_path
from s3overlay.objectstorage.listing import S3Lister, directory_prefix
from s3overlay.objectstorage.translation import PathTranslator, load_metadata
from s3overlay.objectstorage.walking import S3Walker, Visitor
from s3overlay.schemas import OverlayStorageConfig

logger = get_logger(__name__)

DRIVER_NAME = "s3overlay"

_MISSING_CODES = ("404", "NoSuchKey", "NotFound")

# HTTP method -> S3 client method used for presigning
_PRESIGN_METHODS = {"GET": "get_object", "HEAD": "head_object"}


class S3OverlayDriver:
    """Storage driver over an S3 bucket with a translated path overlay."""

    def __init__(
        self,
        config: OverlayStorageConfig,
        client_manager: S3ClientManager,
        metadata: Mapping[str, str],
    ):
        """Initialize the driver.

        Use :meth:`from_parameters` or :meth:`from_config`, which load the
        metadata map first.

        Args:
            config: Validated driver configuration
            client_manager: Client manager for the configured bucket
            metadata: Read-only metadata map
        """
        self.config = config
        self.client_manager = client_manager
        self.translator = PathTranslator(
            metadata,
            managed_prefix=config.managed_prefix,
            pointer_name=config.pointer_name,
            digest_algorithm=config.digest_algorithm,
        )
        self.lister = S3Lister(client_manager)
        self.walker = S3Walker(self.lister)
        logger.info(
            "S3 overlay driver initialized",
            bucket=config.bucket,
            root_directory=config.root_directory,
        )

    @classmethod
    def from_parameters(cls, parameters: Mapping[str, Any]) -> "S3OverlayDriver":
        """Validate raw driver parameters and build a ready driver.

        Raises:
            ConfigError: If the parameters are malformed or the metadata map
                cannot be loaded
        """
        try:
            config = OverlayStorageConfig.model_validate(dict(parameters))
        except PydanticValidationError as e:
            error_msg = f"Invalid driver parameters: {e}"
            logger.error(error_msg)
            raise ConfigError(error_msg) from e
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: OverlayStorageConfig) -> "S3OverlayDriver":
        """Build a driver, loading the metadata map before returning it.

        Raises:
            MetadataLoadError: If the metadata map cannot be loaded
        """
        client_manager = S3ClientManager(config)
        metadata = load_metadata(client_manager, config.metadata_path)
        return cls(config, client_manager, metadata)

    @property
    def name(self) -> str:
        return DRIVER_NAME

    def s3_bucket_key(self, path: str) -> str:
        """Return the S3 bucket key for a virtual path."""
        return self.client_manager.s3_path(path)

    def get_content(self, path: str) -> bytes:
        """Retrieve the content stored at a path.

        Pointer paths under the managed prefix return the synthesized
        ``algorithm:fragment`` descriptor instead of stored bytes.
        """
        check_path(path)
        if self.translator.is_pointer(path):
            return self.translator.descriptor(path).encode("utf-8")

        body = self.reader(path)
        try:
            return body.read()
        finally:
            body.close()

    def reader(self, path: str, offset: int = 0) -> IO[bytes]:
        """Open the content at a path, starting at a byte offset.

        Returns:
            A readable binary stream; empty when offset is past the end

        Raises:
            PathNotFoundError: If the path does not exist
            TransportError: If the store request fails
        """
        check_path(path)
        key = self.s3_bucket_key(self.translator.translate(path))
        logger.debug("Opening object", path=path, key=key, offset=offset)

        try:
            response = self.client_manager.client.get_object(
                Bucket=self.client_manager.bucket,
                Key=key,
                Range=f"bytes={offset}-",
            )
        except ClientError as e:
            code = error_code(e)
            if code == "InvalidRange":
                return io.BytesIO(b"")
            if code in _MISSING_CODES:
                raise PathNotFoundError(path) from e
            logger.error("S3 read failed", path=path, key=key, error=str(e))
            raise TransportError(path, e) from e
        except BotoCoreError as e:
            logger.error("S3 read failed", path=path, key=key, error=str(e))
            raise TransportError(path, e) from e

        return response["Body"]

    def stat(self, path: str) -> FileInfo:
        """Retrieve file information for a path.

        Objects report their size and modification time. A path with no
        object of its own but with keys below it is a directory.

        Raises:
            PathNotFoundError: If neither an object nor children exist
            TransportError: If a store request fails
        """
        check_path(path)
        translated = self.translator.translate(path)
        key = self.s3_bucket_key(translated)

        try:
            response = self.client_manager.client.head_object(
                Bucket=self.client_manager.bucket, Key=key
            )
            return FileInfo(
                path=path,
                is_dir=False,
                size=response.get("ContentLength", 0),
                mod_time=response.get("LastModified"),
            )
        except ClientError as e:
            if error_code(e) not in _MISSING_CODES:
                logger.error("S3 head failed", path=path, key=key, error=str(e))
                raise TransportError(path, e) from e
        except BotoCoreError as e:
            logger.error("S3 head failed", path=path, key=key, error=str(e))
            raise TransportError(path, e) from e

        page = self.lister.list_page(directory_prefix(translated), max_keys=1)
        if page.entries:
            return FileInfo.directory(path)
        raise PathNotFoundError(path)

    def list(self, path: str) -> list[str]:
        """List the direct children of a directory.

        Raises:
            PathNotFoundError: If a non-root directory has no children
        """
        check_path(path, allow_root=True)
        return self.lister.list_directory(path)

    def walk(
        self, from_path: str, visitor: Visitor, start_after_hint: str = ""
    ) -> None:
        """Walk the tree below a directory in depth-first, sorted order.

        See :class:`s3overlay.objectstorage.walking.S3Walker`.
        """
        check_path(from_path, allow_root=True)
        self.walker.walk(from_path, visitor, start_after_hint=start_after_hint)

    def url_for(
        self,
        path: str,
        method: str = "GET",
        expiry: Optional[datetime] = None,
    ) -> str:
        """Return a presigned URL for the content at a path.

        Args:
            path: Virtual path
            method: ``GET`` or ``HEAD``
            expiry: Absolute expiry time, defaults to the configured duration

        Raises:
            UnsupportedMethodError: For any other method (matched case-sensitively)
            InvalidExpiryError: If expiry is not in the future
            PathNotFoundError: If a managed path has no metadata entry
        """
        check_path(path)
        client_method = _PRESIGN_METHODS.get(method)
        if client_method is None:
            raise UnsupportedMethodError(method)

        expires_in = settings.presign_expiry_seconds
        if expiry is not None:
            expires_in = int((expiry - datetime.now(expiry.tzinfo)).total_seconds())
            if expires_in <= 0:
                raise InvalidExpiryError(expiry)

        key = self.s3_bucket_key(self.translator.translate(path))
        try:
            return self.client_manager.client.generate_presigned_url(
                ClientMethod=client_method,
                Params={"Bucket": self.client_manager.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except BotoCoreError as e:
            logger.error("Presigning failed", path=path, key=key, error=str(e))
            raise TransportError(path, e) from e

    def put_content(self, path: str, contents: bytes) -> NoReturn:
        raise UnsupportedOperationError("put_content")

    def writer(self, path: str, append: bool = False) -> NoReturn:
        raise UnsupportedOperationError("writer")

    def move(self, source_path: str, dest_path: str) -> NoReturn:
        raise UnsupportedOperationError("move")

    def delete(self, path: str) -> NoReturn:
        raise UnsupportedOperationError("delete")
