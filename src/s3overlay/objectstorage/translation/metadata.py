"""One-time loading of the metadata map that drives path translation."""

import posixpath
from types import MappingProxyType
from typing import Mapping

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from s3overlay.core import get_logger
from s3overlay.core.exceptions import MetadataLoadError
from s3overlay.objectstorage.clients import S3ClientManager

logger = get_logger(__name__)

_METADATA_ADAPTER = TypeAdapter(dict[str, str])


def metadata_key(client_manager: S3ClientManager, metadata_path: str) -> str:
    """Physical key of the metadata object.

    The metadata path is resolved under the root directory; ``..`` segments
    may climb out of it.
    """
    root = client_manager.config.root_directory.rstrip("/")
    joined = posixpath.normpath(f"{root}/{metadata_path.lstrip('/')}")
    return joined.lstrip("/")


def parse_metadata(content: bytes) -> Mapping[str, str]:
    """Parse a JSON object of string keys to string fragments.

    Raises:
        MetadataLoadError: If the content is not such an object
    """
    try:
        data = _METADATA_ADAPTER.validate_json(content)
    except PydanticValidationError as e:
        raise MetadataLoadError(f"failed to unmarshal metadata: {e}") from e
    return MappingProxyType(data)


def load_metadata(
    client_manager: S3ClientManager, metadata_path: str
) -> Mapping[str, str]:
    """Fetch and parse the metadata map.

    Args:
        client_manager: Client manager for the driver's bucket
        metadata_path: Configured metadata path

    Returns:
        Read-only mapping from virtual path suffix to fragment

    Raises:
        MetadataLoadError: If the object cannot be read or parsed
    """
    key = metadata_key(client_manager, metadata_path)
    logger.info("Loading metadata map", bucket=client_manager.bucket, key=key)

    try:
        response = client_manager.client.get_object(
            Bucket=client_manager.bucket, Key=key
        )
        content = response["Body"].read()
    except (BotoCoreError, ClientError) as e:
        error_msg = f"failed to read metadata from path: {key}: {e}"
        logger.error(error_msg, error=str(e))
        raise MetadataLoadError(error_msg) from e

    metadata = parse_metadata(content)
    logger.info("Metadata map loaded", key=key, entry_count=len(metadata))
    return metadata
