"""Tests for loading the metadata map."""

import json

import pytest

from s3overlay.core.exceptions import MetadataLoadError
from s3overlay.objectstorage.clients import S3ClientManager
from s3overlay.objectstorage.translation import (
    load_metadata,
    metadata_key,
    parse_metadata,
)
from s3overlay.schemas import OverlayStorageConfig

BUCKET = "test-bucket"
REGION = "us-east-1"


def _manager(root_directory="", metadata_path="/metadata.json"):
    return S3ClientManager(
        OverlayStorageConfig(
            bucket=BUCKET,
            region_name=REGION,
            access_key_id="test_key",
            secret_access_key="test_secret",
            root_directory=root_directory,
            metadata_path=metadata_path,
        )
    )


class TestMetadataKey:
    """Test resolution of the metadata object key."""

    def test_no_root(self):
        """Test the key without a root directory."""
        assert metadata_key(_manager(), "/metadata.json") == "metadata.json"

    def test_under_root(self):
        """Test the key is placed under the root directory."""
        manager = _manager(root_directory="/base/registry/")
        assert metadata_key(manager, "/meta/map.json") == "base/registry/meta/map.json"

    def test_relative_to_root(self):
        """Test '..' climbs out of the root directory."""
        manager = _manager(root_directory="/base/registry", metadata_path="../map.json")
        assert metadata_key(manager, "../map.json") == "base/map.json"


class TestParseMetadata:
    """Test parsing of the metadata JSON."""

    def test_parse_valid(self):
        """Test a string-to-string object is accepted."""
        metadata = parse_metadata(b'{"/a": "abcd", "/b": "efgh"}')
        assert dict(metadata) == {"/a": "abcd", "/b": "efgh"}

    def test_parsed_map_is_read_only(self):
        """Test the parsed map cannot be mutated."""
        metadata = parse_metadata(b'{"/a": "abcd"}')
        with pytest.raises(TypeError):
            metadata["/b"] = "efgh"  # type: ignore[index]

    @pytest.mark.parametrize(
        "content",
        [b"not json", b'["/a", "abcd"]', b'{"/a": 1}', b""],
    )
    def test_parse_invalid(self, content):
        """Test malformed metadata is rejected."""
        with pytest.raises(MetadataLoadError):
            parse_metadata(content)


class TestLoadMetadata:
    """Test fetching the metadata map from S3."""

    def test_load(self, s3_client):
        """Test loading the map from the bucket."""
        s3_client.put_object(
            Bucket=BUCKET,
            Key="root/metadata.json",
            Body=json.dumps({"/a": "abcd"}).encode("utf-8"),
        )
        metadata = load_metadata(_manager(root_directory="/root"), "/metadata.json")
        assert metadata["/a"] == "abcd"

    def test_load_missing_object(self, s3_client):
        """Test a missing metadata object is fatal."""
        with pytest.raises(MetadataLoadError, match="failed to read metadata"):
            load_metadata(_manager(), "/metadata.json")
