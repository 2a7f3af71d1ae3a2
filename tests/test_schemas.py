"""Tests for driver configuration schemas."""

import pytest
from pydantic import ValidationError

from s3overlay.schemas import OverlayStorageConfig, known_s3_regions


def _params(**overrides):
    params = {
        "bucket": "registry-mirror",
        "region": "us-east-1",
        "metadatapath": "/metadata.json",
    }
    params.update(overrides)
    return params


class TestOverlayStorageConfig:
    """Test overlay driver configuration."""

    def test_defaults(self):
        """Test configuration defaults."""
        config = OverlayStorageConfig.model_validate(_params())

        assert config.bucket == "registry-mirror"
        assert config.region_name == "us-east-1"
        assert config.root_directory == ""
        assert config.managed_prefix == "/docker/registry/v2"
        assert config.pointer_name == "link"
        assert config.digest_algorithm == "sha256"
        assert config.force_path_style is True
        assert config.secure is True
        assert config.v4_auth is True
        assert config.skip_verify is False
        assert config.region_endpoint is None

    def test_legacy_parameter_names(self):
        """Test lowercase registry parameter names are accepted."""
        config = OverlayStorageConfig.model_validate(
            _params(
                accesskey="AKIA",
                secretkey="secret",
                sessiontoken="token",
                regionendpoint="http://minio:9000",
                rootdirectory="/artifactory",
                forcepathstyle="false",
                skipverify="true",
                v4auth="true",
                useragent="mirror/1.0",
            )
        )

        assert config.access_key_id == "AKIA"
        assert config.secret_access_key == "secret"
        assert config.session_token == "token"
        assert config.region_endpoint == "http://minio:9000"
        assert config.root_directory == "/artifactory"
        assert config.force_path_style is False
        assert config.skip_verify is True
        assert config.user_agent == "mirror/1.0"

    def test_field_names(self):
        """Test snake_case field names are accepted."""
        config = OverlayStorageConfig(
            bucket="b",
            region_name="eu-west-1",
            metadata_path="/m.json",
            root_directory="/root",
        )
        assert config.region_name == "eu-west-1"
        assert config.root_directory == "/root"

    def test_frozen(self):
        """Test configurations are immutable."""
        config = OverlayStorageConfig.model_validate(_params())
        with pytest.raises(ValidationError):
            config.bucket = "other"

    @pytest.mark.parametrize("missing", ["bucket", "region", "metadatapath"])
    def test_required_parameters(self, missing):
        """Test required parameters."""
        params = _params()
        del params[missing]
        with pytest.raises(ValidationError):
            OverlayStorageConfig.model_validate(params)

    def test_unknown_parameter(self):
        """Test unknown parameters are rejected."""
        with pytest.raises(ValidationError):
            OverlayStorageConfig.model_validate(_params(chunksize=5 * 1024 * 1024))

    def test_invalid_bool(self):
        """Test boolean parameters reject arbitrary strings."""
        with pytest.raises(ValidationError):
            OverlayStorageConfig.model_validate(_params(secure="sometimes"))

    def test_invalid_region(self):
        """Test unknown regions are rejected for Amazon S3."""
        with pytest.raises(ValidationError, match="invalid region provided"):
            OverlayStorageConfig.model_validate(_params(region="moon-1"))

    def test_custom_endpoint_region(self):
        """Test any region name is accepted with a custom endpoint."""
        config = OverlayStorageConfig.model_validate(
            _params(region="garage", regionendpoint="http://garage:3900")
        )
        assert config.region_name == "garage"

    def test_v2_auth_on_amazon(self):
        """Test v4 authentication cannot be disabled on Amazon S3."""
        with pytest.raises(ValidationError, match="v4 authentication"):
            OverlayStorageConfig.model_validate(_params(v4auth=False))

    def test_v2_auth_on_custom_endpoint(self):
        """Test v4 authentication can be disabled on other services."""
        config = OverlayStorageConfig.model_validate(
            _params(v4auth=False, regionendpoint="http://ceph:7480")
        )
        assert config.v4_auth is False

    def test_relative_metadata_without_root(self):
        """Test relative metadata paths need a root directory."""
        with pytest.raises(ValidationError, match="can't be relative"):
            OverlayStorageConfig.model_validate(_params(metadatapath="../m.json"))

    def test_relative_metadata_with_root(self):
        """Test relative metadata paths are accepted under a root directory."""
        config = OverlayStorageConfig.model_validate(
            _params(metadatapath="../m.json", rootdirectory="/artifactory")
        )
        assert config.metadata_path == "../m.json"

    def test_relative_managed_prefix(self):
        """Test the managed prefix must be absolute."""
        with pytest.raises(ValidationError, match="must be absolute"):
            OverlayStorageConfig.model_validate(_params(managed_prefix="docker"))


def test_known_s3_regions():
    """Test region discovery covers the standard partition."""
    regions = known_s3_regions()
    assert "us-east-1" in regions
    assert "eu-west-1" in regions
