"""Driver configuration schema for s3overlay.

Field names are snake_case; the lowercase parameter names used by registry
storage configuration files (``accesskey``, ``regionendpoint``,
``rootdirectory``, ``metadatapath`` ...) are accepted as aliases so a
driver section can be passed through unchanged.
"""

from functools import lru_cache
from typing import Optional

import boto3
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


@lru_cache(maxsize=1)
def known_s3_regions() -> frozenset[str]:
    """All S3 regions botocore knows about, across every partition."""
    session = boto3.Session()
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions("s3", partition_name=partition))
    return frozenset(regions)


class OverlayStorageConfig(BaseModel):
    """Configuration for an S3 overlay driver.

    Example:
        config = OverlayStorageConfig(
            bucket="registry-mirror",
            region_name="us-east-1",
            root_directory="/artifactory",
            metadata_path="/metadata.json",
        )
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    bucket: str = Field(..., min_length=1, description="S3 bucket name")
    region_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("region_name", "region"),
        description="AWS region name",
    )
    region_endpoint: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "region_endpoint", "regionendpoint", "endpoint_url"
        ),
        description="Custom S3 endpoint URL for S3-compatible services",
    )
    access_key_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("access_key_id", "accesskey"),
        description="AWS access key ID",
    )
    secret_access_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("secret_access_key", "secretkey"),
        description="AWS secret access key",
    )
    session_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("session_token", "sessiontoken"),
        description="AWS session token for temporary credentials",
    )
    aws_profile: Optional[str] = Field(
        None, description="AWS CLI profile name to use for credentials"
    )
    root_directory: str = Field(
        "",
        validation_alias=AliasChoices("root_directory", "rootdirectory"),
        description="Prefix prepended to every object key",
    )
    metadata_path: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("metadata_path", "metadatapath"),
        description="Path of the JSON metadata map, relative to the root directory",
    )
    managed_prefix: str = Field(
        "/docker/registry/v2",
        description="Virtual path prefix whose paths are translated",
    )
    pointer_name: str = Field(
        "link", description="Terminal path component of current-version pointers"
    )
    digest_algorithm: str = Field(
        "sha256", description="Algorithm written into synthesized descriptors"
    )
    force_path_style: bool = Field(
        True, validation_alias=AliasChoices("force_path_style", "forcepathstyle")
    )
    secure: bool = Field(True, description="Use HTTPS")
    skip_verify: bool = Field(
        False,
        validation_alias=AliasChoices("skip_verify", "skipverify"),
        description="Skip TLS certificate verification",
    )
    v4_auth: bool = Field(True, validation_alias=AliasChoices("v4_auth", "v4auth"))
    use_dual_stack: bool = Field(
        False, validation_alias=AliasChoices("use_dual_stack", "usedualstack")
    )
    accelerate: bool = False
    user_agent: Optional[str] = Field(
        None, validation_alias=AliasChoices("user_agent", "useragent")
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "OverlayStorageConfig":
        # Custom endpoints may use any region name
        if not self.region_endpoint and self.region_name not in known_s3_regions():
            raise ValueError(f"invalid region provided: {self.region_name}")

        if not self.v4_auth and (
            not self.region_endpoint or "s3.amazonaws.com" in self.region_endpoint
        ):
            raise ValueError(
                "on Amazon S3 this storage driver can only be used with v4 "
                "authentication"
            )

        if not self.root_directory and self.metadata_path.startswith("../"):
            raise ValueError(
                "metadata path can't be relative if root_directory is not set"
            )

        if not self.managed_prefix.startswith("/"):
            raise ValueError(
                f"managed_prefix must be absolute: {self.managed_prefix}"
            )
        return self
