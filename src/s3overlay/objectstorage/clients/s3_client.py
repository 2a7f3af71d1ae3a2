"""S3 client configuration and management.

This module builds the boto3 client an overlay driver talks to and owns the
mapping between virtual paths and physical object keys under the configured
root directory.

Authentication Methods Supported:
    1. Explicit credentials (access_key_id, secret_access_key)
    2. AWS CLI profiles (aws_profile)
    3. IAM roles / environment variables (no explicit credentials)
    4. Temporary credentials (session_token)

Requests are made exactly once; botocore's retry handler is disabled so that
retry policy stays with the caller.
"""

from typing import Any, Dict

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from s3overlay.core import get_logger
from s3overlay.schemas import OverlayStorageConfig

logger = get_logger(__name__)

# Largest page S3 will return from a single ListObjectsV2 call
LIST_MAX_KEYS = 1000


def error_code(error: ClientError) -> str:
    """Return the S3 error code carried by a botocore ClientError."""
    return error.response.get("Error", {}).get("Code", "")


class S3ClientManager:
    """Manages the S3 client connection and key layout for one driver."""

    def __init__(self, config: OverlayStorageConfig):
        self.config = config
        self._client = None
        logger.info(
            "S3 client manager initialized",
            region=config.region_name,
            bucket=config.bucket,
        )

    @property
    def bucket(self) -> str:
        return self.config.bucket

    @property
    def client(self):
        """Get or create S3 client instance."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _boto_config(self) -> BotoConfig:
        s3_options: Dict[str, Any] = {
            "use_accelerate_endpoint": self.config.accelerate,
            "use_dualstack_endpoint": self.config.use_dual_stack,
        }
        if self.config.region_endpoint and self.config.force_path_style:
            s3_options["addressing_style"] = "path"

        return BotoConfig(
            region_name=self.config.region_name,
            signature_version="s3v4" if self.config.v4_auth else "s3",
            retries={"total_max_attempts": 1, "mode": "standard"},
            user_agent_extra=self.config.user_agent,
            s3=s3_options,
        )

    def _create_client(self):
        """Create boto3 S3 client with the configured settings."""
        kwargs: Dict[str, Any] = {
            "region_name": self.config.region_name,
            "config": self._boto_config(),
            "use_ssl": self.config.secure,
            "verify": not self.config.skip_verify,
        }

        if self.config.region_endpoint:
            kwargs["endpoint_url"] = self.config.region_endpoint

        if self.config.aws_profile:
            session = boto3.Session(profile_name=self.config.aws_profile)
            client = session.client("s3", **kwargs)  # type: ignore
            logger.info(
                "S3 client created with profile", profile=self.config.aws_profile
            )
        else:
            if self.config.access_key_id and self.config.secret_access_key:
                kwargs.update(
                    {
                        "aws_access_key_id": self.config.access_key_id,
                        "aws_secret_access_key": self.config.secret_access_key,
                    }
                )
                if self.config.session_token:
                    kwargs["aws_session_token"] = self.config.session_token
                logger.info("S3 client created with explicit credentials")
            else:
                logger.info("S3 client created with default credential chain")

            client = boto3.client("s3", **kwargs)  # type: ignore

        return client

    def s3_path(self, path: str) -> str:
        """Physical object key for a virtual path.

        The root directory is joined without its trailing slash and the
        result never starts with one, so ``s3_path("")`` is the bare root
        prefix (empty when no root directory is configured).
        """
        return (self.config.root_directory.rstrip("/") + path).lstrip("/")

    def virtual_path(self, key: str) -> str:
        """Virtual path for a physical object key under the root directory."""
        root = self.s3_path("")
        if not root:
            return "/" + key
        if key.startswith(root):
            return key[len(root) :]
        return key
