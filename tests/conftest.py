"""Test configuration and fixtures for s3overlay."""

import json

import boto3
import pytest
from moto import mock_aws

from s3overlay.objectstorage import S3OverlayDriver

BUCKET = "test-bucket"
REGION = "us-east-1"
ROOT = "artifactory"
FRAGMENT = "ab12cd34ef"

MANAGED_PREFIX = "/docker/registry/v2"
POINTER_SUFFIX = "/repositories/library/alpine/_manifests/tags/latest/current/link"
BLOB_SUFFIX = f"/blobs/sha256/ab/{FRAGMENT}/data"

METADATA = {
    POINTER_SUFFIX: FRAGMENT,
    BLOB_SUFFIX: FRAGMENT,
    "/blobs/sha256/zz/short/data": "z",
}

OBJECTS = {
    f"{ROOT}/ab/{FRAGMENT}": b"manifest-bytes",
    f"{ROOT}/docs/readme.txt": b"hello world",
    f"{ROOT}/docs/guides/intro.txt": b"intro",
    f"{ROOT}/docs/guides/advanced/deep.txt": b"deep",
    f"{ROOT}/media/logo.png": b"png",
}


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def s3_client(aws_credentials):
    """Mocked S3 client with an empty test bucket."""
    with mock_aws():
        client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name=REGION,
        )
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def populated_bucket(s3_client):
    """Bucket holding the metadata map and a small tree under the root."""
    s3_client.put_object(
        Bucket=BUCKET,
        Key=f"{ROOT}/metadata.json",
        Body=json.dumps(METADATA).encode("utf-8"),
    )
    for key, body in OBJECTS.items():
        s3_client.put_object(Bucket=BUCKET, Key=key, Body=body)
    return s3_client


@pytest.fixture
def driver_parameters():
    """Driver parameters using the legacy lowercase names."""
    return {
        "bucket": BUCKET,
        "region": REGION,
        "accesskey": "test_key",
        "secretkey": "test_secret",
        "rootdirectory": f"/{ROOT}",
        "metadatapath": "/metadata.json",
    }


@pytest.fixture
def driver(populated_bucket, driver_parameters):
    """Driver over the populated bucket."""
    return S3OverlayDriver.from_parameters(driver_parameters)


@pytest.fixture
def fragment():
    """Fragment stored for the managed paths below."""
    return FRAGMENT


@pytest.fixture
def pointer_path():
    """Managed pointer path whose reads return a descriptor."""
    return MANAGED_PREFIX + POINTER_SUFFIX


@pytest.fixture
def blob_path():
    """Managed path translated onto the sharded object."""
    return MANAGED_PREFIX + BLOB_SUFFIX
