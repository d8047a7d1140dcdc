"""Unit tests for the KYC S3 storage adapter using moto

Tests cover upload (upsert and create-only), existence checks, presigned
URLs with TTL clamping, public URLs and bucket verification.
"""

from urllib.parse import parse_qs, urlparse

import boto3
import pytest
from moto import mock_aws

from domain.kyc.ports import StorageError
from infrastructure.storage.s3_storage_adapter import (
    MAX_PRESIGNED_URL_TTL_SECONDS,
    S3KYCStorageAdapter,
)


TEST_BUCKET = "test-kyc-documents"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"
TEST_PATH = "seller-1/id_document_1735000000000.pdf"


def _adapter(bucket_name=TEST_BUCKET, public_base_url=None):
    return S3KYCStorageAdapter(
        endpoint_url=None,
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=bucket_name,
        region=TEST_REGION,
        public_base_url=public_base_url,
    )


@pytest.fixture
def s3_client():
    """Mock S3 with the KYC bucket created"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def storage_adapter(s3_client):
    return _adapter()


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_sets_content_type_and_cache_control(self, storage_adapter, s3_client):
        await storage_adapter.upload(TEST_PATH, b"%PDF-1.4 test", "application/pdf")

        obj = s3_client.get_object(Bucket=TEST_BUCKET, Key=TEST_PATH)
        assert obj["Body"].read() == b"%PDF-1.4 test"
        assert obj["ContentType"] == "application/pdf"
        assert obj["CacheControl"] == "max-age=3600"

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, storage_adapter, s3_client):
        await storage_adapter.upload(TEST_PATH, b"first", "application/pdf")
        await storage_adapter.upload(TEST_PATH, b"second", "application/pdf", upsert=True)

        obj = s3_client.get_object(Bucket=TEST_BUCKET, Key=TEST_PATH)
        assert obj["Body"].read() == b"second"

    @pytest.mark.asyncio
    async def test_create_only_refuses_existing_object(self, storage_adapter):
        await storage_adapter.upload(TEST_PATH, b"first", "application/pdf")

        with pytest.raises(StorageError, match="already exists"):
            await storage_adapter.upload(TEST_PATH, b"second", "application/pdf", upsert=False)

    @pytest.mark.asyncio
    async def test_upload_to_missing_bucket(self, s3_client):
        adapter = _adapter(bucket_name="no-such-bucket")

        with pytest.raises(StorageError, match="Failed to upload file: NoSuchBucket"):
            await adapter.upload(TEST_PATH, b"data", "application/pdf")


class TestObjectExists:

    @pytest.mark.asyncio
    async def test_exists(self, storage_adapter):
        assert await storage_adapter.object_exists(TEST_PATH) is False
        await storage_adapter.upload(TEST_PATH, b"data")
        assert await storage_adapter.object_exists(TEST_PATH) is True


class TestSignedUrl:

    @pytest.mark.asyncio
    async def test_signed_url_for_existing_object(self, storage_adapter):
        await storage_adapter.upload(TEST_PATH, b"data", "application/pdf")

        url = await storage_adapter.create_signed_url(TEST_PATH, 3600)

        parsed = urlparse(url)
        assert parsed.path.endswith(TEST_PATH)
        assert parse_qs(parsed.query)["X-Amz-Expires"] == ["3600"]

    @pytest.mark.asyncio
    async def test_ttl_clamped_to_seven_days(self, storage_adapter):
        await storage_adapter.upload(TEST_PATH, b"data", "application/pdf")

        url = await storage_adapter.create_signed_url(TEST_PATH, 60 * 60 * 24 * 365)

        query = parse_qs(urlparse(url).query)
        assert query["X-Amz-Expires"] == [str(MAX_PRESIGNED_URL_TTL_SECONDS)]

    @pytest.mark.asyncio
    async def test_missing_object(self, storage_adapter):
        with pytest.raises(StorageError, match="Object not found"):
            await storage_adapter.create_signed_url("seller-1/missing.pdf", 3600)


class TestPublicUrl:

    def test_public_url_with_base(self, s3_client):
        adapter = _adapter(public_base_url="https://cdn.example.in/kyc-documents/")
        assert adapter.get_public_url(TEST_PATH) == f"https://cdn.example.in/kyc-documents/{TEST_PATH}"

    def test_no_public_url_for_private_bucket(self, storage_adapter):
        assert storage_adapter.get_public_url(TEST_PATH) is None


class TestVerifyBucket:

    @pytest.mark.asyncio
    async def test_existing_bucket(self, storage_adapter):
        assert await storage_adapter.verify_bucket_exists() is True

    @pytest.mark.asyncio
    async def test_missing_bucket(self, s3_client):
        with pytest.raises(StorageError, match="does not exist"):
            await _adapter(bucket_name="no-such-bucket").verify_bucket_exists()
