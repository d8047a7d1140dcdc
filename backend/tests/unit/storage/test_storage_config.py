"""Unit tests for KYC storage configuration loading"""

import pytest

from config import Settings
from infrastructure.storage.storage_config import (
    StorageConfig,
    load_storage_config_from_env,
    validate_storage_config,
)


def _config(**overrides) -> StorageConfig:
    values = dict(
        endpoint_url="http://localhost:9000",
        access_key="minioadmin",
        secret_key="minioadmin",
        bucket_name="kyc-documents",
    )
    values.update(overrides)
    return StorageConfig(**values)


class TestLoadStorageConfig:

    def test_reads_settings(self):
        settings = Settings(
            S3_ENDPOINT_URL="",
            S3_ACCESS_KEY_ID="key",
            S3_SECRET_ACCESS_KEY="secret",
            S3_REGION="ap-south-1",
            S3_PUBLIC_BASE_URL="https://cdn.example.in/kyc-documents",
            KYC_BUCKET_NAME="kyc-documents",
            KYC_SIGNED_URL_TTL_SECONDS=3600,
        )

        config = load_storage_config_from_env(settings)

        assert config.endpoint_url is None
        assert config.region == "ap-south-1"
        assert config.bucket_name == "kyc-documents"
        assert config.public_base_url == "https://cdn.example.in/kyc-documents"
        assert config.signed_url_ttl_seconds == 3600

    def test_invalid_settings_raise(self):
        with pytest.raises(ValueError, match="bucket_name"):
            load_storage_config_from_env(Settings(KYC_BUCKET_NAME=""))


class TestValidateStorageConfig:

    def test_valid_minio_config(self):
        validate_storage_config(_config())

    @pytest.mark.parametrize("field_name", ["access_key", "secret_key", "bucket_name"])
    def test_required_fields(self, field_name):
        with pytest.raises(ValueError, match=field_name):
            validate_storage_config(_config(**{field_name: ""}))

    def test_endpoint_must_be_http(self):
        with pytest.raises(ValueError, match="Invalid endpoint_url"):
            validate_storage_config(_config(endpoint_url="minio:9000"))

    def test_aws_requires_region(self):
        with pytest.raises(ValueError, match="region"):
            validate_storage_config(_config(endpoint_url=None, region=""))

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError, match="signed_url_ttl_seconds"):
            validate_storage_config(_config(signed_url_ttl_seconds=0))
