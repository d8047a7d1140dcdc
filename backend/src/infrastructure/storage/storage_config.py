"""Storage configuration for the KYC document bucket.

Reads the S3 settings from config.Settings so the storage layer and the rest
of the service share one source of environment configuration.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: Bucket holding KYC documents
        region: AWS region (default: 'us-east-1')
        public_base_url: Public read base for objects, if any
        signed_url_ttl_seconds: Lifetime requested for signed document URLs
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    public_base_url: Optional[str] = None
    signed_url_ttl_seconds: int = 31_536_000


def load_storage_config_from_env(settings: Optional[Settings] = None) -> StorageConfig:
    """Build a StorageConfig from S3_* / KYC_* settings.

    Raises:
        ValueError: If the configuration is invalid
    """
    settings = settings or get_settings()
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.KYC_BUCKET_NAME,
        region=settings.S3_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL or None,
        signed_url_ttl_seconds=settings.KYC_SIGNED_URL_TTL_SECONDS,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    elif not config.region:
        raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")

    if config.signed_url_ttl_seconds <= 0:
        raise ValueError("signed_url_ttl_seconds must be positive")
