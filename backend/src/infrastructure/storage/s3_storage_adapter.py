"""S3 Storage Adapter - Implementation of KYCStoragePort using boto3.

Stores seller KYC documents in a private S3-compatible bucket (AWS S3, MinIO).
Issues presigned GET URLs for reviewers and optional public URLs when the
bucket is fronted by a public base URL.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from io import BytesIO
from typing import Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from domain.kyc.ports.object_storage_port import KYCStoragePort, StorageError

logger = logging.getLogger(__name__)

# SigV4 presigned URLs cannot outlive 7 days
MAX_PRESIGNED_URL_TTL_SECONDS = 7 * 24 * 60 * 60

CACHE_CONTROL = "max-age=3600"


class S3KYCStorageAdapter(KYCStoragePort):
    """S3-compatible storage adapter for the KYC document bucket.

    Features:
    - Overwrite or create-only uploads (upsert flag)
    - Presigned URLs for private documents
    - Public URLs built from a configured base URL

    Example:
        config = load_storage_config_from_env()
        storage = S3KYCStorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            public_base_url=config.public_base_url,
        )

        await storage.upload("seller-1/id_document_1735000000000.pdf", data, "application/pdf")
        url = await storage.create_signed_url("seller-1/id_document_1735000000000.pdf", 3600)
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: KYC bucket name
            region: AWS region (default: 'us-east-1')
            public_base_url: Base URL under which objects are publicly
                readable, or None for a private-only bucket

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region
            self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

            logger.info(
                f"Initialized KYC storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        upsert: bool = True,
    ) -> None:
        """Put one object in the bucket.

        Raises:
            StorageError: If the object exists and upsert is False, or the
                put fails
        """
        if not upsert and await self.object_exists(path):
            raise StorageError(f"The resource already exists: {path}")

        put_kwargs = {
            "Bucket": self.bucket_name,
            "Key": path,
            "Body": BytesIO(data),
            "CacheControl": CACHE_CONTROL,
        }
        if content_type:
            put_kwargs["ContentType"] = content_type

        try:
            self.s3_client.put_object(**put_kwargs)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: path={path}, error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise StorageError(f"Failed to upload file: {e}")

        logger.info(
            f"Uploaded KYC object: path={path}, size={len(data)}, content_type={content_type}"
        )

    async def object_exists(self, path: str) -> bool:
        """HEAD the object. Errors other than 404 are treated as absent."""
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=path)
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code not in ("404", "NoSuchKey", "NotFound"):
                logger.warning(
                    f"Error checking object existence: path={path}, error={error_code}"
                )
            return False

    async def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        """Generate a presigned GET URL.

        The TTL is clamped to MAX_PRESIGNED_URL_TTL_SECONDS.

        Raises:
            StorageError: If the object is missing or URL generation fails
        """
        expires_in = max(1, min(ttl_seconds, MAX_PRESIGNED_URL_TTL_SECONDS))
        if expires_in != ttl_seconds:
            logger.debug(f"Clamped presigned URL TTL from {ttl_seconds}s to {expires_in}s")

        if not await self.object_exists(path):
            raise StorageError(f"Object not found: {path}")

        try:
            url = self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": path},
                ExpiresIn=expires_in,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"Presigned URL generation failed: path={path}, error={error_code}"
            )
            raise StorageError(f"Failed to generate presigned URL: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error generating presigned URL: {e}")
            raise StorageError(f"Failed to generate presigned URL: {e}")

        logger.info(f"Generated presigned URL: path={path}, expires_in={expires_in}s")
        return url

    def get_public_url(self, path: str) -> Optional[str]:
        if not self.public_base_url:
            return None
        return f"{self.public_base_url}/{path}"

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Called on application startup to fail fast on a missing bucket.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update KYC_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except Exception as e:
            raise StorageError(f"Failed to verify bucket: {e}")
