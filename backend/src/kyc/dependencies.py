"""FastAPI dependencies wiring the KYC domain services to infrastructure.

Storage is built once per process; repository, session provider and the
services are built per request.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session as DBSession

from auth.dependencies import security
from config import get_settings
from database import get_db
from domain.kyc.approval import ApprovalWorkflow
from domain.kyc.backoff import BackoffPolicy
from domain.kyc.ports import KYCRepositoryPort, KYCStoragePort, SessionProviderPort
from domain.kyc.submission import SubmissionReconciler
from domain.kyc.upload_pipeline import DocumentUploadPipeline
from infrastructure.identity.jwt_session_provider import JWTSessionProvider
from infrastructure.repositories.kyc_repository import SqlAlchemyKYCRepository
from infrastructure.storage.s3_storage_adapter import S3KYCStorageAdapter
from infrastructure.storage.storage_config import load_storage_config_from_env


@lru_cache()
def get_storage() -> KYCStoragePort:
    """Dependency for the KYC bucket adapter."""
    config = load_storage_config_from_env()
    return S3KYCStorageAdapter(
        endpoint_url=config.endpoint_url,
        access_key=config.access_key,
        secret_key=config.secret_key,
        bucket_name=config.bucket_name,
        region=config.region,
        public_base_url=config.public_base_url,
    )


def get_repository(db: DBSession = Depends(get_db)) -> KYCRepositoryPort:
    return SqlAlchemyKYCRepository(db)


def get_session_provider(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> SessionProviderPort:
    return JWTSessionProvider(credentials.credentials if credentials else None)


def get_upload_pipeline(
    storage: KYCStoragePort = Depends(get_storage),
    session_provider: SessionProviderPort = Depends(get_session_provider),
) -> DocumentUploadPipeline:
    settings = get_settings()
    return DocumentUploadPipeline(
        storage=storage,
        session_provider=session_provider,
        backoff=BackoffPolicy(
            max_attempts=settings.KYC_UPLOAD_MAX_ATTEMPTS,
            base_delay_ms=settings.KYC_UPLOAD_BACKOFF_MS,
        ),
        signed_url_ttl_seconds=settings.KYC_SIGNED_URL_TTL_SECONDS,
        max_file_size=settings.KYC_MAX_DOCUMENT_BYTES,
    )


def get_reconciler(
    pipeline: DocumentUploadPipeline = Depends(get_upload_pipeline),
    repository: KYCRepositoryPort = Depends(get_repository),
    session_provider: SessionProviderPort = Depends(get_session_provider),
) -> SubmissionReconciler:
    return SubmissionReconciler(pipeline, repository, session_provider)


def get_approval_workflow(
    repository: KYCRepositoryPort = Depends(get_repository),
) -> ApprovalWorkflow:
    return ApprovalWorkflow(repository)
