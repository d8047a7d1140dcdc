"""Ports consumed by the KYC domain (storage, identity, record store)."""

from .object_storage_port import KYCStoragePort, StorageError
from .session_port import SessionProviderPort
from .kyc_repository_port import KYCRepositoryPort, Row

__all__ = [
    "KYCStoragePort",
    "StorageError",
    "SessionProviderPort",
    "KYCRepositoryPort",
    "Row",
]
