"""Seller KYC domain - validation, document uploads, submission, wizard, approval."""

from .models import (
    AccountType,
    AddressType,
    BusinessAddress,
    DocumentType,
    DocumentUploadResult,
    IdType,
    KYCFile,
    KYCFormData,
    KYCListResult,
    KYCRequirement,
    KYCStatus,
    KYCStatusResult,
    KYCSubmitResult,
    KYCTier,
    Session,
)
from .errors import (
    ErrorCode,
    KYCError,
    KYCValidationError,
    NotAuthenticatedError,
    PersistenceError,
    SessionExpiredError,
    StateTransitionError,
    UploadError,
)
from .status import ALLOWED_TRANSITIONS, can_transition, validate_transition
from .backoff import BackoffPolicy
from .upload_pipeline import DocumentUploadPipeline
from .submission import SubmissionReconciler
from .approval import ApprovalWorkflow
from .requirements import get_kyc_requirements

__all__ = [
    "AccountType",
    "AddressType",
    "BusinessAddress",
    "DocumentType",
    "DocumentUploadResult",
    "IdType",
    "KYCFile",
    "KYCFormData",
    "KYCListResult",
    "KYCRequirement",
    "KYCStatus",
    "KYCStatusResult",
    "KYCSubmitResult",
    "KYCTier",
    "Session",
    "ErrorCode",
    "KYCError",
    "KYCValidationError",
    "NotAuthenticatedError",
    "PersistenceError",
    "SessionExpiredError",
    "StateTransitionError",
    "UploadError",
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "validate_transition",
    "BackoffPolicy",
    "DocumentUploadPipeline",
    "SubmissionReconciler",
    "ApprovalWorkflow",
    "get_kyc_requirements",
]
