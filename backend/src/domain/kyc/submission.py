"""Submission Reconciler - turns a wizard snapshot into one KYC record per seller.

Handles:
- Resolving the seller identity (explicit id, else the authenticated user)
- Uploading attached documents sequentially, stopping at the first failure
- Stripping raw file handles before persistence
- Upserting the record keyed by seller_id with kyc_status = pending

Also hosts the bulk verification entry point and the seller status lookup.
All public methods return result values and never raise.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from observability.metrics import kyc_submissions_total

from .errors import ErrorCode, NotAuthenticatedError, PersistenceError
from .models import (
    DocumentType,
    KYCFormData,
    KYCStatus,
    KYCStatusResult,
    KYCSubmitResult,
)
from .ports import KYCRepositoryPort, SessionProviderPort
from .upload_pipeline import DocumentUploadPipeline


logger = logging.getLogger(__name__)


# (document type, form file field, form/record url field, label for errors)
DOCUMENT_SLOTS: List[Tuple[DocumentType, str, str, str]] = [
    (DocumentType.ID_DOCUMENT, "id_document_file", "id_document_url", "ID document"),
    (DocumentType.ADDRESS_PROOF, "address_proof_file", "address_proof_url", "Address proof"),
    (DocumentType.BANK_STATEMENT, "bank_statement_file", "bank_statement_url", "Bank statement"),
]

# Bulk verification document ids mapped to dedicated record columns.
# Each column takes the first id present.
VERIFICATION_COLUMN_MAP: Dict[str, List[str]] = {
    "id_document_url": ["tax-id"],
    "address_proof_url": ["addr-f", "addr-b"],
    "bank_statement_url": ["bank-stmt"],
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_kyc_row(
    form: KYCFormData,
    seller_id: str,
    document_urls: Dict[str, str],
    submitted_at: datetime,
) -> Dict[str, Any]:
    """Assemble the persistable row from a form snapshot.

    Raw file handles are never copied. `rejection_reason` is not touched, so
    a reason from an earlier review cycle survives resubmission.
    """
    return {
        "seller_id": seller_id,
        "email": form.email,
        "phone": form.phone,
        "full_name": form.full_name,
        "country": form.country,
        "pan": form.pan,
        "gstin": form.gstin or None,
        "id_type": form.id_type.value,
        "id_number": form.id_number,
        "id_document_url": document_urls.get("id_document_url", ""),
        "business_address": form.business_address.to_dict(),
        "address_proof_url": document_urls.get("address_proof_url", ""),
        "bank_holder_name": form.bank_holder_name,
        "account_number": form.account_number,
        "account_type": form.account_type.value,
        "ifsc_code": form.ifsc_code,
        "bank_statement_url": document_urls.get("bank_statement_url", ""),
        "pep_declaration": form.pep_declaration,
        "sanctions_check": form.sanctions_check,
        "aml_compliance": form.aml_compliance,
        "tax_compliance": form.tax_compliance,
        "terms_accepted": form.terms_accepted,
        "kyc_status": KYCStatus.PENDING.value,
        "kyc_tier": int(form.kyc_tier),
        "submitted_at": submitted_at,
        "updated_at": submitted_at,
    }


class SubmissionReconciler:
    """Orchestrates document uploads and the per-seller record upsert.

    Usage:
        reconciler = SubmissionReconciler(pipeline, repository, session_provider)
        result = await reconciler.submit(form_data, seller_id)
        if not result.success:
            show_banner(result.error)
    """

    def __init__(
        self,
        pipeline: DocumentUploadPipeline,
        repository: KYCRepositoryPort,
        session_provider: SessionProviderPort,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.pipeline = pipeline
        self.repository = repository
        self.session_provider = session_provider
        self.clock = clock

    async def resolve_seller_id(self, seller_id: Optional[str]) -> str:
        """Use the supplied id, else the authenticated identity.

        Raises:
            NotAuthenticatedError: If neither resolves
        """
        if seller_id:
            return seller_id

        try:
            resolved = await self.session_provider.get_user_id()
        except Exception as e:
            logger.warning(f"Could not resolve authenticated seller: {e}")
            resolved = None

        if not resolved:
            raise NotAuthenticatedError()
        return resolved

    async def submit(
        self,
        form: KYCFormData,
        seller_id: Optional[str] = None,
    ) -> KYCSubmitResult:
        """Upload attached documents, then upsert the seller's KYC record.

        Args:
            form: Wizard snapshot (may carry files and/or earlier URLs)
            seller_id: Explicit seller id; falls back to the session user

        Returns:
            KYCSubmitResult: kyc_id on success; on failure the error names the
                failing document. document_urls lists what was uploaded.
        """
        uploaded: Dict[str, str] = {}
        try:
            resolved_seller_id = await self.resolve_seller_id(seller_id)

            document_urls = {
                url_field: getattr(form, url_field) or ""
                for _, _, url_field, _ in DOCUMENT_SLOTS
            }

            for doc_type, file_field, url_field, label in DOCUMENT_SLOTS:
                file = getattr(form, file_field)
                if file is None:
                    continue

                result = await self.pipeline.upload(resolved_seller_id, file, doc_type.value)
                if not result.success:
                    kyc_submissions_total.labels(source="wizard", outcome="error").inc()
                    logger.warning(
                        f"KYC submission stopped: {label} upload failed",
                        extra={"seller_id": resolved_seller_id, "doc_type": doc_type.value}
                    )
                    return KYCSubmitResult(
                        success=False,
                        error=f"{label} upload failed: {result.error}",
                        error_code=result.error_code,
                        document_urls=uploaded,
                    )

                document_urls[url_field] = result.url or ""
                uploaded[url_field] = result.url or ""

            row = build_kyc_row(form, resolved_seller_id, document_urls, self.clock())
            kyc_id = await self.repository.upsert(row, conflict_key="seller_id")

        except NotAuthenticatedError as e:
            kyc_submissions_total.labels(source="wizard", outcome="error").inc()
            return KYCSubmitResult(
                success=False, error=str(e), error_code=ErrorCode.NOT_AUTHENTICATED
            )
        except PersistenceError as e:
            kyc_submissions_total.labels(source="wizard", outcome="error").inc()
            logger.error(f"KYC upsert failed: {e}")
            return KYCSubmitResult(
                success=False,
                error=str(e),
                error_code=ErrorCode.PERSISTENCE,
                document_urls=uploaded,
            )
        except Exception as e:
            kyc_submissions_total.labels(source="wizard", outcome="error").inc()
            logger.error(f"Unexpected error submitting KYC: {e}", exc_info=True)
            return KYCSubmitResult(
                success=False,
                error=str(e),
                error_code=ErrorCode.PERSISTENCE,
                document_urls=uploaded,
            )

        kyc_submissions_total.labels(source="wizard", outcome="success").inc()
        logger.info(
            "KYC submitted",
            extra={"seller_id": resolved_seller_id, "kyc_id": kyc_id}
        )
        return KYCSubmitResult(success=True, kyc_id=kyc_id, document_urls=uploaded)

    async def finalize_verification_submission(
        self,
        seller_id: str,
        document_urls: Dict[str, str],
    ) -> KYCSubmitResult:
        """Record already-uploaded verification documents for a seller.

        Known ids are mapped to dedicated columns; the complete map is merged
        into business_address.verification_documents without dropping the
        existing address fields. Read-before-write: update when a record
        exists, otherwise insert a minimal one. Finally resets the seller's
        profile is_verified flag until an admin approves.
        """
        if not seller_id:
            return KYCSubmitResult(
                success=False,
                error=str(NotAuthenticatedError()),
                error_code=ErrorCode.NOT_AUTHENTICATED,
            )

        now = self.clock()
        column_values: Dict[str, Any] = {}
        for column, doc_ids in VERIFICATION_COLUMN_MAP.items():
            for doc_id in doc_ids:
                if document_urls.get(doc_id):
                    column_values[column] = document_urls[doc_id]
                    break

        verification_docs = dict(document_urls)

        try:
            existing = await self.repository.select_one({"seller_id": seller_id})

            if existing:
                current_address = dict(existing.get("business_address") or {})
                current_address["verification_documents"] = verification_docs
                await self.repository.update(
                    {"seller_id": seller_id},
                    {
                        "kyc_status": KYCStatus.PENDING.value,
                        "submitted_at": now,
                        "updated_at": now,
                        "business_address": current_address,
                        **column_values,
                    },
                )
                kyc_id = existing.get("id")
            else:
                kyc_id = await self.repository.insert({
                    "seller_id": seller_id,
                    "email": "",
                    "kyc_status": KYCStatus.PENDING.value,
                    "submitted_at": now,
                    "business_address": {"verification_documents": verification_docs},
                    **column_values,
                })

            await self.repository.update_seller_profile(seller_id, {"is_verified": False})

        except PersistenceError as e:
            kyc_submissions_total.labels(source="bulk", outcome="error").inc()
            logger.error(f"Verification finalisation failed: {e}", extra={"seller_id": seller_id})
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.PERSISTENCE)
        except Exception as e:
            kyc_submissions_total.labels(source="bulk", outcome="error").inc()
            logger.error(f"Unexpected error finalising verification: {e}", exc_info=True)
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.PERSISTENCE)

        kyc_submissions_total.labels(source="bulk", outcome="success").inc()
        return KYCSubmitResult(success=True, kyc_id=str(kyc_id) if kyc_id else None)

    async def get_seller_kyc_status(self, seller_id: str) -> KYCStatusResult:
        """Fetch the seller's record. No record is not an error."""
        try:
            row = await self.repository.select_one({"seller_id": seller_id})
        except PersistenceError as e:
            return KYCStatusResult(kyc_data=None, error=str(e))
        return KYCStatusResult(kyc_data=row, error=None)
