"""Seller-facing KYC API endpoints

Provides:
- GET  /kyc/me                               current record (or null)
- GET  /kyc/requirements                     bulk verification checklist
- POST /kyc/documents                        single document upload with retry
- POST /kyc/submit                           full wizard submission
- POST /kyc/verification-documents/{doc_id}  bulk verification slot upload
- POST /kyc/verification/finalize            bulk verification submission
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from auth.dependencies import get_current_seller
from domain.kyc.errors import ErrorCode, KYCValidationError
from domain.kyc.models import DocumentType, KYCFile, Session
from domain.kyc.requirements import BASE_REQUIREMENTS, get_kyc_requirements
from domain.kyc.submission import SubmissionReconciler
from domain.kyc.upload_pipeline import DocumentUploadPipeline
from domain.kyc.validation import normalize_identifier
from domain.kyc.wizard import UPPERCASE_FIELDS, validate_form
from .dependencies import get_reconciler, get_upload_pipeline
from .schemas import (
    DocumentUploadResponse,
    ErrorResponse,
    FinalizeVerificationRequest,
    KYCFormPayload,
    KYCStatusResponse,
    KYCSubmitResponse,
    RequirementResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kyc", tags=["KYC"])

CurrentSeller = Annotated[Session, Depends(get_current_seller)]

ERROR_STATUS = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.PERSISTENCE: status.HTTP_502_BAD_GATEWAY,
}

VERIFICATION_DOC_IDS = {requirement.id for requirement in BASE_REQUIREMENTS}


def status_for(error_code: Optional[ErrorCode]) -> int:
    return ERROR_STATUS.get(error_code, status.HTTP_502_BAD_GATEWAY)


async def read_upload(upload: Optional[UploadFile]) -> Optional[KYCFile]:
    """Buffer a multipart file into a KYCFile (None when absent)."""
    if upload is None:
        return None
    content = await upload.read()
    return KYCFile(
        file_name=upload.filename or "",
        content=content,
        mime_type=upload.content_type or "application/octet-stream",
    )


@router.get("/me", response_model=KYCStatusResponse)
async def get_my_kyc(
    session: CurrentSeller,
    reconciler: Annotated[SubmissionReconciler, Depends(get_reconciler)],
):
    """Current seller's KYC record. `kyc_data` is null for a first-time seller."""
    result = await reconciler.get_seller_kyc_status(session.user_id)
    if result.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)
    return KYCStatusResponse(kyc_data=result.kyc_data)


@router.get("/requirements", response_model=List[RequirementResponse])
async def list_requirements(
    session: CurrentSeller,
    country: str = Query("IN", min_length=2, max_length=2),
):
    return [RequirementResponse.model_validate(r) for r in get_kyc_requirements(country)]


@router.post(
    "/documents",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def upload_document(
    session: CurrentSeller,
    pipeline: Annotated[DocumentUploadPipeline, Depends(get_upload_pipeline)],
    doc_type: Annotated[DocumentType, Form(...)],
    file: Annotated[UploadFile, File(...)],
):
    """Upload one KYC document into the seller's folder of the KYC bucket.

    Retries storage failures with linear back-off and returns a signed URL
    (or public URL, or the bare storage path).

    Example:
        curl -X POST https://api.example.com/api/v1/kyc/documents \\
             -H "Authorization: Bearer $TOKEN" \\
             -F "doc_type=id_document" \\
             -F "file=@pan.pdf"
    """
    kyc_file = await read_upload(file)
    result = await pipeline.upload(session.user_id, kyc_file, doc_type.value)
    if not result.success:
        raise HTTPException(status_code=status_for(result.error_code), detail=result.error)
    return DocumentUploadResponse(url=result.url)


@router.post(
    "/submit",
    response_model=KYCSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def submit_kyc(
    session: CurrentSeller,
    reconciler: Annotated[SubmissionReconciler, Depends(get_reconciler)],
    form: Annotated[str, Form(..., description="KYC form as JSON")],
    id_document: Annotated[Optional[UploadFile], File()] = None,
    address_proof: Annotated[Optional[UploadFile], File()] = None,
    bank_statement: Annotated[Optional[UploadFile], File()] = None,
):
    """Submit the complete KYC wizard for the authenticated seller.

    Every wizard step is re-validated server side. Documents may be sent as
    files or, on a retry, as the `*_url` values returned by a failed attempt.
    On failure the body carries `document_urls` for the documents that did
    upload.
    """
    try:
        payload = KYCFormPayload.model_validate_json(form)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "message": "Invalid form payload",
                "details": e.errors(include_url=False, include_context=False),
            },
        )

    for field_name in UPPERCASE_FIELDS:
        setattr(payload, field_name, normalize_identifier(getattr(payload, field_name)))

    form_data = payload.to_form_data(
        id_document_file=await read_upload(id_document),
        address_proof_file=await read_upload(address_proof),
        bank_statement_file=await read_upload(bank_statement),
    )

    errors = validate_form(form_data)
    if errors:
        raise KYCValidationError(errors)

    result = await reconciler.submit(form_data, session.user_id)
    if not result.success:
        return JSONResponse(
            status_code=status_for(result.error_code),
            content={
                "error": (result.error_code or ErrorCode.PERSISTENCE).value,
                "message": result.error,
                "document_urls": result.document_urls,
            },
        )

    return KYCSubmitResponse(kyc_id=result.kyc_id, document_urls=result.document_urls)


@router.post(
    "/verification-documents/{doc_id}",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_verification_document(
    doc_id: str,
    session: CurrentSeller,
    pipeline: Annotated[DocumentUploadPipeline, Depends(get_upload_pipeline)],
    file: Annotated[UploadFile, File(...)],
):
    """Upload one slot of the bulk verification checklist (single attempt)."""
    if doc_id not in VERIFICATION_DOC_IDS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown verification document: {doc_id}",
        )

    kyc_file = await read_upload(file)
    result = await pipeline.upload_verification_document(session.user_id, doc_id, kyc_file)
    if not result.success:
        raise HTTPException(status_code=status_for(result.error_code), detail=result.error)
    return DocumentUploadResponse(url=result.url)


@router.post("/verification/finalize", response_model=KYCSubmitResponse)
async def finalize_verification(
    request: FinalizeVerificationRequest,
    session: CurrentSeller,
    reconciler: Annotated[SubmissionReconciler, Depends(get_reconciler)],
):
    """Record the uploaded verification documents and move the record to pending."""
    result = await reconciler.finalize_verification_submission(
        session.user_id, request.document_urls
    )
    if not result.success:
        raise HTTPException(status_code=status_for(result.error_code), detail=result.error)
    return KYCSubmitResponse(kyc_id=result.kyc_id or "", document_urls=request.document_urls)
