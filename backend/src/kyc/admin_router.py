"""Admin KYC review endpoints

All endpoints require the `admin` role. Store errors are returned verbatim.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from auth.dependencies import get_current_admin
from domain.kyc.approval import ApprovalWorkflow
from domain.kyc.models import KYCSubmitResult, Session
from .dependencies import get_approval_workflow
from .router import status_for
from .schemas import (
    ApproveRequest,
    KYCActionResponse,
    KYCListResponse,
    KYCUpdateRequest,
    RejectRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/kyc", tags=["KYC Admin"])

CurrentAdmin = Annotated[Session, Depends(get_current_admin)]
Workflow = Annotated[ApprovalWorkflow, Depends(get_approval_workflow)]


def _to_response(result: KYCSubmitResult) -> KYCActionResponse:
    if not result.success:
        raise HTTPException(status_code=status_for(result.error_code), detail=result.error)
    return KYCActionResponse(success=True, kyc_id=result.kyc_id)


@router.get("", response_model=KYCListResponse)
async def list_submissions(admin: CurrentAdmin, workflow: Workflow):
    """Every KYC record, newest submission first."""
    result = await workflow.list_submissions()
    if result.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)
    return KYCListResponse(data=result.data, count=len(result.data))


@router.post("/{kyc_id}/approve", response_model=KYCActionResponse)
async def approve_kyc(
    kyc_id: str,
    request: ApproveRequest,
    admin: CurrentAdmin,
    workflow: Workflow,
):
    """Approve a record and mark the seller verified and approved."""
    logger.info(f"Admin {admin.user_id} approving KYC {kyc_id}", extra={"kyc_id": kyc_id})
    return _to_response(await workflow.approve(kyc_id, request.seller_id, admin.user_id))


@router.post("/{kyc_id}/reject", response_model=KYCActionResponse)
async def reject_kyc(
    kyc_id: str,
    request: RejectRequest,
    admin: CurrentAdmin,
    workflow: Workflow,
):
    """Reject a record with a reason and mark the seller unverified."""
    logger.info(f"Admin {admin.user_id} rejecting KYC {kyc_id}", extra={"kyc_id": kyc_id})
    return _to_response(await workflow.reject(kyc_id, request.seller_id, request.reason))


@router.patch("/{kyc_id}", response_model=KYCActionResponse)
async def update_kyc(
    kyc_id: str,
    request: KYCUpdateRequest,
    admin: CurrentAdmin,
    workflow: Workflow,
):
    fields = request.model_dump(exclude_unset=True, mode="json")
    return _to_response(await workflow.update(kyc_id, fields))


@router.delete("/{kyc_id}", response_model=KYCActionResponse)
async def delete_kyc(kyc_id: str, admin: CurrentAdmin, workflow: Workflow):
    """Hard delete. The seller's profile flags are left unchanged."""
    return _to_response(await workflow.delete(kyc_id))
