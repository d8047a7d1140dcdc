"""Approval workflow for seller KYC records.

Admin operations that move a record through its lifecycle and cascade the
outcome to the seller's visible profile flags. Store errors are surfaced
verbatim in the result.

Writes are unsynchronised: concurrent approve/reject calls on the same record
resolve last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from observability.metrics import kyc_admin_actions_total

from .errors import ErrorCode, PersistenceError, StateTransitionError
from .models import KYCListResult, KYCStatus, KYCSubmitResult
from .ports import KYCRepositoryPort
from .status import parse_status, validate_transition


logger = logging.getLogger(__name__)

# Columns an admin patch may never write
PROTECTED_FIELDS = frozenset({"id", "kyc_status", "created_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalWorkflow:
    """Admin approve / reject / update / delete over the KYC record store.

    Usage:
        workflow = ApprovalWorkflow(repository)
        result = await workflow.approve(kyc_id, seller_id, admin_id)
    """

    def __init__(
        self,
        repository: KYCRepositoryPort,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.clock = clock

    async def _transition(
        self,
        action: str,
        kyc_id: str,
        seller_id: str,
        new_status: KYCStatus,
        patch: Dict[str, Any],
        profile_flags: Dict[str, Any],
    ) -> KYCSubmitResult:
        try:
            record = await self.repository.select_one({"id": kyc_id})
            if record is None:
                kyc_admin_actions_total.labels(action=action, outcome="error").inc()
                return KYCSubmitResult(
                    success=False,
                    error=f"KYC record {kyc_id} not found",
                    error_code=ErrorCode.NOT_FOUND,
                )

            if record.get("seller_id") != seller_id:
                kyc_admin_actions_total.labels(action=action, outcome="error").inc()
                logger.warning(
                    f"KYC {action} refused: record belongs to another seller",
                    extra={"kyc_id": kyc_id, "seller_id": seller_id}
                )
                return KYCSubmitResult(
                    success=False,
                    error=f"KYC record {kyc_id} does not belong to seller {seller_id}",
                    error_code=ErrorCode.VALIDATION,
                )

            validate_transition(parse_status(record.get("kyc_status")), new_status)

            await self.repository.update({"id": kyc_id}, patch)
        except StateTransitionError as e:
            kyc_admin_actions_total.labels(action=action, outcome="error").inc()
            logger.warning(f"KYC {action} refused: {e}", extra={"kyc_id": kyc_id})
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.INVALID_TRANSITION)
        except PersistenceError as e:
            kyc_admin_actions_total.labels(action=action, outcome="error").inc()
            logger.error(f"KYC {action} failed: {e}", extra={"kyc_id": kyc_id})
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.PERSISTENCE)

        # Profile cascade does not roll back the decision
        try:
            await self.repository.update_seller_profile(seller_id, profile_flags)
        except PersistenceError as e:
            logger.error(
                f"KYC {action}: profile flag cascade failed: {e}",
                extra={"kyc_id": kyc_id, "seller_id": seller_id}
            )

        kyc_admin_actions_total.labels(action=action, outcome="success").inc()
        logger.info(
            f"KYC {action}d",
            extra={"kyc_id": kyc_id, "seller_id": seller_id}
        )
        return KYCSubmitResult(success=True, kyc_id=kyc_id)

    async def approve(self, kyc_id: str, seller_id: str, admin_id: str) -> KYCSubmitResult:
        """Approve a record, clear any rejection reason, mark the seller verified."""
        now = self.clock()
        return await self._transition(
            "approve",
            kyc_id,
            seller_id,
            KYCStatus.APPROVED,
            patch={
                "kyc_status": KYCStatus.APPROVED.value,
                "verified_by_admin": admin_id,
                "verified_at": now,
                "rejection_reason": None,
                "updated_at": now,
            },
            profile_flags={"is_verified": True, "approved": True},
        )

    async def reject(self, kyc_id: str, seller_id: str, reason: str) -> KYCSubmitResult:
        """Reject a record with a mandatory reason, mark the seller unverified."""
        if not reason or not reason.strip():
            kyc_admin_actions_total.labels(action="reject", outcome="error").inc()
            return KYCSubmitResult(
                success=False,
                error="A rejection reason is required",
                error_code=ErrorCode.VALIDATION,
            )

        now = self.clock()
        return await self._transition(
            "reject",
            kyc_id,
            seller_id,
            KYCStatus.REJECTED,
            patch={
                "kyc_status": KYCStatus.REJECTED.value,
                "rejection_reason": reason,
                "verified_at": now,
                "updated_at": now,
            },
            profile_flags={"is_verified": False, "approved": False},
        )

    async def update(self, kyc_id: str, fields: Dict[str, Any]) -> KYCSubmitResult:
        """Patch arbitrary admin-editable fields. Never changes kyc_status."""
        patch = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        if not patch:
            return KYCSubmitResult(success=True, kyc_id=kyc_id)

        patch["updated_at"] = self.clock()
        try:
            await self.repository.update({"id": kyc_id}, patch)
        except PersistenceError as e:
            kyc_admin_actions_total.labels(action="update", outcome="error").inc()
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.PERSISTENCE)

        kyc_admin_actions_total.labels(action="update", outcome="success").inc()
        return KYCSubmitResult(success=True, kyc_id=kyc_id)

    async def delete(self, kyc_id: str) -> KYCSubmitResult:
        """Hard delete a record. Seller profile flags are left as they are."""
        try:
            await self.repository.delete({"id": kyc_id})
        except PersistenceError as e:
            kyc_admin_actions_total.labels(action="delete", outcome="error").inc()
            return KYCSubmitResult(success=False, error=str(e), error_code=ErrorCode.PERSISTENCE)

        kyc_admin_actions_total.labels(action="delete", outcome="success").inc()
        logger.info("KYC record deleted", extra={"kyc_id": kyc_id})
        return KYCSubmitResult(success=True, kyc_id=kyc_id)

    async def list_submissions(self) -> KYCListResult:
        """All records, newest submission first."""
        try:
            return KYCListResult(data=await self.repository.list_all())
        except PersistenceError as e:
            return KYCListResult(data=[], error=str(e))
