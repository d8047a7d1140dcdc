"""KYC record status state machine.

State Flow:
    DRAFT → PENDING → APPROVED | REJECTED

PENDING is re-entered whenever the seller resubmits (including after a
rejection). APPROVED and REJECTED are only reached through admin actions,
which may repeat or reverse an earlier decision.
"""

from typing import Dict, List, Optional

from .errors import StateTransitionError
from .models import KYCStatus


ALLOWED_TRANSITIONS: Dict[Optional[KYCStatus], List[KYCStatus]] = {
    None: [KYCStatus.DRAFT, KYCStatus.PENDING],
    KYCStatus.DRAFT: [KYCStatus.PENDING],
    KYCStatus.PENDING: [
        KYCStatus.PENDING,
        KYCStatus.APPROVED,
        KYCStatus.REJECTED,
    ],
    KYCStatus.APPROVED: [
        KYCStatus.PENDING,
        KYCStatus.APPROVED,
        KYCStatus.REJECTED,
    ],
    KYCStatus.REJECTED: [
        KYCStatus.PENDING,
        KYCStatus.APPROVED,
        KYCStatus.REJECTED,
    ],
}


def can_transition(
    current_status: Optional[KYCStatus],
    new_status: KYCStatus
) -> bool:
    """Check if a status transition is allowed without raising.

    Example:
        >>> can_transition(KYCStatus.REJECTED, KYCStatus.APPROVED)
        True
        >>> can_transition(KYCStatus.DRAFT, KYCStatus.APPROVED)
        False
    """
    return new_status in ALLOWED_TRANSITIONS.get(current_status, [])


def validate_transition(
    current_status: Optional[KYCStatus],
    new_status: KYCStatus
) -> None:
    """Validate that a status transition is allowed.

    Raises:
        StateTransitionError: If transition is not allowed
    """
    allowed = ALLOWED_TRANSITIONS.get(current_status, [])
    if new_status not in allowed:
        current = current_status.value if current_status else "none"
        raise StateTransitionError(
            f"Invalid KYC status transition: {current} -> {new_status.value}. "
            f"Allowed transitions from {current}: {[s.value for s in allowed]}"
        )


def get_allowed_transitions(status: Optional[KYCStatus]) -> List[KYCStatus]:
    return ALLOWED_TRANSITIONS.get(status, [])


def parse_status(value: Optional[str]) -> Optional[KYCStatus]:
    """Convert a stored status string to KYCStatus (None stays None)."""
    if value is None:
        return None
    if isinstance(value, KYCStatus):
        return value
    return KYCStatus(value)
