"""KYC wizard state machine.

The wizard is a value object (step, data, errors) moved by reducer functions.
Reducers never mutate their input and never raise. An event that is not
allowed in the current step, or that names an unknown field, returns the
state unchanged.

State Flow:
    TAX → IDENTITY → ADDRESS → BANK → COMPLIANCE → SUBMITTING → SUBMITTED | FAILED
    FAILED → (retry) COMPLIANCE, or submit again directly
"""

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

from .models import BusinessAddress, KYCFile, KYCFormData, KYCSubmitResult
from .submission import SubmissionReconciler
from .validation import (
    StepValidator,
    normalize_identifier,
    validate_address_step,
    validate_bank_step,
    validate_compliance_step,
    validate_identity_step,
    validate_tax_step,
)


logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    TAX = "tax"
    IDENTITY = "identity"
    ADDRESS = "address"
    BANK = "bank"
    COMPLIANCE = "compliance"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


FORM_STEPS = [
    WizardStep.TAX,
    WizardStep.IDENTITY,
    WizardStep.ADDRESS,
    WizardStep.BANK,
    WizardStep.COMPLIANCE,
]

STEP_VALIDATORS: Dict[WizardStep, StepValidator] = {
    WizardStep.TAX: validate_tax_step,
    WizardStep.IDENTITY: validate_identity_step,
    WizardStep.ADDRESS: validate_address_step,
    WizardStep.BANK: validate_bank_step,
    WizardStep.COMPLIANCE: validate_compliance_step,
}

# Fields stored upper-case regardless of how they were typed
UPPERCASE_FIELDS = {"pan", "gstin", "ifsc_code"}

FILE_FIELDS = {"id_document_file", "address_proof_file", "bank_statement_file"}

FORM_FIELDS = frozenset(f.name for f in fields(KYCFormData))
ADDRESS_FIELDS = frozenset(f.name for f in fields(BusinessAddress))

# Key used in `errors` for the consolidated submission banner
SUBMIT_ERROR_KEY = "submit"


@dataclass(frozen=True)
class WizardState:
    """Snapshot of the wizard.

    Attributes:
        step: Current step
        data: Everything entered so far
        errors: Field -> message for the current step, plus SUBMIT_ERROR_KEY
            when the last submission failed
        seller_id: Explicit seller id passed to the reconciler (optional)
        kyc_id: Record id once submitted
    """
    step: WizardStep
    data: KYCFormData
    errors: Dict[str, str] = field(default_factory=dict)
    seller_id: Optional[str] = None
    kyc_id: Optional[str] = None

    @property
    def step_number(self) -> int:
        if self.step in FORM_STEPS:
            return FORM_STEPS.index(self.step) + 1
        return len(FORM_STEPS)

    @property
    def progress_percentage(self) -> float:
        return self.step_number / len(FORM_STEPS) * 100

    @property
    def submit_error(self) -> Optional[str]:
        return self.errors.get(SUBMIT_ERROR_KEY)


def start_wizard(
    email: str,
    phone: str,
    full_name: str,
    country: str,
    seller_id: Optional[str] = None,
) -> WizardState:
    """Create the initial state, pre-filled from the seller's signup profile."""
    data = KYCFormData(
        email=email,
        phone=phone,
        full_name=full_name,
        country=country,
        business_address=BusinessAddress(
            full_name=full_name,
            phone_number=phone,
            email=email,
            country=country,
        ),
    )
    return WizardState(step=WizardStep.TAX, data=data, seller_id=seller_id)


def _without_error(errors: Dict[str, str], field_name: str) -> Dict[str, str]:
    return {k: v for k, v in errors.items() if k != field_name}


def _is_editable(state: WizardState) -> bool:
    return state.step in FORM_STEPS or state.step == WizardStep.FAILED


def update_field(state: WizardState, field_name: str, value: Any) -> WizardState:
    """Set one top-level form field and clear its error."""
    if not _is_editable(state) or field_name not in FORM_FIELDS:
        return state
    if field_name in UPPERCASE_FIELDS and isinstance(value, str):
        value = normalize_identifier(value)
    data = replace(state.data, **{field_name: value})
    return replace(state, data=data, errors=_without_error(state.errors, field_name))


def update_address_field(state: WizardState, field_name: str, value: Any) -> WizardState:
    """Set one business address field and clear its error."""
    if not _is_editable(state) or field_name not in ADDRESS_FIELDS:
        return state
    address = replace(state.data.business_address, **{field_name: value})
    data = replace(state.data, business_address=address)
    return replace(state, data=data, errors=_without_error(state.errors, field_name))


def attach_file(state: WizardState, field_name: str, file: Optional[KYCFile]) -> WizardState:
    """Attach (or clear with None) a document to one of the file slots."""
    if field_name not in FILE_FIELDS:
        return state
    return update_field(state, field_name, file)


def validate_current_step(state: WizardState) -> Dict[str, str]:
    validator = STEP_VALIDATORS.get(state.step)
    if validator is None:
        return {}
    return validator(state.data)


def validate_form(data: KYCFormData) -> Dict[str, str]:
    """Run every step's rules over a complete snapshot (server-side submit)."""
    errors: Dict[str, str] = {}
    for step in FORM_STEPS:
        errors.update(STEP_VALIDATORS[step](data))
    return errors


def next_step(state: WizardState) -> WizardState:
    """Validate the current step; advance and clear errors only if it passes.

    COMPLIANCE has no next step: use submit().
    """
    if state.step not in FORM_STEPS or state.step == WizardStep.COMPLIANCE:
        return state

    errors = validate_current_step(state)
    if errors:
        logger.debug(f"Wizard step {state.step.value} blocked: {sorted(errors)}")
        return replace(state, errors=errors)

    following = FORM_STEPS[FORM_STEPS.index(state.step) + 1]
    return replace(state, step=following, errors={})


def previous_step(state: WizardState) -> WizardState:
    """Go back one step without validating. Not possible from the first step."""
    if state.step not in FORM_STEPS or state.step == WizardStep.TAX:
        return state
    preceding = FORM_STEPS[FORM_STEPS.index(state.step) - 1]
    return replace(state, step=preceding, errors={})


def retry(state: WizardState) -> WizardState:
    """Return from FAILED to the compliance step with all data intact."""
    if state.step != WizardStep.FAILED:
        return state
    return replace(state, step=WizardStep.COMPLIANCE)


def begin_submit(state: WizardState) -> WizardState:
    """Re-validate every step and enter SUBMITTING.

    Fields stay editable at COMPLIANCE and FAILED, so earlier steps are
    checked again. The first failing step becomes current with its errors.
    """
    if state.step not in (WizardStep.COMPLIANCE, WizardStep.FAILED):
        return state

    for step in FORM_STEPS:
        errors = STEP_VALIDATORS[step](state.data)
        if errors:
            logger.debug(f"Wizard submit blocked at {step.value}: {sorted(errors)}")
            return replace(state, step=step, errors=errors)

    return replace(state, step=WizardStep.SUBMITTING, errors={})


def complete_submit(state: WizardState, result: KYCSubmitResult) -> WizardState:
    """Apply the reconciler's result.

    Documents uploaded during the call are recorded as URLs and their file
    handles dropped, so a retry does not upload them again.
    """
    if state.step != WizardStep.SUBMITTING:
        return state

    data = state.data
    if result.document_urls:
        changes: Dict[str, Any] = {}
        for url_field, url in result.document_urls.items():
            changes[url_field] = url
            changes[url_field.replace("_url", "_file")] = None
        data = replace(data, **changes)

    if result.success:
        return replace(state, step=WizardStep.SUBMITTED, data=data, errors={}, kyc_id=result.kyc_id)

    message = result.error or "Failed to submit KYC form. Please try again."
    return replace(state, step=WizardStep.FAILED, data=data, errors={SUBMIT_ERROR_KEY: message})


async def submit(state: WizardState, reconciler: SubmissionReconciler) -> WizardState:
    """Run the terminal transition: validate, submit, land in SUBMITTED or FAILED."""
    submitting = begin_submit(state)
    if submitting.step != WizardStep.SUBMITTING:
        return submitting

    result = await reconciler.submit(submitting.data, submitting.seller_id)
    return complete_submit(submitting, result)
