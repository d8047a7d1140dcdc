"""Validation rules for seller KYC data.

Pure predicates over identifiers and uploaded files. Every rule returns a
(is_valid, error_message) tuple; step validators aggregate them into a
field -> message map. Nothing here raises.
"""

import re
from typing import Callable, Dict, Optional, Tuple

from .models import KYCFile, KYCFormData


MB = 1024 * 1024

# Wizard limits per document slot
MAX_ID_DOCUMENT_SIZE = 5 * MB
MAX_ADDRESS_PROOF_SIZE = 5 * MB
MAX_BANK_STATEMENT_SIZE = 10 * MB

# Limit for the generic KYC document bucket upload
MAX_KYC_DOCUMENT_SIZE = 10 * MB

ALLOWED_KYC_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
ACCOUNT_NUMBER_PATTERN = re.compile(r"^[0-9]{9,18}$")

ValidationResult = Tuple[bool, Optional[str]]


def normalize_identifier(value: str) -> str:
    """Trim and upper-case an identifier as the form does on input.

    Example:
        >>> normalize_identifier(' aaapl5055k ')
        'AAAPL5055K'
    """
    return (value or "").strip().upper()


def validate_pan(pan: str) -> ValidationResult:
    """Validate a PAN: 5 letters, 4 digits, 1 letter, upper case.

    Example:
        >>> validate_pan('AAAPL5055K')
        (True, None)
        >>> validate_pan('AAAPL505K')
        (False, 'Invalid PAN format (e.g., AAAPL5055K)')
    """
    if not pan or not pan.strip():
        return False, "PAN is required"
    if not PAN_PATTERN.match(pan):
        return False, "Invalid PAN format (e.g., AAAPL5055K)"
    return True, None


def validate_gstin(gstin: Optional[str]) -> ValidationResult:
    """Validate an optional 15-character GSTIN. Blank passes."""
    if not gstin or not gstin.strip():
        return True, None
    if not GSTIN_PATTERN.match(gstin):
        return False, "Invalid GSTIN format"
    return True, None


def validate_ifsc(ifsc: str) -> ValidationResult:
    """Validate an IFSC: 4 letters, a literal '0', 6 alphanumerics.

    Example:
        >>> validate_ifsc('SBIN0001234')
        (True, None)
        >>> validate_ifsc('SBIN1001234')
        (False, 'Invalid IFSC code format')
    """
    if not ifsc or not ifsc.strip():
        return False, "IFSC code is required"
    if not IFSC_PATTERN.match(ifsc):
        return False, "Invalid IFSC code format"
    return True, None


def validate_account_number(account_number: str) -> ValidationResult:
    """Validate a bank account number: 9-18 digits, digits only."""
    if not account_number or not account_number.strip():
        return False, "Account number is required"
    if not ACCOUNT_NUMBER_PATTERN.match(account_number):
        return False, "Invalid account number (9-18 digits)"
    return True, None


def is_allowed_mime_type(mime_type: Optional[str]) -> bool:
    return mime_type in ALLOWED_KYC_MIME_TYPES


def validate_file_size(size_bytes: int, max_size: int) -> ValidationResult:
    """Validate a file is non-empty and within max_size bytes.

    Example:
        >>> validate_file_size(0, 5 * MB)
        (False, 'No file selected or file is empty.')
        >>> validate_file_size(11 * MB, 10 * MB)
        (False, 'File size (11.0 MB) exceeds the 10 MB limit.')
    """
    if size_bytes <= 0:
        return False, "No file selected or file is empty."
    if size_bytes > max_size:
        return False, (
            f"File size ({size_bytes / MB:.1f} MB) exceeds the "
            f"{_format_megabytes(max_size)} MB limit."
        )
    return True, None


def validate_document_file(file: Optional[KYCFile], max_size: int) -> ValidationResult:
    """Validate presence, size and MIME type of a KYC document."""
    if file is None:
        return False, "No file selected or file is empty."

    is_valid, error = validate_file_size(file.size_bytes, max_size)
    if not is_valid:
        return is_valid, error

    if not is_allowed_mime_type(file.mime_type):
        return False, (
            f'File type "{file.mime_type}" is not supported. '
            "Please upload JPEG, PNG, PDF, or DOC/DOCX."
        )

    return True, None


def _format_megabytes(size_bytes: int) -> str:
    megabytes = size_bytes / MB
    return f"{megabytes:g}"


# ---------------------------------------------------------------------------
# Step validators (one per wizard step)
# ---------------------------------------------------------------------------

def _check_document(
    errors: Dict[str, str],
    field_name: str,
    file: Optional[KYCFile],
    existing_url: str,
    max_size: int,
    missing_message: str,
) -> None:
    if file is None:
        if not existing_url:
            errors[field_name] = missing_message
        return
    is_valid, error = validate_document_file(file, max_size)
    if not is_valid:
        errors[field_name] = error


def validate_tax_step(form: KYCFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    is_valid, error = validate_pan(form.pan)
    if not is_valid:
        errors["pan"] = error

    is_valid, error = validate_gstin(form.gstin)
    if not is_valid:
        errors["gstin"] = error

    return errors


def validate_identity_step(form: KYCFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not form.id_number.strip():
        errors["id_number"] = f"{form.id_type.value} number is required"

    _check_document(
        errors,
        "id_document_file",
        form.id_document_file,
        form.id_document_url,
        MAX_ID_DOCUMENT_SIZE,
        "ID document upload is required",
    )
    return errors


def validate_address_step(form: KYCFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    address = form.business_address

    if not address.street_address_1.strip():
        errors["street_address_1"] = "Street address is required"
    if not address.city.strip():
        errors["city"] = "City is required"
    if not address.state.strip():
        errors["state"] = "State is required"
    if not address.postal_code.strip():
        errors["postal_code"] = "Postal code is required"

    _check_document(
        errors,
        "address_proof_file",
        form.address_proof_file,
        form.address_proof_url,
        MAX_ADDRESS_PROOF_SIZE,
        "Address proof upload is required",
    )
    return errors


def validate_bank_step(form: KYCFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not form.bank_holder_name.strip():
        errors["bank_holder_name"] = "Bank account holder name is required"

    is_valid, error = validate_account_number(form.account_number)
    if not is_valid:
        errors["account_number"] = error

    is_valid, error = validate_ifsc(form.ifsc_code)
    if not is_valid:
        errors["ifsc_code"] = error

    _check_document(
        errors,
        "bank_statement_file",
        form.bank_statement_file,
        form.bank_statement_url,
        MAX_BANK_STATEMENT_SIZE,
        "Bank statement upload is required",
    )
    return errors


COMPLIANCE_MESSAGES = {
    "pep_declaration": "You must declare PEP status",
    "sanctions_check": "You must confirm sanctions check",
    "aml_compliance": "You must accept AML compliance",
    "tax_compliance": "You must confirm tax compliance",
    "terms_accepted": "You must accept terms and conditions",
}


def validate_compliance_step(form: KYCFormData) -> Dict[str, str]:
    """All five compliance declarations must be accepted."""
    return {
        field_name: message
        for field_name, message in COMPLIANCE_MESSAGES.items()
        if getattr(form, field_name) is not True
    }


StepValidator = Callable[[KYCFormData], Dict[str, str]]
