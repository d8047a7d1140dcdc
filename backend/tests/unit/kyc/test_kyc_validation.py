"""Unit tests for KYC validation rules

Tests cover:
- PAN / GSTIN / IFSC / account number formats
- File size and MIME type checks
- Step validators (required fields, documents, compliance flags)
"""

import pytest

from domain.kyc.models import BusinessAddress, KYCFile, KYCFormData
from domain.kyc.validation import (
    MAX_ADDRESS_PROOF_SIZE,
    MAX_BANK_STATEMENT_SIZE,
    MAX_ID_DOCUMENT_SIZE,
    MB,
    normalize_identifier,
    validate_account_number,
    validate_address_step,
    validate_bank_step,
    validate_compliance_step,
    validate_document_file,
    validate_file_size,
    validate_gstin,
    validate_identity_step,
    validate_ifsc,
    validate_pan,
    validate_tax_step,
)


def _file(size_bytes: int, mime_type: str = "application/pdf") -> KYCFile:
    return KYCFile(file_name="doc.pdf", content=b"x" * size_bytes, mime_type=mime_type)


class TestIdentifierFormats:

    def test_valid_pan(self):
        assert validate_pan("AAAPL5055K") == (True, None)

    @pytest.mark.parametrize("pan", ["AAAPL505K", "AAAPL5055KK", "1AAPL5055K", "AAAPL5O55K"])
    def test_invalid_pan_shapes(self, pan):
        assert validate_pan(pan) == (False, "Invalid PAN format (e.g., AAAPL5055K)")

    def test_lowercase_pan_rejected_until_normalized(self):
        assert validate_pan("aaapl5055k")[0] is False
        assert validate_pan(normalize_identifier(" aaapl5055k "))[0] is True

    def test_pan_required(self):
        assert validate_pan("") == (False, "PAN is required")
        assert validate_pan("   ") == (False, "PAN is required")

    def test_gstin_optional(self):
        assert validate_gstin("") == (True, None)
        assert validate_gstin(None) == (True, None)

    def test_gstin_format(self):
        assert validate_gstin("27AAPFU0939F1ZV") == (True, None)
        assert validate_gstin("27AAPFU0939F1Z") == (False, "Invalid GSTIN format")

    def test_ifsc_fifth_character_must_be_zero(self):
        assert validate_ifsc("SBIN0001234") == (True, None)
        assert validate_ifsc("SBIN1001234") == (False, "Invalid IFSC code format")

    def test_ifsc_required(self):
        assert validate_ifsc("") == (False, "IFSC code is required")

    @pytest.mark.parametrize("number", ["123456789", "123456789012345678"])
    def test_account_number_bounds_accepted(self, number):
        assert validate_account_number(number) == (True, None)

    @pytest.mark.parametrize("number", ["12345678", "1234567890123456789", "12345678a9"])
    def test_account_number_rejected(self, number):
        assert validate_account_number(number) == (False, "Invalid account number (9-18 digits)")


class TestFileChecks:

    def test_empty_file_rejected(self):
        assert validate_file_size(0, 5 * MB) == (False, "No file selected or file is empty.")

    def test_size_limit_message(self):
        assert validate_file_size(11 * MB, 10 * MB) == (
            False,
            "File size (11.0 MB) exceeds the 10 MB limit.",
        )

    def test_exact_limit_accepted(self):
        assert validate_file_size(5 * MB, 5 * MB) == (True, None)

    def test_unsupported_mime_type(self):
        is_valid, error = validate_document_file(_file(1024, "image/gif"), 5 * MB)
        assert is_valid is False
        assert error == (
            'File type "image/gif" is not supported. '
            "Please upload JPEG, PNG, PDF, or DOC/DOCX."
        )

    @pytest.mark.parametrize("mime_type", [
        "image/jpeg",
        "image/png",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ])
    def test_allowed_mime_types(self, mime_type):
        assert validate_document_file(_file(1024, mime_type), 5 * MB) == (True, None)

    def test_missing_file(self):
        assert validate_document_file(None, 5 * MB)[0] is False


class TestStepValidators:

    def test_tax_step(self):
        errors = validate_tax_step(KYCFormData(pan="BAD", gstin="ALSOBAD"))
        assert set(errors) == {"pan", "gstin"}
        assert validate_tax_step(KYCFormData(pan="AAAPL5055K")) == {}

    def test_identity_step_requires_number_and_document(self):
        errors = validate_identity_step(KYCFormData())
        assert set(errors) == {"id_number", "id_document_file"}

    def test_identity_step_accepts_existing_url(self):
        form = KYCFormData(id_number="1234 5678 9012", id_document_url="https://signed.test/doc")
        assert validate_identity_step(form) == {}

    def test_identity_document_over_5mb_rejected(self):
        form = KYCFormData(id_number="123", id_document_file=_file(MAX_ID_DOCUMENT_SIZE + 1))
        assert "id_document_file" in validate_identity_step(form)

    def test_address_step(self):
        form = KYCFormData(business_address=BusinessAddress(street_address_1="1 MG Road"))
        errors = validate_address_step(form)
        assert set(errors) == {"city", "state", "postal_code", "address_proof_file"}

    def test_address_proof_limit(self):
        form = KYCFormData(
            business_address=BusinessAddress(
                street_address_1="1 MG Road", city="Pune", state="MH", postal_code="411001"
            ),
            address_proof_file=_file(MAX_ADDRESS_PROOF_SIZE + 1),
        )
        assert set(validate_address_step(form)) == {"address_proof_file"}

    def test_bank_statement_allows_up_to_10mb(self):
        form = KYCFormData(
            bank_holder_name="Asha Rao",
            account_number="123456789012",
            ifsc_code="SBIN0001234",
            bank_statement_file=_file(MAX_BANK_STATEMENT_SIZE),
        )
        assert validate_bank_step(form) == {}

    def test_compliance_requires_all_five(self):
        form = KYCFormData(
            pep_declaration=True,
            sanctions_check=True,
            aml_compliance=True,
            tax_compliance=True,
            terms_accepted=False,
        )
        assert validate_compliance_step(form) == {
            "terms_accepted": "You must accept terms and conditions"
        }
