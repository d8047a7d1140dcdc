"""KYC domain models - enums, value objects and result contracts.

These are plain domain objects (not the database models). The wizard works on
KYCFormData, the upload pipeline on KYCFile, and every public domain operation
returns one of the *Result dataclasses instead of raising.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional

from .errors import ErrorCode


class KYCStatus(str, Enum):
    """Lifecycle status of a seller's KYC record.

    State flow:
    DRAFT → PENDING → APPROVED | REJECTED
    REJECTED (or APPROVED) → PENDING on seller resubmission
    """
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class KYCTier(IntEnum):
    """KYC depth level gating the scope of required documentation."""
    TIER_1 = 1
    TIER_2 = 2
    TIER_3 = 3


class IdType(str, Enum):
    AADHAR = "aadhar"
    PASSPORT = "passport"
    VOTER = "voter"
    DRIVER_LICENSE = "driver_license"


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CURRENT = "current"


class AddressType(str, Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


class DocumentType(str, Enum):
    """Document slots uploaded by the wizard (used in storage paths)."""
    ID_DOCUMENT = "id_document"
    ADDRESS_PROOF = "address_proof"
    BANK_STATEMENT = "bank_statement"


@dataclass(frozen=True)
class KYCFile:
    """A raw file handle attached to the form (never persisted).

    Attributes:
        file_name: Original client file name (used for the extension)
        content: File bytes
        mime_type: Declared MIME type (e.g. 'application/pdf')
    """
    file_name: str
    content: bytes
    mime_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Extension after the last dot, 'pdf' when the name has none."""
        if "." in self.file_name:
            ext = self.file_name.rsplit(".", 1)[-1]
            if ext:
                return ext
        return "pdf"


@dataclass
class BusinessAddress:
    """Structured business address stored as JSON on the KYC record."""
    street_address_1: str = ""
    street_address_2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    address_type: AddressType = AddressType.WORK
    delivery_notes: str = ""
    full_name: str = ""
    phone_number: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "street_address_1": self.street_address_1,
            "street_address_2": self.street_address_2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
            "address_type": self.address_type.value,
            "delivery_notes": self.delivery_notes,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BusinessAddress":
        data = data or {}
        return cls(
            street_address_1=data.get("street_address_1") or "",
            street_address_2=data.get("street_address_2") or "",
            city=data.get("city") or "",
            state=data.get("state") or "",
            postal_code=data.get("postal_code") or "",
            country=data.get("country") or "",
            address_type=AddressType(data.get("address_type") or AddressType.WORK.value),
            delivery_notes=data.get("delivery_notes") or "",
            full_name=data.get("full_name") or "",
            phone_number=data.get("phone_number") or "",
            email=data.get("email") or "",
        )


@dataclass
class KYCFormData:
    """Snapshot of everything the seller entered in the wizard.

    `*_file` fields hold unuploaded files; `*_url` fields hold documents that
    already made it to storage in an earlier attempt.
    """
    # Pre-filled from signup
    email: str = ""
    phone: str = ""
    full_name: str = ""
    country: str = ""

    # Tax
    pan: str = ""
    gstin: str = ""

    # Identity proof
    id_type: IdType = IdType.AADHAR
    id_number: str = ""
    id_document_url: str = ""
    id_document_file: Optional[KYCFile] = None

    # Address
    business_address: BusinessAddress = field(default_factory=BusinessAddress)
    address_proof_url: str = ""
    address_proof_file: Optional[KYCFile] = None

    # Banking
    bank_holder_name: str = ""
    account_number: str = ""
    account_type: AccountType = AccountType.CURRENT
    ifsc_code: str = ""
    bank_statement_url: str = ""
    bank_statement_file: Optional[KYCFile] = None

    # Compliance
    pep_declaration: bool = False
    sanctions_check: bool = False
    aml_compliance: bool = False
    tax_compliance: bool = False
    terms_accepted: bool = False

    kyc_tier: KYCTier = KYCTier.TIER_2


@dataclass
class Session:
    """Authenticated session as reported by the identity provider."""
    user_id: str
    access_token: str
    expires_at: Optional[datetime] = None
    role: Optional[str] = None
    email: Optional[str] = None


@dataclass
class DocumentUploadResult:
    """Uniform result of every upload attempt. Never raised, always returned."""
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, url: str) -> "DocumentUploadResult":
        return cls(success=True, url=url, error=None)

    @classmethod
    def failed(cls, error: str, error_code: Optional[ErrorCode] = None) -> "DocumentUploadResult":
        return cls(success=False, url=None, error=error, error_code=error_code)


@dataclass
class KYCSubmitResult:
    """Result of a submission or an admin operation.

    Attributes:
        success: Whether the operation completed
        error: User-facing error message when success is False
        error_code: Failure category, for mapping to transport status codes
        kyc_id: Identifier of the persisted record (submission only)
        document_urls: URLs of documents uploaded during this call, keyed by
            the form's `*_url` field name. Populated even on failure so a
            retry does not upload the same file twice.
    """
    success: bool
    error: Optional[str] = None
    kyc_id: Optional[str] = None
    document_urls: Dict[str, str] = field(default_factory=dict)
    error_code: Optional[ErrorCode] = None


@dataclass
class KYCStatusResult:
    kyc_data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


@dataclass
class KYCListResult:
    data: list = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class KYCRequirement:
    """One document slot a seller must provide."""
    id: str
    label: str
    document_type: str
    required: bool = True
