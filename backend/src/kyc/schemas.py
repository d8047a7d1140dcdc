"""KYC API request/response schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.kyc.models import (
    AccountType,
    AddressType,
    BusinessAddress,
    IdType,
    KYCFile,
    KYCFormData,
    KYCTier,
)


class BusinessAddressSchema(BaseModel):
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


class KYCFormPayload(BaseModel):
    """The `form` part of a multipart submission (files travel separately).

    URLs of documents uploaded in an earlier attempt may be sent instead of
    the files.
    """
    email: str = ""
    phone: str = ""
    full_name: str = ""
    country: str = ""
    pan: str = ""
    gstin: str = ""
    id_type: IdType = IdType.AADHAR
    id_number: str = ""
    id_document_url: str = ""
    business_address: BusinessAddressSchema = Field(default_factory=BusinessAddressSchema)
    address_proof_url: str = ""
    bank_holder_name: str = ""
    account_number: str = ""
    account_type: AccountType = AccountType.CURRENT
    ifsc_code: str = ""
    bank_statement_url: str = ""
    pep_declaration: bool = False
    sanctions_check: bool = False
    aml_compliance: bool = False
    tax_compliance: bool = False
    terms_accepted: bool = False
    kyc_tier: KYCTier = KYCTier.TIER_2

    def to_form_data(
        self,
        id_document_file: Optional[KYCFile] = None,
        address_proof_file: Optional[KYCFile] = None,
        bank_statement_file: Optional[KYCFile] = None,
    ) -> KYCFormData:
        values = self.model_dump(exclude={"business_address"})
        return KYCFormData(
            **values,
            business_address=BusinessAddress(**self.business_address.model_dump()),
            id_document_file=id_document_file,
            address_proof_file=address_proof_file,
            bank_statement_file=bank_statement_file,
        )


class KYCRecord(BaseModel):
    """A seller_kyc row as returned to sellers and admins"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    seller_id: str
    email: str = ""
    phone: Optional[str] = None
    full_name: Optional[str] = None
    country: Optional[str] = None
    pan: Optional[str] = None
    gstin: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_document_url: Optional[str] = None
    business_address: Optional[Dict[str, Any]] = None
    address_proof_url: Optional[str] = None
    bank_holder_name: Optional[str] = None
    account_number: Optional[str] = None
    account_type: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_statement_url: Optional[str] = None
    pep_declaration: bool = False
    sanctions_check: bool = False
    aml_compliance: bool = False
    tax_compliance: bool = False
    terms_accepted: bool = False
    kyc_status: str
    kyc_tier: int = 2
    rejection_reason: Optional[str] = None
    verified_by_admin: Optional[str] = None
    verified_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KYCStatusResponse(BaseModel):
    """Current seller's record; null for a first-time seller"""
    kyc_data: Optional[KYCRecord] = None


class KYCListResponse(BaseModel):
    data: List[KYCRecord]
    count: int


class DocumentUploadResponse(BaseModel):
    url: str = Field(..., description="Signed URL, public URL, or bare storage path")


class KYCSubmitResponse(BaseModel):
    kyc_id: str
    document_urls: Dict[str, str] = Field(default_factory=dict)


class KYCActionResponse(BaseModel):
    success: bool
    kyc_id: Optional[str] = None


class RequirementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    document_type: str
    required: bool = True


class FinalizeVerificationRequest(BaseModel):
    document_urls: Dict[str, str] = Field(
        ...,
        description="Requirement id (e.g. 'tax-id', 'addr-f') -> uploaded URL",
    )


class ApproveRequest(BaseModel):
    seller_id: str


class RejectRequest(BaseModel):
    seller_id: str
    reason: str = Field(..., description="Shown to the seller; must not be blank")


class KYCUpdateRequest(BaseModel):
    """Admin-editable fields. Status is changed through approve/reject only."""
    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    country: Optional[str] = None
    pan: Optional[str] = None
    gstin: Optional[str] = None
    id_type: Optional[IdType] = None
    id_number: Optional[str] = None
    business_address: Optional[Dict[str, Any]] = None
    bank_holder_name: Optional[str] = None
    account_number: Optional[str] = None
    account_type: Optional[AccountType] = None
    ifsc_code: Optional[str] = None
    kyc_tier: Optional[KYCTier] = None
    rejection_reason: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body. `errors` carries field messages for validation failures"""
    error: str
    message: str
    errors: Optional[Dict[str, str]] = None
