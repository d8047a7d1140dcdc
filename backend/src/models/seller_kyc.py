"""SellerKYC SQLAlchemy model"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.sql import func

from .base import Base, PortableJSONB, UpdatedAtMixin


class SellerKYC(UpdatedAtMixin, Base):
    """One KYC submission per seller.

    Document columns hold URLs (or bare storage paths) resolved at upload
    time. business_address is JSON and may carry a `verification_documents`
    map written by the bulk verification flow.
    """
    __tablename__ = "seller_kyc"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    seller_id = Column(Text, nullable=False, unique=True, index=True)

    email = Column(Text, nullable=False, server_default="")
    phone = Column(Text, nullable=True)
    full_name = Column(Text, nullable=True)
    country = Column(Text, nullable=True)

    pan = Column(Text, nullable=True)
    gstin = Column(Text, nullable=True)

    id_type = Column(Text, nullable=True)
    id_number = Column(Text, nullable=True)
    id_document_url = Column(Text, nullable=True)

    business_address = Column(PortableJSONB, nullable=True)
    address_proof_url = Column(Text, nullable=True)

    bank_holder_name = Column(Text, nullable=True)
    account_number = Column(Text, nullable=True)
    account_type = Column(Text, nullable=True)
    ifsc_code = Column(Text, nullable=True)
    bank_statement_url = Column(Text, nullable=True)

    pep_declaration = Column(Boolean, nullable=False, default=False)
    sanctions_check = Column(Boolean, nullable=False, default=False)
    aml_compliance = Column(Boolean, nullable=False, default=False)
    tax_compliance = Column(Boolean, nullable=False, default=False)
    terms_accepted = Column(Boolean, nullable=False, default=False)

    kyc_status = Column(Text, nullable=False, server_default="draft")
    kyc_tier = Column(Integer, nullable=False, default=2)
    rejection_reason = Column(Text, nullable=True)
    verified_by_admin = Column(Text, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "kyc_status IN ('draft', 'pending', 'approved', 'rejected')",
            name="ck_seller_kyc_status"
        ),
        CheckConstraint(
            "kyc_tier IN (1, 2, 3)",
            name="ck_seller_kyc_tier"
        ),
    )

    def to_dict(self):
        """Row as a plain dict. id is a string, datetimes stay datetimes."""
        row = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        row["id"] = str(self.id) if self.id else None
        return row

    def __repr__(self):
        return f"<SellerKYC(id={self.id}, seller_id={self.seller_id}, status={self.kyc_status})>"
