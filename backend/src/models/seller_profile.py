"""SellerProfile SQLAlchemy model"""

from sqlalchemy import Boolean, Column, Text

from .base import Base, UpdatedAtMixin


class SellerProfile(UpdatedAtMixin, Base):
    """Externally visible seller profile.

    Only the verification flags are written by the KYC workflow; the profile
    itself is created at signup.
    """
    __tablename__ = "seller_profile"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    approved = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<SellerProfile(id={self.id}, verified={self.is_verified}, approved={self.approved})>"
