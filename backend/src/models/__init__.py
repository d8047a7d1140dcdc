"""SQLAlchemy Models for seller KYC"""

from .base import Base, PortableJSONB
from .seller_kyc import SellerKYC
from .seller_profile import SellerProfile

__all__ = [
    "Base",
    "PortableJSONB",
    "SellerKYC",
    "SellerProfile",
]
