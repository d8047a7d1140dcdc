"""Document requirements for the bulk verification upload."""

from typing import List

from .models import KYCRequirement


BASE_REQUIREMENTS: List[KYCRequirement] = [
    KYCRequirement("seller-img", "Seller Image", "photo"),
    KYCRequirement("addr-f", "Seller Address Proof - Front Side", "address_front"),
    KYCRequirement("addr-b", "Seller Address Proof - Back Side", "address_back"),
    KYCRequirement("biz-addr-f", "Business Address Proof - Front Side", "biz_address_front"),
    KYCRequirement("biz-addr-b", "Business Address Proof - Back Side", "biz_address_back"),
    KYCRequirement("tax-id", "Tax ID Proof (Personal Or Business)", "tax_id"),
    KYCRequirement("bank-stmt", "Bank Statement Or Cancelled Cheque", "bank_statement"),
]


def get_kyc_requirements(country_code: str) -> List[KYCRequirement]:
    """Requirements for a country. Every country currently shares the base set."""
    return list(BASE_REQUIREMENTS)
