"""KYC Record Store Port - persistence contract for seller KYC records.

Rows are plain dicts keyed by column name. Filters are equality filters
(e.g. {"id": kyc_id} or {"seller_id": seller_id}).

All methods raise PersistenceError carrying the store's raw error message.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


Row = Dict[str, Any]


class KYCRepositoryPort(ABC):

    @abstractmethod
    async def upsert(self, row: Row, conflict_key: str = "seller_id") -> str:
        """Insert the row or overwrite the existing row with the same conflict_key.

        Returns:
            str: Identifier of the inserted or updated record
        """
        pass

    @abstractmethod
    async def insert(self, row: Row) -> str:
        """Insert a new record and return its identifier."""
        pass

    @abstractmethod
    async def select_one(self, filters: Dict[str, Any]) -> Optional[Row]:
        """Return the first record matching filters, or None."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Row]:
        """Return every record, most recently submitted first."""
        pass

    @abstractmethod
    async def update(self, filters: Dict[str, Any], patch: Row) -> int:
        """Apply patch to matching records and return the number updated."""
        pass

    @abstractmethod
    async def delete(self, filters: Dict[str, Any]) -> int:
        """Hard delete matching records and return the number deleted."""
        pass

    @abstractmethod
    async def update_seller_profile(self, seller_id: str, patch: Row) -> int:
        """Patch the seller's externally visible profile flags."""
        pass
