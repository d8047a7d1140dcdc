"""KYC repository for database operations"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.kyc.errors import PersistenceError
from domain.kyc.ports import KYCRepositoryPort, Row
from models.seller_kyc import SellerKYC
from models.seller_profile import SellerProfile


logger = logging.getLogger(__name__)

# Columns kept from the first insert when an upsert overwrites a row
UPSERT_PRESERVED_COLUMNS = {"id", "seller_id", "created_at"}

KYC_COLUMNS = frozenset(column.name for column in SellerKYC.__table__.columns)
PROFILE_COLUMNS = frozenset(column.name for column in SellerProfile.__table__.columns)


def _store_error(e: SQLAlchemyError) -> PersistenceError:
    orig = getattr(e, "orig", None)
    return PersistenceError(str(orig) if orig is not None else str(e), cause=e)


class SqlAlchemyKYCRepository(KYCRepositoryPort):
    """Repository for seller_kyc and seller_profile database operations.

    Every write commits on success and rolls back on failure; SQLAlchemy
    errors are re-raised as PersistenceError with the driver's message.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def _insert_construct(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise PersistenceError(f"Atomic upsert is not supported on dialect '{dialect}'")

    def _clean_row(self, row: Row) -> Dict[str, Any]:
        return {k: v for k, v in row.items() if k in KYC_COLUMNS}

    def _where(self, filters: Dict[str, Any]) -> Optional[list]:
        """Translate equality filters into clauses. None means nothing can match."""
        clauses = []
        for key, value in filters.items():
            if key not in KYC_COLUMNS:
                raise PersistenceError(f"Unknown column in filter: {key}")
            if key == "id":
                try:
                    value = value if isinstance(value, UUID) else UUID(str(value))
                except ValueError:
                    return None
            clauses.append(getattr(SellerKYC, key) == value)
        return clauses

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _store_error(e)

    async def upsert(self, row: Row, conflict_key: str = "seller_id") -> str:
        """INSERT ... ON CONFLICT (conflict_key) DO UPDATE, returning the record id."""
        values = self._clean_row(row)
        now = datetime.now(timezone.utc)
        values.setdefault("updated_at", now)
        values["id"] = uuid4()
        values["created_at"] = now

        insert = self._insert_construct()
        stmt = insert(SellerKYC).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[conflict_key],
            set_={
                key: stmt.excluded[key]
                for key in values
                if key not in UPSERT_PRESERVED_COLUMNS and key != conflict_key
            },
        ).returning(SellerKYC.id)

        try:
            kyc_id = self.db.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"seller_kyc upsert failed: {e}", extra={"seller_id": values.get("seller_id")})
            raise _store_error(e)
        self._commit()
        return str(kyc_id)

    async def insert(self, row: Row) -> str:
        record = SellerKYC(**self._clean_row(row))
        try:
            self.db.add(record)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _store_error(e)
        kyc_id = str(record.id)
        self._commit()
        return kyc_id

    async def select_one(self, filters: Dict[str, Any]) -> Optional[Row]:
        clauses = self._where(filters)
        if clauses is None:
            return None
        try:
            record = self.db.execute(
                select(SellerKYC).where(*clauses).limit(1)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _store_error(e)
        return record.to_dict() if record else None

    async def list_all(self) -> List[Row]:
        try:
            records = self.db.execute(
                select(SellerKYC).order_by(SellerKYC.submitted_at.desc().nulls_last())
            ).scalars().all()
        except SQLAlchemyError as e:
            raise _store_error(e)
        return [record.to_dict() for record in records]

    async def update(self, filters: Dict[str, Any], patch: Row) -> int:
        clauses = self._where(filters)
        values = self._clean_row(patch)
        values.pop("id", None)
        if clauses is None or not values:
            return 0
        try:
            result = self.db.execute(update(SellerKYC).where(*clauses).values(**values))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _store_error(e)
        self._commit()
        return result.rowcount

    async def delete(self, filters: Dict[str, Any]) -> int:
        clauses = self._where(filters)
        if clauses is None:
            return 0
        try:
            result = self.db.execute(delete(SellerKYC).where(*clauses))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _store_error(e)
        self._commit()
        return result.rowcount

    async def update_seller_profile(self, seller_id: str, patch: Row) -> int:
        values = {k: v for k, v in patch.items() if k in PROFILE_COLUMNS and k != "id"}
        if not values:
            return 0
        values["updated_at"] = datetime.now(timezone.utc)
        try:
            result = self.db.execute(
                update(SellerProfile).where(SellerProfile.id == seller_id).values(**values)
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _store_error(e)
        self._commit()
        if result.rowcount == 0:
            logger.warning(f"No seller profile to update for seller {seller_id}")
        return result.rowcount
