"""SQLAlchemy unit of work: one session, one transaction per ``with`` block."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from medstore.domain.exceptions import DatabaseError
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.infrastructure.persistence.sql_medicine_repository import SqlMedicineRepository
from medstore.infrastructure.persistence.sql_purchase_order_repository import (
    SqlPurchaseOrderRepository,
)
from medstore.infrastructure.persistence.sql_record_repositories import (
    SqlInventoryTransactionRepository,
    SqlReceiptRepository,
    SqlStatusHistoryRepository,
)
from medstore.infrastructure.persistence.sql_supplier_repository import SqlSupplierRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.medicines = SqlMedicineRepository(self._session)
        self.suppliers = SqlSupplierRepository(self._session)
        self.purchase_orders = SqlPurchaseOrderRepository(self._session)
        self.inventory_transactions = SqlInventoryTransactionRepository(self._session)
        self.receipts = SqlReceiptRepository(self._session)
        self.status_history = SqlStatusHistoryRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()
            self._session = None
        if isinstance(exc, SQLAlchemyError):
            logger.exception("Database operation failed", exc_info=(exc_type, exc, tb))
            raise DatabaseError("Database operation failed") from exc

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit failed")
            raise DatabaseError("Database operation failed") from exc

    def rollback(self) -> None:
        self._session.rollback()

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        try:
            with self._session.begin_nested():
                yield
        except SQLAlchemyError as exc:
            raise DatabaseError("Database operation failed") from exc
