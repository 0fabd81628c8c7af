from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from subsync.core.errors import AccountNotFoundError
from subsync.models.account import Account
from subsync.models.payment import Payment

logger = logging.getLogger(__name__)

ACCOUNT_LOOKUP_FIELDS = {"subscription_id", "customer_id"}


class RecordStore:
    """
    accounts / payments 테이블 게이트웨이.
    전역 클라이언트 대신 앱 생성 시 명시적으로 만들어서 주입한다.
    메서드 하나 = 트랜잭션 하나 (단일 row write 원자성에만 의존).
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Record store operation failed")
            raise
        finally:
            db.close()

    def ping(self) -> None:
        with self._session() as db:
            db.execute(text("SELECT 1"))

    # -----------------------------
    # Accounts
    # -----------------------------
    def get_account(self, user_id: str) -> Optional[Account]:
        with self._session() as db:
            return db.get(Account, user_id)

    def find_account(self, **equals: Any) -> Optional[Account]:
        """Equality lookup. 여러 건이 걸리면 가장 먼저 만들어진 계정이 이긴다."""
        unknown = set(equals) - ACCOUNT_LOOKUP_FIELDS
        if unknown:
            raise ValueError(f"Unsupported account lookup: {sorted(unknown)}")

        stmt = select(Account)
        for field, value in equals.items():
            stmt = stmt.where(getattr(Account, field) == value)
        stmt = stmt.order_by(Account.created_at, Account.id).limit(1)

        with self._session() as db:
            return db.scalars(stmt).first()

    def create_account(self, user_id: str, **fields: Any) -> Account:
        with self._session() as db:
            account = Account(id=user_id, **fields)
            db.add(account)
            db.commit()
            db.refresh(account)
            return account

    def update_account(self, user_id: str, **fields: Any) -> Account:
        with self._session() as db:
            account = db.get(Account, user_id)
            if account is None:
                raise AccountNotFoundError("user_id", user_id)

            for field, value in fields.items():
                setattr(account, field, value)

            db.commit()
            db.refresh(account)
            return account

    # -----------------------------
    # Payments (append-only)
    # -----------------------------
    def add_payment(self, **fields: Any) -> Payment:
        with self._session() as db:
            payment = Payment(**fields)
            db.add(payment)
            db.commit()
            db.refresh(payment)
            return payment

    def find_payment(self, *, invoice_id: str, status: str) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .where(Payment.status == status)
            .order_by(Payment.id)
            .limit(1)
        )
        with self._session() as db:
            return db.scalars(stmt).first()

    def list_payments(
        self,
        *,
        invoice_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[Payment]:
        stmt = select(Payment)
        if invoice_id is not None:
            stmt = stmt.where(Payment.invoice_id == invoice_id)
        if user_id is not None:
            stmt = stmt.where(Payment.user_id == user_id)
        stmt = stmt.order_by(Payment.id)

        with self._session() as db:
            return list(db.scalars(stmt).all())
