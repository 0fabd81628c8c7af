from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from subsync.db.base import Base


class Payment(Base):
    """Append-only payment history. Rows are never updated."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)

    # UNIQUE 아님: 재전송 시 중복 row가 생길 수 있다 (DEDUPE_PAYMENTS로 제어)
    invoice_id: Mapped[str] = mapped_column(String(100), index=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    subscription_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    customer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    amount: Mapped[int] = mapped_column(Integer)
    currency: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    # succeeded / failed
    status: Mapped[str] = mapped_column(String(20), index=True)

    provider_event_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
