from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from subsync.db.base import Base


class Account(Base):
    __tablename__ = "accounts"

    # 외부(앱)에서 만든 user id 그대로 사용
    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # trial / active / inactive / past_due / expired (core.account_status)
    subscription_status: Mapped[str] = mapped_column(String(20), default="trial", index=True)

    subscription_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    customer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    current_period_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    trial_end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    canceled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
