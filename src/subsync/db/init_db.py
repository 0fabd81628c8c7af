from __future__ import annotations

from sqlalchemy.engine import Engine

from subsync.db.base import Base
from subsync.db.session import get_engine

# 모델 import (Base에 테이블 등록되게)
from subsync.models import account, payment  # noqa: F401


def create_all(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind=bind if bind is not None else get_engine())
