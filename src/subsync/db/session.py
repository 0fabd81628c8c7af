from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from subsync.core.config import settings


def make_engine(url: str, **kwargs) -> Engine:
    return create_engine(url, pool_pre_ping=True, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False: 커밋 후에도 반환한 row를 그대로 읽을 수 있게
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


# 엔진은 처음 필요할 때 만든다 (테스트는 자기 엔진을 주입)
@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return make_engine(settings.database_url)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return make_session_factory(get_engine())

