from logging.config import fileConfig

from sqlalchemy import pool

from alembic import context

# pip install -e . 로 설치된 subsync를 그대로 쓴다
from subsync.core.config import settings
from subsync.db.base import Base
from subsync.db.session import make_engine
from subsync.models import account, payment  # noqa: F401  (accounts / payments metadata)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline() -> None:
    # SQL 스크립트만 출력 (alembic upgrade head --sql)
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    # 앱과 같은 URL 조립 규칙 (DATABASE_URL_OVERRIDE 우선)
    migration_engine = make_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        with migration_engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=Base.metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        migration_engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
