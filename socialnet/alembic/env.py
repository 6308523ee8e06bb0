import os
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool
from dotenv import load_dotenv

from socialnet.core.database import Base
from socialnet.models import comment, follow, like, post, user  # noqa: F401  테이블 등록용

PACKAGE_DIR = Path(__file__).resolve().parent.parent
SQLITE_FALLBACK = f"sqlite:///{PACKAGE_DIR.parent / 'socialnet.db'}"

# 마이그레이션은 동기 드라이버로 실행
SYNC_DRIVERS = {
    "mysql+asyncmy://": "mysql+pymysql://",
    "sqlite+aiosqlite://": "sqlite://",
}


def migration_url() -> str:
    """
    서버와 같은 규칙으로 접속 URL 결정
    DATABASE_URL > DB_* 조합(MySQL) > 로컬 sqlite
    """
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        for async_prefix, sync_prefix in SYNC_DRIVERS.items():
            if explicit.startswith(async_prefix):
                return sync_prefix + explicit[len(async_prefix):]
        return explicit

    user_name, host, db_name = os.getenv("DB_USER"), os.getenv("DB_HOST"), os.getenv("DB_NAME")
    if not (user_name and host and db_name):
        return SQLITE_FALLBACK
    return "mysql+pymysql://{}:{}@{}:{}/{}?charset=utf8mb4".format(
        user_name, os.getenv("DB_PASSWORD", ""), host, os.getenv("DB_PORT", "3306"), db_name,
    )


load_dotenv(PACKAGE_DIR / "config" / "settings.env", override=False)

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)
config.set_main_option("sqlalchemy.url", migration_url())

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """DB 연결 없이 SQL 스크립트만 출력"""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        # sqlite 는 ALTER 제약이 있어 batch 모드 사용
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
