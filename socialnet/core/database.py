import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from socialnet.core.config import Settings

logger = logging.getLogger(__name__)

# ORM 베이스
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """
    sqlite는 연결마다 외래 키 제약을 켜줘야 ON DELETE CASCADE가 동작함
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """
    프로세스 단위 비동기 엔진 생성
    - 애플리케이션 시작 시 한 번만 호출하여 app.state에 보관
    """
    async_url = settings.SQLALCHEMY_DATABASE_URI

    if async_url.startswith("sqlite"):
        engine = create_async_engine(
            async_url,
            echo=False,
            poolclass=NullPool,
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_async_engine(
            async_url,
            echo=False,
            connect_args={
                "charset": "utf8mb4",
                "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
            },
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    logger.info("DB 엔진 생성: %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    엔진에 바인딩된 세션 팩토리 생성
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    애플리케이션 시작 시 호출하여 메타데이터 기반 테이블을 생성
    """
    # 모델 import로 메타데이터 등록
    from socialnet.models import user, post, comment, like, follow  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 종속성: 요청마다 새로운 DB 세션을 생성 후 반환
    - 세션 팩토리는 create_app()에서 만들어 app.state에 보관된 것을 사용
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
