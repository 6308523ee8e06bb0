import logging
from abc import ABC

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.repositories.exceptions import (
    DB_ERROR_MESSAGE, DatabaseCommitError, DatabaseRollbackError
)

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """Repository 베이스 클래스"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        """
        트랜잭션 커밋 (예외 처리 포함)
        - 유니크 제약 위반(IntegrityError)은 롤백 후 그대로 전파하여
          서비스 계층 또는 예외 핸들러가 DUPLICATE_ENTRY 로 처리하도록 함
        """
        try:
            await self.session.commit()
            logger.debug("DB 커밋 성공")
        except IntegrityError:
            logger.info("DB 커밋 중 제약 조건 위반, 롤백 수행")
            await self.rollback()
            raise
        except SQLAlchemyError as e:
            # SQL 문과 파라미터는 로그에만 남김
            logger.error(f"DB 커밋 실패: {e}")
            await self.rollback()
            raise DatabaseCommitError(DB_ERROR_MESSAGE) from e

    async def rollback(self) -> None:
        """트랜잭션 롤백"""
        try:
            await self.session.rollback()
            logger.debug("DB 롤백 완료")
        except SQLAlchemyError as e:
            logger.error(f"DB 롤백 실패: {e}")
            raise DatabaseRollbackError(DB_ERROR_MESSAGE) from e
