"""
Repository 계층 예외 클래스들
"""

from socialnet.utils.exceptions import ApiError

# 클라이언트에 노출되는 고정 메시지
DB_ERROR_MESSAGE = "데이터베이스 오류가 발생했습니다."


class RepositoryError(ApiError):
    """Repository 관련 기본 예외"""
    status_code = 500
    code = "DATABASE_ERROR"


class DatabaseCommitError(RepositoryError):
    """DB 커밋 관련 예외"""
    pass


class DatabaseRollbackError(RepositoryError):
    """DB 롤백 관련 예외"""
    pass
