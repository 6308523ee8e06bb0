from typing import Optional


class ApiError(Exception):
    """
    기본 API 예외의 최상위 클래스
    - 모든 커스텀 API 예외가 이 클래스를 상속
    - FastAPI의 예외 핸들러에 의해 envelope 응답으로 변환
    - status_code / code 는 하위 클래스에서 지정
    """
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        """
        - message: 사용자에게 전달할 예외 메시지 문자열
        - code: 기본 에러 코드를 덮어쓸 때 사용
        """
        # 예외 메시지 설정
        self.message = message
        if code:
            self.code = code
        # 상위 Exception 초기화
        super().__init__(message)


class BadRequestError(ApiError):
    """400 Bad Request"""
    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedError(ApiError):
    """401 Unauthorized"""
    status_code = 401
    code = "AUTHENTICATION_ERROR"


class ForbiddenError(ApiError):
    """403 Forbidden"""
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ApiError):
    """404 Not Found"""
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ApiError):
    """409 Conflict"""
    status_code = 409
    code = "DUPLICATE_ENTRY"


# ─── 업로드 관련 예외 ─────────────────────────────────────────────────────

class FileTooLargeError(ApiError):
    """413 Payload Too Large"""
    status_code = 413
    code = "FILE_TOO_LARGE"


class InvalidFileFieldError(BadRequestError):
    """허용되지 않은 파일 필드"""
    code = "INVALID_FILE_FIELD"


class InvalidFileTypeError(BadRequestError):
    """허용되지 않은 파일 형식"""
    code = "INVALID_FILE_TYPE"
