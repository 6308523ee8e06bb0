from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from socialnet.utils.pagination import Pagination

DataT = TypeVar("DataT")


# ─── 공통 베이스 ─────────────────────────────────────────────────────────

class CamelModel(BaseModel):
    """
    camelCase JSON 필드명을 사용하는 베이스 모델
    - 입력은 camelCase / snake_case 모두 허용
    - ORM 객체에서 바로 변환 가능 (from_attributes)
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ─── 응답 envelope ──────────────────────────────────────────────────────

class ErrorDetail(BaseModel):
    """필드 단위 검증 오류"""
    field: str = Field(..., description="오류가 발생한 필드명")
    message: str = Field(..., description="오류 메시지")


class ApiResponse(BaseModel, Generic[DataT]):
    """
    모든 API 응답의 공통 envelope
    - success: 처리 성공 여부
    - message: 사용자 표시용 메시지 (선택)
    - data: 응답 데이터 (선택)
    """
    success: bool = Field(True, description="처리 성공 여부")
    message: Optional[str] = Field(None, description="응답 메시지")
    data: Optional[DataT] = Field(None, description="응답 데이터")


class ErrorResponse(BaseModel):
    """
    오류 응답 envelope
    - error: 기계 판독용 오류 코드 (VALIDATION_ERROR, NOT_FOUND, ...)
    """
    success: bool = False
    message: str
    error: str
    errors: Optional[List[ErrorDetail]] = None


class PaginationMeta(CamelModel):
    """페이지네이션 메타 정보"""
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_pagination(cls, pagination: Pagination) -> "PaginationMeta":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_count=pagination.total_count,
            has_next=pagination.has_next,
            has_prev=pagination.has_prev,
        )
