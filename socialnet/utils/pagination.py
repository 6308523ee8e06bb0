import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50


@dataclass(frozen=True)
class PageRequest:
    """
    페이지 요청 파라미터
    - page: 1부터 시작하는 페이지 번호
    - limit: 페이지 당 항목 수
    """
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        """skip = (page - 1) * limit"""
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Pagination:
    """페이지네이션 메타 정보"""
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: PageRequest, total_count: int) -> "Pagination":
        """
        전체 개수와 요청 페이지로부터 메타 정보 계산
        - totalPages = ceil(total / limit)
        - hasNext ⇔ page < totalPages, hasPrev ⇔ page > 1
        """
        total_pages = math.ceil(total_count / page.limit)
        return cls(
            current_page=page.page,
            total_pages=total_pages,
            total_count=total_count,
            has_next=page.page < total_pages,
            has_prev=page.page > 1,
        )
