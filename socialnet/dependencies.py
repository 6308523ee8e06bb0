import logging
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.config import Settings
from socialnet.core.database import get_db_session
from socialnet.models.user import User
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.auth_service import AuthService, TokenService
from socialnet.services.post_service import CommentService, PostService
from socialnet.services.storage_service import ImageStorage
from socialnet.services.user_service import UserService
from socialnet.utils.exceptions import UnauthorizedError
from socialnet.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageRequest

logger = logging.getLogger(__name__)

# 헤더가 없을 때 자동 401 대신 None 을 받아 envelope 형식으로 직접 응답
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """create_app()에서 app.state에 보관한 Settings 반환"""
    return request.app.state.settings


def get_token_service(settings: Settings = Depends(get_app_settings)) -> TokenService:
    """
    TokenService 의존성 주입 함수
    - JWT_SECRET_KEY / 만료 시간과 메모리 블랙리스트로 생성
    """
    return TokenService(settings)


def get_image_storage(request: Request) -> ImageStorage:
    """프로세스 단위 ImageStorage 반환"""
    return request.app.state.image_storage


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    token_service: TokenService = Depends(get_token_service),
    db_session: AsyncSession = Depends(get_db_session),
) -> User:
    """
    현재 요청의 사용자를 가져오는 종속성 함수
    1) Authorization 헤더의 Bearer 토큰 추출
    2) validate_token() 호출 → TokenPayload 반환
    3) DB에서 sub(User.id)로 User 엔티티 조회 후 반환
    Raises:
        UnauthorizedError if token missing/invalid or user missing/inactive
    """
    if not token:
        raise UnauthorizedError("인증 토큰이 필요합니다.")

    token_info = token_service.validate_token(token)

    user = await UserRepository(db_session).get_by_id(token_info.sub)
    if not user or not user.is_active:
        logger.warning("토큰의 사용자(%s)가 없거나 비활성 상태", token_info.sub)
        raise UnauthorizedError("유효하지 않은 사용자입니다.")
    return user


async def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme),
    token_service: TokenService = Depends(get_token_service),
    db_session: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    선택적 사용자 조회 함수
    - 토큰이 없거나 검증에 실패하면 익명 조회자(None)로 처리
    """
    if not token:
        return None
    try:
        return await get_current_user(token, token_service, db_session)
    except UnauthorizedError:
        return None


def get_page_request(
    page: int = Query(DEFAULT_PAGE, ge=1, description="1부터 시작하는 페이지 번호"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="페이지 당 항목 수"),
) -> PageRequest:
    return PageRequest(page=page, limit=limit)


def get_auth_service(
    db: AsyncSession = Depends(get_db_session),
    token_service: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, token_service)


def get_post_service(
    db: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
) -> PostService:
    return PostService(db, storage)


def get_comment_service(db: AsyncSession = Depends(get_db_session)) -> CommentService:
    return CommentService(db)


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    return UserService(db)
