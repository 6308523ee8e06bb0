import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Set, Tuple

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.config import Settings
from socialnet.jwt.blocklist import jwt_blocklist
from socialnet.models.user import User
from socialnet.repositories.user_repository import UserRepository, UserView
from socialnet.schemas.auth_schema import RegisterRequest, UpdateProfileRequest
from socialnet.utils.exceptions import ConflictError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenPayload(BaseModel):
    """
    JWT 토큰 페이로드 모델
    - sub: 사용자 식별자 (User.id)
    - jti: 토큰 식별자 (JWT ID)
    """
    sub: str
    jti: str
    type: str = "access"


class TokenService:
    """
    JWT 토큰 발급 / 검증 서비스
    - 서명(HS256) + 만료 시각을 담은 stateless 토큰
    - 로그아웃된 토큰은 jti 블랙리스트로 거부
    """
    def __init__(self, settings: Settings, blocklisted_jti: Optional[Set[str]] = None):
        self._secret_key = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._expires = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES)
        self._blocklist = jwt_blocklist if blocklisted_jti is None else blocklisted_jti

    def create_access_token(self, user_id: str) -> str:
        """사용자 id를 sub로 담은 액세스 토큰 발급"""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + self._expires,
            "jti": uuid.uuid4().hex,
            "type": "access",
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def validate_token(self, token: str) -> TokenPayload:
        """
        Bearer 토큰의 유효성을 검증하여 TokenPayload 반환
        Raises:
            UnauthorizedError: 만료(TOKEN_EXPIRED), 서명/형식 오류, 블랙리스트 등재
        """
        try:
            payload_data = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
            token_payload = TokenPayload(**payload_data)
        except ExpiredSignatureError:
            raise UnauthorizedError("토큰이 만료되었습니다.", code="TOKEN_EXPIRED")
        except (JWTError, ValueError):
            logger.warning("유효하지 않은 JWT 토큰")
            raise UnauthorizedError("토큰 인증 실패")

        if token_payload.type != "access":
            raise UnauthorizedError("토큰 인증 실패")
        if token_payload.jti in self._blocklist:
            logger.warning("블랙리스트 처리된 토큰: %s", token_payload.jti)
            raise UnauthorizedError("토큰이 무효화되었습니다.")
        return token_payload

    def revoke(self, token: str) -> None:
        """
        토큰의 jti를 블랙리스트에 등록
        - 디코딩 실패 시 경고만 남기고 무시
        """
        try:
            decoded = jwt.decode(
                token, self._secret_key, algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            logger.warning("토큰 디코딩 실패 (로그아웃 중 무시됨)")
            return
        jti = decoded.get("jti")
        if jti:
            self._blocklist.add(jti)


class AuthService:
    """
    인증 관련 서비스 클래스
    - 회원가입, 로그인, 로그아웃,
    - 내 정보 조회 / 수정 / 비활성화
    """
    def __init__(self, db: AsyncSession, token_service: TokenService):
        self.db = db
        self.user_repo = UserRepository(db)
        self.tokens = token_service

    async def register(self, data: RegisterRequest) -> Tuple[UserView, str]:
        # 1) 이메일 / username 중복 체크
        if await self.user_repo.find_by_email(data.email):
            raise ConflictError("email 값이 이미 존재합니다.")
        if await self.user_repo.find_by_username(data.username):
            raise ConflictError("username 값이 이미 존재합니다.")

        # 2) User 생성/저장 (동시 가입 경쟁은 유니크 제약 → 409 로 처리됨)
        user = User(
            email=data.email,
            username=data.username,
            first_name=data.first_name,
            last_name=data.last_name,
            password=pwd_context.hash(data.password),
        )
        await self.user_repo.create_user(user)
        logger.info("회원가입 완료: user_id=%s", user.id)

        # 3) 자동 로그인 토큰 발급
        return await self._profile(user.id), self.tokens.create_access_token(user.id)

    async def login(self, email: str, password: str) -> Tuple[UserView, str]:
        """
        이메일/비밀번호 로그인
        """
        user = await self.user_repo.find_by_email(email)
        if not user or not pwd_context.verify(password, user.password):
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다.")
        if not user.is_active:
            raise UnauthorizedError("비활성화된 계정입니다.")

        logger.info("로그인: user_id=%s", user.id)
        return await self._profile(user.id), self.tokens.create_access_token(user.id)

    def logout(self, token: str) -> None:
        """
        로그아웃 + 토큰 블랙리스트 등록
        """
        self.tokens.revoke(token)

    async def get_profile(self, user: User) -> UserView:
        return await self._profile(user.id)

    async def update_profile(self, user: User, data: UpdateProfileRequest) -> UserView:
        """
        요청에 포함된 필드만 변경 (null 값은 무시)
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(user, field, value)
        await self.user_repo.save(user)
        logger.info("프로필 수정: user_id=%s, fields=%s", user.id, sorted(changes))
        return await self._profile(user.id)

    async def deactivate(self, user: User) -> None:
        """계정 비활성화 (is_active = False)"""
        user.is_active = False
        await self.user_repo.save(user)
        logger.info("계정 비활성화: user_id=%s", user.id)

    async def _profile(self, user_id: str) -> UserView:
        view = await self.user_repo.get_view(user_id, active_only=False)
        if view is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return view
