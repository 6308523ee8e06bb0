import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from socialnet.dependencies import get_auth_service, get_current_user, oauth2_scheme
from socialnet.models.user import User
from socialnet.schemas.auth_schema import AuthData, LoginRequest, RegisterRequest, UpdateProfileRequest
from socialnet.schemas.common_schema import ApiResponse
from socialnet.schemas.user_schema import PrivateUserData, UserPrivateResponse
from socialnet.services.auth_service import AuthService

# 로거 설정
logger = logging.getLogger(__name__)

# 라우터 인스턴스
router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """
    1) email / username 중복 확인
    2) User 생성 (비밀번호 bcrypt 해시)
    3) 액세스 토큰 발급 후 본인 프로필과 함께 반환
    """
    view, token = await service.register(req)
    return ApiResponse(
        message="회원가입 성공",
        data=AuthData(user=UserPrivateResponse.from_view(view), token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthData], summary="로그인")
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """
    이메일 로그인 처리 후 액세스 토큰 반환
    """
    view, token = await service.login(req.email, req.password)
    return ApiResponse(
        message="로그인 성공",
        data=AuthData(user=UserPrivateResponse.from_view(view), token=token),
    )


@router.post("/logout", response_model=ApiResponse, summary="로그아웃")
async def logout(
    token: Optional[str] = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    """
    토큰 블랙리스트 등록으로 로그아웃 처리
    - 토큰이 없거나 형식이 잘못되어도 성공으로 응답
    """
    if token:
        service.logout(token)
    return ApiResponse(message="로그아웃 성공")


@router.get("/me", response_model=ApiResponse[PrivateUserData], summary="내 정보 조회")
async def get_me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[PrivateUserData]:
    view = await service.get_profile(current_user)
    return ApiResponse(data=PrivateUserData(user=UserPrivateResponse.from_view(view)))


@router.put("/me", response_model=ApiResponse[PrivateUserData], summary="내 정보 수정")
async def update_me(
    req: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[PrivateUserData]:
    """
    전달된 필드(firstName, lastName, bio, avatar)만 변경
    """
    view = await service.update_profile(current_user, req)
    return ApiResponse(message="프로필 수정 성공", data=PrivateUserData(user=UserPrivateResponse.from_view(view)))


@router.delete("/me", response_model=ApiResponse, summary="계정 비활성화")
async def deactivate_me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    """
    계정을 비활성화 (이후 로그인 / 조회 불가)
    """
    await service.deactivate(current_user)
    return ApiResponse(message="계정이 비활성화되었습니다.")
