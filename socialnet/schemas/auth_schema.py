from typing import Optional

from pydantic import EmailStr, Field, validator

from socialnet.schemas.common_schema import CamelModel
from socialnet.schemas.user_schema import UserPrivateResponse

# ─── 인증 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class RegisterRequest(CamelModel):
    """
    회원가입 요청 모델
    - 이메일, 사용자명, 이름/성, 비밀번호
    """
    email:      EmailStr = Field(..., description="이메일 주소")
    username:   str      = Field(
        ..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$",
        description="사용자명 (영문, 숫자, 밑줄)",
    )
    first_name: str      = Field(..., min_length=1, max_length=50, description="이름")
    last_name:  str      = Field(..., min_length=1, max_length=50, description="성")
    password:   str      = Field(..., min_length=6, max_length=128, description="비밀번호")

    @validator("username", "first_name", "last_name", pre=True)
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(CamelModel):
    """
    로그인 요청 모델
    - 이메일과 비밀번호를 사용하여 인증 수행
    """
    email:    EmailStr = Field(..., description="로그인용 이메일 주소")
    password: str      = Field(..., min_length=1, description="비밀번호")


class UpdateProfileRequest(CamelModel):
    """
    프로필 수정 요청 모델
    - 전달된 필드만 변경
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=50, description="이름")
    last_name:  Optional[str] = Field(None, min_length=1, max_length=50, description="성")
    bio:        Optional[str] = Field(None, max_length=500, description="자기소개")
    avatar:     Optional[str] = Field(None, max_length=500, description="프로필 이미지 URL")

    @validator("first_name", "last_name", "bio", pre=True)
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class AuthData(CamelModel):
    """
    인증 성공 응답 데이터
    - user: 본인 프로필, token: Bearer 액세스 토큰
    """
    user: UserPrivateResponse
    token: str
