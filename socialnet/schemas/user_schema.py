from datetime import datetime
from typing import List, Optional

from pydantic import Field

from socialnet.models.user import User
from socialnet.repositories.user_repository import UserView
from socialnet.schemas.common_schema import CamelModel, PaginationMeta

# ─── 사용자 관련 응답 스키마 정의 ───────────────────────────────────────

class UserSummary(CamelModel):
    """
    게시글 작성자 / 댓글 작성자로 포함되는 공개 요약 정보
    """
    id: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
        )


class UserCounts(CamelModel):
    posts: int = Field(0, description="작성 게시글 수")
    followers: int = Field(0, description="팔로워 수")
    following: int = Field(0, description="팔로잉 수")


def _profile_fields(view: UserView) -> dict:
    user = view.user
    return dict(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar=user.avatar,
        bio=user.bio,
        created_at=user.created_at,
        count=UserCounts(
            posts=view.post_count,
            followers=view.follower_count,
            following=view.following_count,
        ),
    )


class UserProfileResponse(UserSummary):
    """
    공개 사용자 프로필
    - isFollowing 은 단일 사용자 조회 시 조회자 기준으로만 채워짐
    """
    bio: Optional[str] = None
    created_at: datetime
    is_following: Optional[bool] = Field(None, description="조회자가 이 사용자를 팔로우 중인지 여부")
    count: UserCounts = Field(..., alias="_count")

    @classmethod
    def from_view(cls, view: UserView, is_following: Optional[bool] = None) -> "UserProfileResponse":
        """UserView(엔티티 + 집계)를 공개 프로필로 변환"""
        return cls(is_following=is_following, **_profile_fields(view))


class UserPrivateResponse(UserProfileResponse):
    """
    본인 프로필 (인증 API 전용)
    """
    email: str
    is_active: bool

    @classmethod
    def from_view(cls, view: UserView, is_following: Optional[bool] = None) -> "UserPrivateResponse":
        return cls(
            email=view.user.email,
            is_active=view.user.is_active,
            is_following=is_following,
            **_profile_fields(view),
        )


class UserData(CamelModel):
    user: UserProfileResponse


class PrivateUserData(CamelModel):
    user: UserPrivateResponse


class UserListData(CamelModel):
    users: List[UserProfileResponse]
    pagination: PaginationMeta


class FollowToggleData(CamelModel):
    is_following: bool
    follower_count: int
