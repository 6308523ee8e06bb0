import logging
from typing import Optional

from fastapi import APIRouter, Depends

from socialnet.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_page_request,
    get_user_service,
)
from socialnet.models.user import User
from socialnet.schemas.common_schema import ApiResponse, PaginationMeta
from socialnet.schemas.post_schema import PostListData, PostResponse
from socialnet.schemas.user_schema import (
    FollowToggleData,
    UserData,
    UserListData,
    UserProfileResponse,
)
from socialnet.services.user_service import UserService
from socialnet.utils.pagination import PageRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["User"])


@router.get("", response_model=ApiResponse[UserListData], summary="활성 사용자 목록")
async def list_users(
    page: PageRequest = Depends(get_page_request),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserListData]:
    """
    활성 사용자를 가입일 역순으로 조회 (게시글 / 팔로워 / 팔로잉 수 포함)
    """
    views, pagination = await service.list_users(page)
    return ApiResponse(
        data=UserListData(
            users=[UserProfileResponse.from_view(v) for v in views],
            pagination=PaginationMeta.from_pagination(pagination),
        )
    )


@router.get("/{user_id}", response_model=ApiResponse[UserData], summary="사용자 프로필 조회")
async def get_user(
    user_id: str,
    viewer: Optional[User] = Depends(get_current_user_optional),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserData]:
    """
    단일 사용자 조회
    - 로그인 상태이면 isFollowing 포함 (본인 조회 시 false)
    """
    view, is_following = await service.get_user(user_id, viewer)
    return ApiResponse(data=UserData(user=UserProfileResponse.from_view(view, is_following)))


@router.get("/{user_id}/posts", response_model=ApiResponse[PostListData], summary="사용자 게시글 목록")
async def list_user_posts(
    user_id: str,
    page: PageRequest = Depends(get_page_request),
    viewer: Optional[User] = Depends(get_current_user_optional),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[PostListData]:
    views, pagination = await service.list_user_posts(user_id, page, viewer)
    return ApiResponse(
        data=PostListData(
            posts=[PostResponse.from_view(v) for v in views],
            pagination=PaginationMeta.from_pagination(pagination),
        )
    )


@router.post("/{user_id}/follow", response_model=ApiResponse[FollowToggleData], summary="팔로우 토글")
async def toggle_follow(
    user_id: str,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[FollowToggleData]:
    """
    팔로우 / 언팔로우 토글
    - 자기 자신은 팔로우 불가 (400)
    """
    is_following, follower_count = await service.toggle_follow(user_id, current_user)
    return ApiResponse(
        message="팔로우했습니다." if is_following else "팔로우를 취소했습니다.",
        data=FollowToggleData(is_following=is_following, follower_count=follower_count),
    )
