from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ItemT = TypeVar("ItemT")


class ClientModel(BaseModel):
    """camelCase 응답을 snake_case 속성으로 읽는 베이스 모델 (모르는 필드는 무시)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class UserCounts(ClientModel):
    posts: int = 0
    followers: int = 0
    following: int = 0


class User(ClientModel):
    """
    사용자 정보
    - 작성자 요약으로 올 때는 id / username / 이름 / avatar 만 채워짐
    - email, is_active 는 본인 프로필(auth API)에서만 채워짐
    """
    id: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None
    is_following: Optional[bool] = None
    count: Optional[UserCounts] = Field(None, alias="_count")


class PostCounts(ClientModel):
    likes: int = 0
    comments: int = 0


class Post(ClientModel):
    id: str
    content: str
    image_url: Optional[str] = None
    is_published: bool = True
    created_at: datetime
    updated_at: datetime
    author: User
    is_liked: bool = False
    count: PostCounts = Field(default_factory=PostCounts, alias="_count")


class Comment(ClientModel):
    id: str
    content: str
    created_at: datetime
    updated_at: datetime
    user: User


class Pagination(ClientModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class Page(BaseModel, Generic[ItemT]):
    """목록 응답 한 페이지 (items + pagination)"""
    items: List[ItemT]
    pagination: Pagination


class AuthResult(ClientModel):
    user: User
    token: str


class LikeToggle(ClientModel):
    is_liked: bool
    like_count: int


class FollowToggle(ClientModel):
    is_following: bool
    follower_count: int
