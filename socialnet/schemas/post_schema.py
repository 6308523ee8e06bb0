from datetime import datetime
from typing import List, Optional

from pydantic import Field, validator

from socialnet.models.comment import Comment
from socialnet.repositories.post_repository import PostView
from socialnet.schemas.common_schema import CamelModel, PaginationMeta
from socialnet.schemas.user_schema import UserSummary

POST_CONTENT_MAX = 2000
COMMENT_CONTENT_MAX = 500


# ─── 게시글 관련 요청 스키마 정의 ─────────────────────────────────────────

class PostContentRequest(CamelModel):
    """
    게시글 작성 / 수정 요청 모델
    - 앞뒤 공백 제거 후 1~2000자
    """
    content: str = Field(
        ...,
        min_length=1,
        max_length=POST_CONTENT_MAX,
        description="게시글 본문",
    )

    @validator("content", pre=True)
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class CommentCreateRequest(CamelModel):
    """
    댓글 작성 요청 모델
    - 앞뒤 공백 제거 후 1~500자
    """
    content: str = Field(
        ...,
        min_length=1,
        max_length=COMMENT_CONTENT_MAX,
        description="댓글 본문",
    )

    @validator("content", pre=True)
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


# ─── 게시글 관련 응답 스키마 정의 ─────────────────────────────────────────

class PostCounts(CamelModel):
    likes: int = 0
    comments: int = 0


class PostResponse(CamelModel):
    """
    단일 게시글 정보
    - isLiked: 조회자가 좋아요를 눌렀는지 여부 (비로그인 시 false)
    - _count: 좋아요 / 댓글 수
    """
    id: str
    content: str
    image_url: Optional[str] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime
    author: UserSummary
    is_liked: bool = False
    count: PostCounts = Field(..., alias="_count")

    @classmethod
    def from_view(cls, view: PostView) -> "PostResponse":
        """PostView(엔티티 + 집계 + 좋아요 여부)를 응답 모델로 변환"""
        post = view.post
        return cls(
            id=post.id,
            content=post.content,
            image_url=post.image_url,
            is_published=post.is_published,
            created_at=post.created_at,
            updated_at=post.updated_at,
            author=UserSummary.from_user(post.author),
            is_liked=view.is_liked,
            count=PostCounts(likes=view.like_count, comments=view.comment_count),
        )


class PostData(CamelModel):
    post: PostResponse


class PostListData(CamelModel):
    posts: List[PostResponse]
    pagination: PaginationMeta


class LikeToggleData(CamelModel):
    is_liked: bool
    like_count: int


class CommentResponse(CamelModel):
    """
    단일 댓글 정보
    """
    id: str
    content: str
    created_at: datetime
    updated_at: datetime
    user: UserSummary

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            user=UserSummary.from_user(comment.user),
        )


class CommentData(CamelModel):
    comment: CommentResponse


class CommentListData(CamelModel):
    comments: List[CommentResponse]
    pagination: PaginationMeta
