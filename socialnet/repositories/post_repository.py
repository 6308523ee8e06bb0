import logging
from typing import List, NamedTuple, Optional

from sqlalchemy import and_, delete, false, func, select
from sqlalchemy.exc import SQLAlchemyError

from socialnet.models.comment import Comment
from socialnet.models.like import Like
from socialnet.models.post import Post
from socialnet.repositories.base_repository import BaseRepository
from socialnet.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class PostView(NamedTuple):
    """Post 엔티티와 집계 카운트, 조회자 좋아요 여부 묶음"""
    post: Post
    like_count: int
    comment_count: int
    is_liked: bool


# ==================== 쿼리 빌더 클래스 ====================
class PostQueryBuilder:
    """Post 엔티티 쿼리 빌더"""

    @staticmethod
    def view_query(viewer_id: Optional[str] = None):
        """
        좋아요 / 댓글 수와 조회자 좋아요 여부를 포함한 기본 쿼리
        - 좋아요 목록을 통째로 가져오지 않고 조회자 기준 EXISTS 한 번으로 판정
        - 작성자는 Post.author(lazy="joined")로 함께 로딩
        """
        like_count = (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id)
            .scalar_subquery()
        )
        comment_count = (
            select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .scalar_subquery()
        )
        if viewer_id:
            is_liked = (
                select(Like.id)
                .where(and_(Like.post_id == Post.id, Like.user_id == viewer_id))
                .exists()
            )
        else:
            is_liked = false()

        # 방금 추가한 Post 도 author 관계가 채워지도록 identity map 객체를 갱신
        return select(
            Post,
            like_count.label("like_count"),
            comment_count.label("comment_count"),
            is_liked.label("is_liked"),
        ).execution_options(populate_existing=True)

    @staticmethod
    def published_filter(author_id: Optional[str] = None):
        """공개 게시글 조건 (작성자 지정 시 해당 작성자로 한정)"""
        condition = Post.is_published.is_(True)
        if author_id:
            condition = and_(condition, Post.author_id == author_id)
        return condition


def _to_view(row) -> PostView:
    return PostView(row[0], row.like_count, row.comment_count, bool(row.is_liked))


class PostRepository(BaseRepository):
    """
    비동기 게시글 데이터 액세스 객체
    - Post 엔티티 저장, 조회, 삭제(댓글/좋아요 포함) 담당
    """

    async def get_by_id(self, post_id: str) -> Optional[Post]:
        """id로 Post 조회 (비공개 포함)"""
        try:
            return await self.session.get(Post, post_id)
        except SQLAlchemyError as e:
            logger.error(f"Post 조회 실패 (post_id={post_id}): {e}")
            raise

    async def exists(self, post_id: str) -> bool:
        """게시글 존재 여부 확인"""
        query = select(Post.id).where(Post.id == post_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def get_view(
            self,
            post_id: str,
            viewer_id: Optional[str] = None,
            published_only: bool = True,
    ) -> Optional[PostView]:
        """집계 정보를 포함한 단일 게시글 조회"""
        query = PostQueryBuilder.view_query(viewer_id).where(Post.id == post_id)
        if published_only:
            query = query.where(PostQueryBuilder.published_filter())
        row = (await self.session.execute(query)).first()
        logger.debug(f"Post 조회: post_id={post_id}, found={row is not None}")
        return _to_view(row) if row is not None else None

    async def list_published(
            self,
            page: PageRequest,
            viewer_id: Optional[str] = None,
            author_id: Optional[str] = None,
    ) -> List[PostView]:
        """공개 게시글 목록 (최신순, offset pagination)"""
        query = (
            PostQueryBuilder.view_query(viewer_id)
            .where(PostQueryBuilder.published_filter(author_id))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        rows = (await self.session.execute(query)).all()
        logger.debug(
            f"공개 게시글 조회: author_id={author_id}, page={page.page}, "
            f"limit={page.limit}, found={len(rows)}"
        )
        return [_to_view(row) for row in rows]

    async def count_published(self, author_id: Optional[str] = None) -> int:
        """공개 게시글 수"""
        query = select(func.count(Post.id)).where(PostQueryBuilder.published_filter(author_id))
        return (await self.session.execute(query)).scalar_one()

    async def create_post(self, post: Post) -> None:
        """Post 엔티티를 세션에 추가하고 커밋"""
        self.session.add(post)
        await self.commit()
        logger.debug(f"Post 추가: post_id={post.id}")

    async def save(self, post: Post) -> None:
        """변경된 Post 엔티티 커밋"""
        self.session.add(post)
        await self.commit()

    async def delete_with_children(self, post_id: str) -> None:
        """
        게시글과 해당 게시글의 좋아요 / 댓글을 하나의 트랜잭션으로 삭제
        - ON DELETE CASCADE를 지원하지 않는 저장소에서도 동일하게 동작
        """
        try:
            await self.session.execute(delete(Like).where(Like.post_id == post_id))
            await self.session.execute(delete(Comment).where(Comment.post_id == post_id))
            await self.session.execute(delete(Post).where(Post.id == post_id))
        except SQLAlchemyError as e:
            logger.error(f"게시글 삭제 실패, 롤백 수행: post_id={post_id}, error={e}")
            await self.rollback()
            raise
        await self.commit()
        logger.info(f"게시글 및 하위 데이터 삭제 완료: post_id={post_id}")
