import logging
from typing import List, Optional

from sqlalchemy import delete, func, select

from socialnet.models.comment import Comment
from socialnet.repositories.base_repository import BaseRepository
from socialnet.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class CommentRepository(BaseRepository):
    """
    댓글 데이터 액세스 객체
    - Comment 엔티티 조회, 생성, 삭제
    """

    async def get_by_id(self, comment_id: str) -> Optional[Comment]:
        """id로 Comment 조회"""
        return await self.session.get(Comment, comment_id)

    async def get_with_user(self, comment_id: str) -> Optional[Comment]:
        """작성자(user)까지 채워진 Comment 조회"""
        query = (
            select(Comment)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def list_by_post(self, post_id: str, page: PageRequest) -> List[Comment]:
        """게시글의 댓글 목록 (최신순), 작성자는 joined 로딩"""
        query = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        result = await self.session.execute(query)
        comments = list(result.scalars().all())
        logger.debug(f"댓글 조회: post_id={post_id}, page={page.page}, found={len(comments)}")
        return comments

    async def count_by_post(self, post_id: str) -> int:
        """게시글의 댓글 수"""
        query = select(func.count(Comment.id)).where(Comment.post_id == post_id)
        return (await self.session.execute(query)).scalar_one()

    async def create_comment(self, comment: Comment) -> None:
        """Comment 엔티티를 세션에 추가하고 커밋"""
        self.session.add(comment)
        await self.commit()

    async def delete_comment(self, comment_id: str) -> None:
        """Comment 삭제 후 커밋"""
        await self.session.execute(delete(Comment).where(Comment.id == comment_id))
        await self.commit()
