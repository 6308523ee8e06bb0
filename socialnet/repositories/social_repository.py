import logging
from typing import Optional

from sqlalchemy import and_, delete, func, select

from socialnet.models.follow import Follow
from socialnet.models.like import Like
from socialnet.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SocialRepository(BaseRepository):
    """
    좋아요 / 팔로우 조인 테이블 데이터 액세스 객체
    - 존재 여부 확인, 생성, 삭제, 집계
    - 생성 시 유니크 제약 위반(IntegrityError)은 commit()에서 롤백 후 그대로 전파
    """

    # ==================== Like ====================
    async def find_like(self, user_id: str, post_id: str) -> Optional[Like]:
        query = select(Like).where(and_(Like.user_id == user_id, Like.post_id == post_id))
        result = await self.session.execute(query)
        return result.scalars().first()

    async def add_like(self, user_id: str, post_id: str) -> None:
        self.session.add(Like(user_id=user_id, post_id=post_id))
        await self.commit()

    async def delete_like(self, user_id: str, post_id: str) -> None:
        """이미 삭제된 경우에도 오류 없이 0행 삭제로 끝남"""
        await self.session.execute(
            delete(Like).where(and_(Like.user_id == user_id, Like.post_id == post_id))
        )
        await self.commit()

    async def count_likes(self, post_id: str) -> int:
        query = select(func.count(Like.id)).where(Like.post_id == post_id)
        return (await self.session.execute(query)).scalar_one()

    # ==================== Follow ====================
    async def find_follow(self, follower_id: str, following_id: str) -> Optional[Follow]:
        query = select(Follow).where(
            and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        """팔로우 여부 단일 EXISTS 확인"""
        query = select(
            select(Follow.id)
            .where(and_(Follow.follower_id == follower_id, Follow.following_id == following_id))
            .exists()
        )
        return bool((await self.session.execute(query)).scalar())

    async def add_follow(self, follower_id: str, following_id: str) -> None:
        self.session.add(Follow(follower_id=follower_id, following_id=following_id))
        await self.commit()

    async def delete_follow(self, follower_id: str, following_id: str) -> None:
        await self.session.execute(
            delete(Follow).where(
                and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
            )
        )
        await self.commit()

    async def count_followers(self, user_id: str) -> int:
        query = select(func.count(Follow.id)).where(Follow.following_id == user_id)
        return (await self.session.execute(query)).scalar_one()
