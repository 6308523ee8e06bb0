import logging
from typing import List, NamedTuple, Optional

from sqlalchemy import func, select

from socialnet.models.follow import Follow
from socialnet.models.post import Post
from socialnet.models.user import User
from socialnet.repositories.base_repository import BaseRepository
from socialnet.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class UserView(NamedTuple):
    """User 엔티티와 집계 카운트 묶음"""
    user: User
    post_count: int
    follower_count: int
    following_count: int


# ==================== 쿼리 빌더 클래스 ====================
class UserQueryBuilder:
    """User 엔티티 쿼리 빌더"""

    @staticmethod
    def view_query():
        """게시글 / 팔로워 / 팔로잉 수를 상관 서브쿼리로 포함한 기본 쿼리"""
        post_count = (
            select(func.count(Post.id))
            .where(Post.author_id == User.id)
            .scalar_subquery()
        )
        follower_count = (
            select(func.count(Follow.id))
            .where(Follow.following_id == User.id)
            .scalar_subquery()
        )
        following_count = (
            select(func.count(Follow.id))
            .where(Follow.follower_id == User.id)
            .scalar_subquery()
        )
        return select(
            User,
            post_count.label("post_count"),
            follower_count.label("follower_count"),
            following_count.label("following_count"),
        )


class UserRepository(BaseRepository):
    """
    사용자 관련 데이터 액세스 담당 Repository 클래스
    - User 엔티티 조회 및 생성, 집계 카운트 포함 조회 기능 제공
    """

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """id로 User 조회 (비활성 사용자 포함)"""
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        주어진 이메일과 일치하는 User 객체 반환
        """
        query = select(User).where(User.email == email)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        주어진 username과 일치하는 User 객체 반환
        """
        query = select(User).where(User.username == username)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def create_user(self, user: User) -> None:
        """
        새 User 엔티티를 세션에 추가하고 커밋
        """
        self.session.add(user)
        await self.commit()
        logger.debug(f"User 생성: id={user.id}")

    async def save(self, user: User) -> None:
        """변경된 User 엔티티 커밋"""
        self.session.add(user)
        await self.commit()

    async def get_view(self, user_id: str, active_only: bool = True) -> Optional[UserView]:
        """집계 카운트를 포함한 단일 사용자 조회"""
        query = UserQueryBuilder.view_query().where(User.id == user_id)
        if active_only:
            query = query.where(User.is_active.is_(True))
        row = (await self.session.execute(query)).first()
        if row is None:
            return None
        return UserView(row[0], row.post_count, row.follower_count, row.following_count)

    async def list_active_users(self, page: PageRequest) -> List[UserView]:
        """활성 사용자 목록 (최신 가입순)"""
        query = (
            UserQueryBuilder.view_query()
            .where(User.is_active.is_(True))
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        rows = (await self.session.execute(query)).all()
        logger.debug(f"활성 사용자 조회: page={page.page}, found={len(rows)}")
        return [
            UserView(row[0], row.post_count, row.follower_count, row.following_count)
            for row in rows
        ]

    async def count_active_users(self) -> int:
        """활성 사용자 수"""
        query = select(func.count(User.id)).where(User.is_active.is_(True))
        return (await self.session.execute(query)).scalar_one()
