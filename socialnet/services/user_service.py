import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.models.user import User
from socialnet.repositories.post_repository import PostRepository, PostView
from socialnet.repositories.social_repository import SocialRepository
from socialnet.repositories.user_repository import UserRepository, UserView
from socialnet.utils.exceptions import BadRequestError, NotFoundError
from socialnet.utils.pagination import PageRequest, Pagination

logger = logging.getLogger(__name__)


class UserService:
    """
    사용자 서비스
    - 활성 사용자 목록 / 단일 조회 (집계 카운트, 팔로우 여부)
    - 사용자별 공개 게시글 조회
    - 팔로우 토글 (자기 자신 팔로우 금지)
    """

    def __init__(self, db: AsyncSession):
        self.user_repo = UserRepository(db)
        self.post_repo = PostRepository(db)
        self.social_repo = SocialRepository(db)

    async def list_users(self, page: PageRequest) -> Tuple[List[UserView], Pagination]:
        """활성 사용자 목록 (최신 가입순)"""
        users = await self.user_repo.list_active_users(page)
        total = await self.user_repo.count_active_users()
        return users, Pagination.build(page, total)

    async def get_user(self, user_id: str, viewer: Optional[User] = None) -> Tuple[UserView, bool]:
        """
        단일 사용자 조회
        - 없거나 비활성이면 NotFoundError
        - 조회자가 있고 본인이 아니면 팔로우 여부를 EXISTS 한 번으로 확인
        """
        view = await self.user_repo.get_view(user_id)
        if view is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.")

        is_following = False
        if viewer is not None and viewer.id != user_id:
            is_following = await self.social_repo.is_following(viewer.id, user_id)
        return view, is_following

    async def list_user_posts(
        self,
        user_id: str,
        page: PageRequest,
        viewer: Optional[User] = None,
    ) -> Tuple[List[PostView], Pagination]:
        """
        사용자의 공개 게시글 목록
        - 대상 사용자가 없거나 비활성이면 NotFoundError
        """
        await self._require_active_user(user_id)
        viewer_id = viewer.id if viewer else None
        posts = await self.post_repo.list_published(page, viewer_id, author_id=user_id)
        total = await self.post_repo.count_published(author_id=user_id)
        return posts, Pagination.build(page, total)

    async def toggle_follow(self, user_id: str, actor: User) -> Tuple[bool, int]:
        """
        팔로우 토글
        1) 자기 자신이면 BadRequestError (토글 아님, 행 생성 없음)
        2) 대상이 없거나 비활성이면 NotFoundError
        3) 존재하면 삭제(false), 없으면 생성(true)
           - 동시 요청으로 유니크 제약 위반이 나면 이미 팔로우 상태로 간주
        4) 팔로워 수 재집계
        """
        actor_id = actor.id
        if actor_id == user_id:
            raise BadRequestError("자기 자신을 팔로우할 수 없습니다.")
        await self._require_active_user(user_id)

        if await self.social_repo.find_follow(actor_id, user_id):
            await self.social_repo.delete_follow(actor_id, user_id)
            is_following = False
        else:
            try:
                await self.social_repo.add_follow(actor_id, user_id)
            except IntegrityError:
                logger.info("팔로우 중복 생성 감지, 이미 팔로우 상태로 처리: %s → %s", actor_id, user_id)
            is_following = True

        follower_count = await self.social_repo.count_followers(user_id)
        logger.info("팔로우 토글: %s → %s, following=%s", actor_id, user_id, is_following)
        return is_following, follower_count

    async def _require_active_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return user
