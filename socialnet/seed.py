"""
데모 데이터 시드 스크립트

    python -m socialnet.seed

- 데모 사용자 2명 (비밀번호: password123), 게시글, 댓글, 좋아요, 팔로우 생성
- 사용자는 이메일 기준으로 재사용하므로 여러 번 실행해도 중복 생성되지 않음
"""

import asyncio
import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialnet.core.config import get_settings
from socialnet.core.database import create_engine, create_session_factory, init_db
from socialnet.models.comment import Comment
from socialnet.models.follow import Follow
from socialnet.models.like import Like
from socialnet.models.post import Post
from socialnet.models.user import User
from socialnet.repositories.post_repository import PostRepository
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.auth_service import pwd_context

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS: List[Dict[str, str]] = [
    {
        "email": "john@example.com",
        "username": "johndoe",
        "first_name": "John",
        "last_name": "Doe",
        "bio": "Software developer passionate about building great apps.",
    },
    {
        "email": "jane@example.com",
        "username": "janesmith",
        "first_name": "Jane",
        "last_name": "Smith",
        "bio": "Designer and creative thinker.",
    },
]


async def _get_or_create_user(repo: UserRepository, data: Dict[str, str], password_hash: str) -> User:
    user = await repo.find_by_email(data["email"])
    if user:
        logger.info("기존 사용자 재사용: %s", data["email"])
        return user
    user = User(password=password_hash, **data)
    await repo.create_user(user)
    logger.info("데모 사용자 생성: %s", data["email"])
    return user


async def seed(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """
    데모 데이터 생성
    - john 의 게시글이 이미 있으면 게시글 / 댓글 / 좋아요 / 팔로우 생성은 건너뜀
    """
    async with session_factory() as session:
        user_repo = UserRepository(session)
        password_hash = pwd_context.hash(DEMO_PASSWORD)
        john, jane = [await _get_or_create_user(user_repo, data, password_hash) for data in DEMO_USERS]

        if await PostRepository(session).count_published(author_id=john.id):
            logger.info("데모 게시글이 이미 존재하여 건너뜀")
            return

        welcome = Post(
            content="Welcome to our new social media platform! Excited to share and connect with everyone.",
            author_id=john.id,
        )
        design = Post(
            content=(
                "Just finished working on a new design project. Love how creativity flows "
                "when you're passionate about what you do! 🎨"
            ),
            author_id=jane.id,
        )
        session.add_all([welcome, design])
        await session.flush()

        session.add_all([
            Comment(
                content="Great to have you here! Looking forward to your posts.",
                user_id=jane.id,
                post_id=welcome.id,
            ),
            Comment(
                content="Your designs are always inspiring! Can't wait to see what you create next.",
                user_id=john.id,
                post_id=design.id,
            ),
            Like(user_id=jane.id, post_id=welcome.id),
            Like(user_id=john.id, post_id=design.id),
            Follow(follower_id=john.id, following_id=jane.id),
        ])
        await user_repo.commit()

    logger.info("시드 완료. 데모 계정: %s (password: %s)",
                ", ".join(u["email"] for u in DEMO_USERS), DEMO_PASSWORD)


async def main() -> None:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        await init_db(engine)
        await seed(create_session_factory(engine))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    asyncio.run(main())
