import logging
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.models.comment import Comment
from socialnet.models.post import Post
from socialnet.models.user import User, generate_id
from socialnet.repositories.comment_repository import CommentRepository
from socialnet.repositories.post_repository import PostRepository, PostView
from socialnet.repositories.social_repository import SocialRepository
from socialnet.services.storage_service import ImageStorage, StoredImage
from socialnet.utils.exceptions import ForbiddenError, NotFoundError
from socialnet.utils.pagination import PageRequest, Pagination

logger = logging.getLogger(__name__)


class PostService:
    """
    게시글 서비스
    - 공개 게시글 조회 (집계 카운트 + 조회자 좋아요 여부)
    - 작성 / 수정 / 삭제 (작성자 소유권 확인, 이미지 파일 정리)
    - 좋아요 토글
    """

    def __init__(self, db: AsyncSession, storage: ImageStorage):
        """
        - db: 비동기 DB 세션
        - storage: 게시글 이미지 저장소
        """
        self.post_repo = PostRepository(db)
        self.social_repo = SocialRepository(db)
        self.storage = storage

    async def list_posts(
        self,
        page: PageRequest,
        viewer: Optional[User] = None,
    ) -> Tuple[List[PostView], Pagination]:
        """공개 게시글 목록 (최신순)"""
        viewer_id = viewer.id if viewer else None
        posts = await self.post_repo.list_published(page, viewer_id)
        total = await self.post_repo.count_published()
        return posts, Pagination.build(page, total)

    async def get_post(self, post_id: str, viewer: Optional[User] = None) -> PostView:
        """
        단일 공개 게시글 조회
        - 존재하지 않거나 비공개이면 NotFoundError (작성자 본인도 동일)
        """
        view = await self.post_repo.get_view(post_id, viewer.id if viewer else None)
        if view is None:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        return view

    async def create_post(
        self,
        content: str,
        owner: User,
        image: Optional[UploadFile] = None,
    ) -> PostView:
        """
        게시글 작성
        1) 이미지가 있으면 먼저 저장
        2) Post 행 생성 → 커밋
        3) 2) 이후 어느 단계에서든 실패하면 저장한 이미지를 삭제하고 예외 전파
        """
        owner_id = owner.id
        stored: Optional[StoredImage] = None
        if image is not None:
            stored = await self.storage.save(image)

        post_id = generate_id()
        try:
            post = Post(
                id=post_id,
                content=content,
                image_url=stored.url if stored else None,
                author_id=owner_id,
            )
            await self.post_repo.create_post(post)
            view = await self.post_repo.get_view(post_id, owner_id, published_only=False)
        except Exception:
            if stored is not None:
                await self._discard_image(stored.url)
            raise

        logger.info("게시글 작성: post_id=%s, author_id=%s, image=%s", post_id, owner_id, bool(stored))
        return view

    async def update_post(self, post_id: str, content: str, owner: User) -> PostView:
        """
        게시글 수정
        1) 게시글 조회 (없으면 NotFoundError)
        2) 작성자와 요청자 일치 확인 (아니면 ForbiddenError)
        3) 본문 변경 → 커밋 → 최신 집계와 함께 반환
        """
        owner_id = owner.id
        post = await self.post_repo.get_by_id(post_id)
        if post is None:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        if post.author_id != owner_id:
            raise ForbiddenError("본인의 게시글만 수정할 수 있습니다.")

        post.content = content
        await self.post_repo.save(post)
        logger.info("게시글 수정: post_id=%s", post_id)
        return await self.post_repo.get_view(post_id, owner_id, published_only=False)

    async def delete_post(self, post_id: str, owner: User) -> None:
        """
        게시글 삭제
        1) 게시글 조회 / 소유권 확인
        2) 좋아요 · 댓글 · 게시글 행 삭제 (단일 트랜잭션)
        3) 이미지 파일 삭제 (실패해도 요청은 성공 처리)
        """
        post = await self.post_repo.get_by_id(post_id)
        if post is None:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        if post.author_id != owner.id:
            raise ForbiddenError("본인의 게시글만 삭제할 수 있습니다.")

        image_url = post.image_url
        await self.post_repo.delete_with_children(post_id)
        if image_url:
            await self._discard_image(image_url)
        logger.info("게시글 삭제: post_id=%s", post_id)

    async def toggle_like(self, post_id: str, viewer: User) -> Tuple[bool, int]:
        """
        좋아요 토글
        - 존재하면 삭제(false), 없으면 생성(true)
        - 동시 요청으로 유니크 제약 위반이 나면 이미 좋아요 상태로 간주
        - 좋아요 수는 메모리 증감이 아니라 다시 집계
        """
        viewer_id = viewer.id
        if not await self.post_repo.exists(post_id):
            raise NotFoundError("게시글을 찾을 수 없습니다.")

        if await self.social_repo.find_like(viewer_id, post_id):
            await self.social_repo.delete_like(viewer_id, post_id)
            is_liked = False
        else:
            try:
                await self.social_repo.add_like(viewer_id, post_id)
            except IntegrityError:
                logger.info("좋아요 중복 생성 감지, 이미 좋아요 상태로 처리: post_id=%s", post_id)
            is_liked = True

        like_count = await self.social_repo.count_likes(post_id)
        logger.info("좋아요 토글: post_id=%s, user_id=%s, liked=%s", post_id, viewer_id, is_liked)
        return is_liked, like_count

    async def _discard_image(self, url: str) -> None:
        """이미지 파일 정리 (실패는 경고 로그만 남김)"""
        try:
            await self.storage.delete(url)
        except OSError as e:
            logger.warning("이미지 파일 삭제 실패: %s (%s)", url, e)


class CommentService:
    """
    댓글 서비스
    - 목록 조회 / 작성 / 삭제 (작성자 소유권 확인)
    """

    def __init__(self, db: AsyncSession):
        self.post_repo = PostRepository(db)
        self.comment_repo = CommentRepository(db)

    async def list_comments(self, post_id: str, page: PageRequest) -> Tuple[List[Comment], Pagination]:
        """게시글의 댓글 목록 (최신순)"""
        comments = await self.comment_repo.list_by_post(post_id, page)
        total = await self.comment_repo.count_by_post(post_id)
        return comments, Pagination.build(page, total)

    async def create_comment(self, post_id: str, content: str, author: User) -> Comment:
        """
        댓글 작성
        - 게시글이 없으면 NotFoundError
        """
        author_id = author.id
        if not await self.post_repo.exists(post_id):
            raise NotFoundError("게시글을 찾을 수 없습니다.")

        comment_id = generate_id()
        await self.comment_repo.create_comment(
            Comment(id=comment_id, content=content, post_id=post_id, user_id=author_id)
        )
        logger.info("댓글 작성: comment_id=%s, post_id=%s", comment_id, post_id)
        return await self.comment_repo.get_with_user(comment_id)

    async def delete_comment(self, comment_id: str, owner: User) -> None:
        """
        댓글 삭제
        - 없으면 NotFoundError, 작성자가 아니면 ForbiddenError
        """
        comment = await self.comment_repo.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("댓글을 찾을 수 없습니다.")
        if comment.user_id != owner.id:
            raise ForbiddenError("본인의 댓글만 삭제할 수 있습니다.")

        await self.comment_repo.delete_comment(comment_id)
        logger.info("댓글 삭제: comment_id=%s", comment_id)
