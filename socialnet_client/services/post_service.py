from typing import Optional, Tuple

from socialnet_client.api_client import ApiClient
from socialnet_client.types import Comment, LikeToggle, Page, Post

# (파일명, 바이트, MIME 타입)
ImageFile = Tuple[str, bytes, str]


class PostsService:
    """
    게시글 / 좋아요 / 댓글 API 래퍼
    """

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_posts(self, page: int = 1, limit: int = 10) -> Page[Post]:
        body = await self.api.get("/posts", {"page": page, "limit": limit})
        data = body["data"]
        return Page[Post](items=data["posts"], pagination=data["pagination"])

    async def get_post(self, post_id: str) -> Post:
        body = await self.api.get(f"/posts/{post_id}")
        return Post.model_validate(body["data"]["post"])

    async def create_post(self, content: str, image: Optional[ImageFile] = None) -> Post:
        """
        multipart/form-data 로 게시글 작성
        - image: (filename, content, content_type) 튜플
        """
        files = {"image": image} if image else None
        body = await self.api.post("/posts", data={"content": content}, files=files)
        return Post.model_validate(body["data"]["post"])

    async def update_post(self, post_id: str, content: str) -> Post:
        body = await self.api.put(f"/posts/{post_id}", {"content": content})
        return Post.model_validate(body["data"]["post"])

    async def delete_post(self, post_id: str) -> None:
        await self.api.delete(f"/posts/{post_id}")

    async def toggle_like(self, post_id: str) -> LikeToggle:
        body = await self.api.post(f"/posts/{post_id}/like")
        return LikeToggle.model_validate(body["data"])

    async def get_comments(self, post_id: str, page: int = 1, limit: int = 10) -> Page[Comment]:
        body = await self.api.get(f"/posts/{post_id}/comments", {"page": page, "limit": limit})
        data = body["data"]
        return Page[Comment](items=data["comments"], pagination=data["pagination"])

    async def create_comment(self, post_id: str, content: str) -> Comment:
        body = await self.api.post(f"/posts/{post_id}/comments", {"content": content})
        return Comment.model_validate(body["data"]["comment"])

    async def delete_comment(self, comment_id: str) -> None:
        await self.api.delete(f"/posts/comments/{comment_id}")
