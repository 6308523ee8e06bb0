from socialnet_client.api_client import ApiClient
from socialnet_client.types import FollowToggle, Page, Post, User


class UsersService:
    """
    사용자 / 팔로우 API 래퍼
    """

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_users(self, page: int = 1, limit: int = 10) -> Page[User]:
        body = await self.api.get("/users", {"page": page, "limit": limit})
        data = body["data"]
        return Page[User](items=data["users"], pagination=data["pagination"])

    async def get_user(self, user_id: str) -> User:
        body = await self.api.get(f"/users/{user_id}")
        return User.model_validate(body["data"]["user"])

    async def get_user_posts(self, user_id: str, page: int = 1, limit: int = 10) -> Page[Post]:
        body = await self.api.get(f"/users/{user_id}/posts", {"page": page, "limit": limit})
        data = body["data"]
        return Page[Post](items=data["posts"], pagination=data["pagination"])

    async def toggle_follow(self, user_id: str) -> FollowToggle:
        body = await self.api.post(f"/users/{user_id}/follow")
        return FollowToggle.model_validate(body["data"])
