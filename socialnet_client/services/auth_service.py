import logging
from typing import Any, Dict, Optional

import httpx

from socialnet_client.api_client import ApiClient, ApiRequestError
from socialnet_client.types import AuthResult, User

logger = logging.getLogger(__name__)


class AuthService:
    """
    인증 API 래퍼
    - register / login 성공 시 토큰을 TokenStorage 에 저장
    - logout 은 서버 호출 실패와 관계없이 토큰 삭제
    """

    def __init__(self, api: ApiClient):
        self.api = api

    async def register(
        self,
        email: str,
        username: str,
        first_name: str,
        last_name: str,
        password: str,
    ) -> AuthResult:
        body = await self.api.post("/auth/register", {
            "email": email,
            "username": username,
            "firstName": first_name,
            "lastName": last_name,
            "password": password,
        })
        return self._store(body)

    async def login(self, email: str, password: str) -> AuthResult:
        body = await self.api.post("/auth/login", {"email": email, "password": password})
        return self._store(body)

    async def logout(self) -> None:
        try:
            await self.api.post("/auth/logout")
        except (ApiRequestError, httpx.HTTPError) as e:
            logger.warning(f"로그아웃 요청 실패 (토큰은 삭제됨): {e}")
        finally:
            self.api.token_storage.remove()

    async def get_me(self) -> User:
        body = await self.api.get("/auth/me")
        return User.model_validate(body["data"]["user"])

    async def update_profile(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """전달된 값만 서버로 보냄"""
        payload: Dict[str, Any] = {
            key: value
            for key, value in (
                ("firstName", first_name),
                ("lastName", last_name),
                ("bio", bio),
                ("avatar", avatar),
            )
            if value is not None
        }
        body = await self.api.put("/auth/me", payload)
        return User.model_validate(body["data"]["user"])

    def _store(self, body: Dict[str, Any]) -> AuthResult:
        result = AuthResult.model_validate(body["data"])
        self.api.token_storage.set(result.token)
        return result
