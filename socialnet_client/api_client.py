import logging
from typing import Any, Dict, List, Optional

import httpx

from socialnet_client.token_storage import TokenStorage

logger = logging.getLogger(__name__)


class ApiRequestError(Exception):
    """
    API 가 success=false envelope 또는 오류 상태 코드를 돌려준 경우
    - status_code: HTTP 상태 코드
    - code: 서버 오류 코드 (VALIDATION_ERROR, NOT_FOUND, ...)
    - errors: 필드 단위 검증 오류 목록
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.code = code
        self.errors = errors or []
        super().__init__(f"{status_code} {code or ''} {message}".strip())


class ApiClient:
    """
    SocialNet REST API 비동기 클라이언트
    - 캐시된 토큰이 있으면 Authorization: Bearer 헤더 첨부
    - 응답 envelope 을 해석하여 성공 시 envelope(dict) 반환, 실패 시 ApiRequestError
    - 401 응답을 받으면 캐시된 토큰 삭제
    """

    def __init__(
        self,
        base_url: str,
        token_storage: Optional[TokenStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip('/')
        self.token_storage = token_storage or TokenStorage()
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_storage.get()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        r = await self._client.request(
            method,
            path,
            params=params,
            json=json,
            data=data,
            files=files,
            headers=self._auth_headers(),
        )
        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if r.status_code == 401:
            logger.info("인증 실패(401), 캐시된 토큰 삭제")
            self.token_storage.remove()

        if r.is_error or not body.get("success", False):
            raise ApiRequestError(
                r.status_code,
                body.get("message") or r.reason_phrase,
                body.get("error"),
                body.get("errors"),
            )
        return body

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Dict[str, Any]:
        return await self.request("DELETE", path)
