import itertools
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from socialnet.core.config import Settings
from socialnet.main import create_app

# 1x1 투명 PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01"
    b"\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        JWT_SECRET_KEY="test-secret-key",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        MAX_UPLOAD_SIZE_BYTES=1024,
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def upload_dir(settings):
    return Path(settings.UPLOAD_DIR)


@pytest.fixture()
def png_image():
    return ("pixel.png", PNG_BYTES, "image/png")


@pytest.fixture()
def db_call(client):
    """앱과 같은 이벤트 루프에서 DB 세션으로 코루틴 실행"""
    def _call(fn):
        async def _run():
            async with client.app.state.session_factory() as session:
                return await fn(session)
        return client.portal.call(_run)
    return _call


def register(client, username, password="secret123", email=None):
    res = client.post("/api/auth/register", json={
        "email": email or f"{username}@example.com",
        "username": username,
        "firstName": username.capitalize(),
        "lastName": "Tester",
        "password": password,
    })
    assert res.status_code == 201, res.text
    data = res.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture()
def make_user(client):
    counter = itertools.count(1)

    def _make(username=None, **kwargs):
        return register(client, username or f"user{next(counter)}", **kwargs)
    return _make


@pytest.fixture()
def make_post(client):
    def _make(headers, content="hello world", image=None):
        files = {"image": image} if image else None
        res = client.post("/api/posts", data={"content": content}, files=files, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()["data"]["post"]
    return _make
