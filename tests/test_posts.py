from fastapi.testclient import TestClient
from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.main import create_app
from socialnet.models.comment import Comment
from socialnet.models.like import Like
from socialnet.models.post import Post
from socialnet.repositories.post_repository import PostRepository
from socialnet.repositories.social_repository import SocialRepository


def test_create_post_strips_content(client, make_user, make_post):
    user, headers = make_user("alice")

    post = make_post(headers, content="   first post   ")
    assert post["content"] == "first post"
    assert post["author"]["id"] == user["id"]
    assert post["author"]["username"] == "alice"
    assert post["isPublished"] is True
    assert post["isLiked"] is False
    assert post["imageUrl"] is None
    assert post["_count"] == {"likes": 0, "comments": 0}


def test_create_post_requires_auth(client):
    res = client.post("/api/posts", data={"content": "hello"})
    assert res.status_code == 401
    assert res.json()["error"] == "AUTHENTICATION_ERROR"


def test_create_post_content_validation(client, make_user):
    _, headers = make_user()

    blank = client.post("/api/posts", data={"content": "    "}, headers=headers)
    assert blank.status_code == 400
    assert blank.json()["error"] == "VALIDATION_ERROR"
    assert blank.json()["errors"][0]["field"] == "content"

    too_long = client.post("/api/posts", data={"content": "x" * 2001}, headers=headers)
    assert too_long.status_code == 400

    exact = client.post("/api/posts", data={"content": "x" * 2000}, headers=headers)
    assert exact.status_code == 201


def test_list_posts_pagination(client, make_user, make_post):
    _, headers = make_user()
    for i in range(25):
        make_post(headers, content=f"post {i}")

    first = client.get("/api/posts", params={"page": 1, "limit": 10}).json()["data"]
    assert len(first["posts"]) == 10
    assert first["posts"][0]["content"] == "post 24"
    assert first["pagination"] == {
        "currentPage": 1,
        "totalPages": 3,
        "totalCount": 25,
        "hasNext": True,
        "hasPrev": False,
    }

    last = client.get("/api/posts", params={"page": 3, "limit": 10}).json()["data"]
    assert len(last["posts"]) == 5
    assert last["posts"][-1]["content"] == "post 0"
    assert last["pagination"]["hasNext"] is False
    assert last["pagination"]["hasPrev"] is True


def test_list_posts_rejects_out_of_range_params(client):
    assert client.get("/api/posts", params={"limit": 51}).status_code == 400
    assert client.get("/api/posts", params={"limit": 0}).status_code == 400
    res = client.get("/api/posts", params={"page": 0})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "page"


def test_get_post_not_found(client):
    res = client.get("/api/posts/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {
        "success": False,
        "message": "게시글을 찾을 수 없습니다.",
        "error": "NOT_FOUND",
    }


def test_unpublished_post_is_invisible_even_to_author(client, db_call, make_user, make_post):
    _, headers = make_user()
    hidden = make_post(headers, content="hidden")
    make_post(headers, content="visible")

    async def unpublish(session):
        await session.execute(update(Post).where(Post.id == hidden["id"]).values(is_published=False))
        await session.commit()
    db_call(unpublish)

    assert client.get(f"/api/posts/{hidden['id']}", headers=headers).status_code == 404
    listed = client.get("/api/posts", headers=headers).json()["data"]
    assert [p["content"] for p in listed["posts"]] == ["visible"]
    assert listed["pagination"]["totalCount"] == 1


def test_update_post_by_owner(client, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers, content="before")

    res = client.put(f"/api/posts/{post['id']}", json={"content": "after"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["post"]["content"] == "after"

    empty = client.put(f"/api/posts/{post['id']}", json={"content": ""}, headers=headers)
    assert empty.status_code == 400

    missing = client.put("/api/posts/nope", json={"content": "x"}, headers=headers)
    assert missing.status_code == 404


def test_non_owner_cannot_update_or_delete(client, make_user, make_post):
    _, owner_headers = make_user("owner")
    _, other_headers = make_user("intruder")
    post = make_post(owner_headers, content="mine")

    upd = client.put(f"/api/posts/{post['id']}", json={"content": "hacked"}, headers=other_headers)
    assert upd.status_code == 403
    assert upd.json()["error"] == "FORBIDDEN"

    dele = client.delete(f"/api/posts/{post['id']}", headers=other_headers)
    assert dele.status_code == 403

    still = client.get(f"/api/posts/{post['id']}").json()["data"]["post"]
    assert still["content"] == "mine"


def test_like_toggle_alternates(client, make_user, make_post):
    _, author_headers = make_user("author")
    _, fan_headers = make_user("fan")
    post = make_post(author_headers)

    liked = client.post(f"/api/posts/{post['id']}/like", headers=fan_headers).json()["data"]
    assert liked == {"isLiked": True, "likeCount": 1}

    viewed = client.get(f"/api/posts/{post['id']}", headers=fan_headers).json()["data"]["post"]
    assert viewed["isLiked"] is True
    assert viewed["_count"]["likes"] == 1
    anonymous = client.get(f"/api/posts/{post['id']}").json()["data"]["post"]
    assert anonymous["isLiked"] is False

    unliked = client.post(f"/api/posts/{post['id']}/like", headers=fan_headers).json()["data"]
    assert unliked == {"isLiked": False, "likeCount": 0}


def test_like_missing_post(client, make_user):
    _, headers = make_user()
    res = client.post("/api/posts/nope/like", headers=headers)
    assert res.status_code == 404


def test_like_race_keeps_single_row(client, db_call, monkeypatch, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers)
    assert client.post(f"/api/posts/{post['id']}/like", headers=headers).json()["data"]["isLiked"] is True

    # 다른 요청이 먼저 좋아요를 만든 상황: 존재 확인은 비어 있고 insert 는 유니크 제약에 걸림
    async def nothing(self, user_id, post_id):
        return None
    monkeypatch.setattr(SocialRepository, "find_like", nothing)

    res = client.post(f"/api/posts/{post['id']}/like", headers=headers)
    assert res.status_code == 200
    assert res.json()["data"] == {"isLiked": True, "likeCount": 1}

    async def count_likes(session):
        return (await session.execute(select(func.count(Like.id)))).scalar_one()
    assert db_call(count_likes) == 1


def test_delete_post_removes_children(client, db_call, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers)
    client.post(f"/api/posts/{post['id']}/like", headers=headers)
    client.post(f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=headers)

    res = client.delete(f"/api/posts/{post['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["success"] is True
    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert client.delete(f"/api/posts/{post['id']}", headers=headers).status_code == 404

    async def leftovers(session):
        likes = (await session.execute(select(func.count(Like.id)))).scalar_one()
        comments = (await session.execute(select(func.count(Comment.id)))).scalar_one()
        return likes, comments
    assert db_call(leftovers) == (0, 0)


def test_create_post_with_image(client, upload_dir, make_user, make_post, png_image):
    _, headers = make_user()
    post = make_post(headers, content="with picture", image=png_image)

    url = post["imageUrl"]
    assert url.startswith("/uploads/image-")
    assert url.endswith(".png")
    stored = upload_dir / url.rsplit("/", 1)[-1]
    assert stored.read_bytes() == png_image[1]

    served = client.get(url)
    assert served.status_code == 200
    assert served.content == png_image[1]


def test_delete_post_removes_image(client, upload_dir, make_user, make_post, png_image):
    _, headers = make_user()
    post = make_post(headers, image=png_image)
    stored = upload_dir / post["imageUrl"].rsplit("/", 1)[-1]
    assert stored.exists()

    assert client.delete(f"/api/posts/{post['id']}", headers=headers).status_code == 200
    assert not stored.exists()


def test_delete_post_succeeds_when_image_already_gone(client, upload_dir, make_user, make_post, png_image):
    _, headers = make_user()
    post = make_post(headers, image=png_image)
    (upload_dir / post["imageUrl"].rsplit("/", 1)[-1]).unlink()

    res = client.delete(f"/api/posts/{post['id']}", headers=headers)
    assert res.status_code == 200


def test_upload_rejects_wrong_type(client, upload_dir, make_user):
    _, headers = make_user()
    res = client.post(
        "/api/posts",
        data={"content": "text file"},
        files={"image": ("notes.txt", b"plain text", "text/plain")},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "INVALID_FILE_TYPE"
    assert list(upload_dir.iterdir()) == []


def test_upload_rejects_large_file(client, settings, upload_dir, make_user):
    _, headers = make_user()
    res = client.post(
        "/api/posts",
        data={"content": "big"},
        files={"image": ("big.png", b"\x00" * (settings.MAX_UPLOAD_SIZE_BYTES + 1), "image/png")},
        headers=headers,
    )
    assert res.status_code == 413
    assert res.json()["error"] == "FILE_TOO_LARGE"
    assert list(upload_dir.iterdir()) == []
    assert client.get("/api/posts").json()["data"]["pagination"]["totalCount"] == 0


def test_upload_rejects_unexpected_file_field(client, upload_dir, make_user, png_image):
    _, headers = make_user()
    res = client.post(
        "/api/posts",
        data={"content": "wrong field"},
        files={"avatar": png_image},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "INVALID_FILE_FIELD"
    assert list(upload_dir.iterdir()) == []


def test_failed_insert_removes_stored_image(settings, upload_dir, monkeypatch, png_image):
    async def broken_create(self, post):
        raise RuntimeError("insert failed")
    monkeypatch.setattr(PostRepository, "create_post", broken_create)

    with TestClient(create_app(settings), raise_server_exceptions=False) as client:
        res = client.post("/api/auth/register", json={
            "email": "ivy@example.com",
            "username": "ivy",
            "firstName": "Ivy",
            "lastName": "Tester",
            "password": "secret123",
        })
        headers = {"Authorization": f"Bearer {res.json()['data']['token']}"}

        res = client.post(
            "/api/posts",
            data={"content": "doomed"},
            files={"image": png_image},
            headers=headers,
        )
        assert res.status_code == 500
        body = res.json()
        assert body["error"] == "INTERNAL_ERROR"
        assert "detail" not in body

    assert list(upload_dir.iterdir()) == []


def _failing_commit(statement, params):
    async def commit(self):
        raise OperationalError(statement, params, Exception("disk I/O error"))
    return commit


def test_commit_failure_hides_sql_from_client(client, upload_dir, monkeypatch, make_user, png_image):
    _, headers = make_user("olive")
    monkeypatch.setattr(
        AsyncSession, "commit",
        _failing_commit("INSERT INTO posts (id, content) VALUES (?, ?)", ("x", "top-secret")),
    )

    res = client.post(
        "/api/posts",
        data={"content": "top-secret"},
        files={"image": png_image},
        headers=headers,
    )
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "DATABASE_ERROR"
    assert body["message"] == "데이터베이스 오류가 발생했습니다."
    assert "detail" not in body
    assert "SQL" not in res.text
    assert "top-secret" not in res.text
    assert "INSERT" not in res.text
    assert list(upload_dir.iterdir()) == []


def test_commit_failure_detail_only_in_development(settings, monkeypatch):
    dev_settings = settings.model_copy(update={"ENVIRONMENT": "development"})
    with TestClient(create_app(dev_settings)) as client:
        res = client.post("/api/auth/register", json={
            "email": "pia@example.com",
            "username": "pia",
            "firstName": "Pia",
            "lastName": "Tester",
            "password": "secret123",
        })
        headers = {"Authorization": f"Bearer {res.json()['data']['token']}"}

        monkeypatch.setattr(
            AsyncSession, "commit",
            _failing_commit("INSERT INTO posts (id, content) VALUES (?, ?)", ("x", "dev")),
        )
        res = client.post("/api/posts", data={"content": "dev"}, headers=headers)

    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "DATABASE_ERROR"
    assert "disk I/O error" in body["detail"]
