from sqlalchemy import func, select, update

from socialnet.models.follow import Follow
from socialnet.models.post import Post
from socialnet.repositories.social_repository import SocialRepository


def follow_rows(follower_id, following_id):
    async def count(session):
        query = select(func.count(Follow.id)).where(
            Follow.follower_id == follower_id, Follow.following_id == following_id
        )
        return (await session.execute(query)).scalar_one()
    return count


def test_list_users_newest_first_with_counts(client, make_user, make_post):
    first, first_headers = make_user("first")
    second, _ = make_user("second")
    make_post(first_headers)
    make_post(first_headers)

    data = client.get("/api/users").json()["data"]
    assert [u["username"] for u in data["users"]] == ["second", "first"]
    assert data["pagination"]["totalCount"] == 2
    by_name = {u["username"]: u for u in data["users"]}
    assert by_name["first"]["_count"] == {"posts": 2, "followers": 0, "following": 0}
    assert "email" not in by_name["first"]


def test_get_user_with_is_following(client, make_user):
    target, target_headers = make_user("target")
    _, fan_headers = make_user("fan")

    client.post(f"/api/users/{target['id']}/follow", headers=fan_headers)

    as_fan = client.get(f"/api/users/{target['id']}", headers=fan_headers).json()["data"]["user"]
    assert as_fan["isFollowing"] is True
    assert as_fan["_count"]["followers"] == 1

    as_self = client.get(f"/api/users/{target['id']}", headers=target_headers).json()["data"]["user"]
    assert as_self["isFollowing"] is False

    anonymous = client.get(f"/api/users/{target['id']}").json()["data"]["user"]
    assert anonymous["isFollowing"] is False


def test_get_missing_user(client):
    res = client.get("/api/users/nope")
    assert res.status_code == 404
    assert res.json()["error"] == "NOT_FOUND"


def test_follow_toggle_alternates(client, make_user):
    target, _ = make_user("target")
    fan, fan_headers = make_user("fan")

    on = client.post(f"/api/users/{target['id']}/follow", headers=fan_headers).json()["data"]
    assert on == {"isFollowing": True, "followerCount": 1}

    me = client.get(f"/api/users/{fan['id']}").json()["data"]["user"]
    assert me["_count"]["following"] == 1

    off = client.post(f"/api/users/{target['id']}/follow", headers=fan_headers).json()["data"]
    assert off == {"isFollowing": False, "followerCount": 0}


def test_self_follow_rejected(client, db_call, make_user):
    me, headers = make_user()

    res = client.post(f"/api/users/{me['id']}/follow", headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "VALIDATION_ERROR"

    assert db_call(follow_rows(me["id"], me["id"])) == 0


def test_follow_missing_or_inactive_user(client, make_user):
    _, headers = make_user("fan")
    assert client.post("/api/users/nope/follow", headers=headers).status_code == 404

    inactive, inactive_headers = make_user("leaver")
    client.delete("/api/auth/me", headers=inactive_headers)
    assert client.post(f"/api/users/{inactive['id']}/follow", headers=headers).status_code == 404


def test_follow_race_keeps_single_row(client, db_call, monkeypatch, make_user):
    target, _ = make_user("target")
    fan, fan_headers = make_user("fan")
    client.post(f"/api/users/{target['id']}/follow", headers=fan_headers)

    # 동시 요청이 먼저 팔로우를 만든 상황 재현
    async def nothing(self, follower_id, following_id):
        return None
    monkeypatch.setattr(SocialRepository, "find_follow", nothing)

    res = client.post(f"/api/users/{target['id']}/follow", headers=fan_headers)
    assert res.status_code == 200
    assert res.json()["data"] == {"isFollowing": True, "followerCount": 1}

    assert db_call(follow_rows(fan["id"], target["id"])) == 1


def test_user_posts_only_published(client, db_call, make_user, make_post):
    author, headers = make_user("author")
    _, viewer_headers = make_user("viewer")
    make_user("bystander")
    visible = make_post(headers, content="visible")
    hidden = make_post(headers, content="hidden")

    async def unpublish(session):
        await session.execute(update(Post).where(Post.id == hidden["id"]).values(is_published=False))
        await session.commit()
    db_call(unpublish)

    client.post(f"/api/posts/{visible['id']}/like", headers=viewer_headers)

    data = client.get(f"/api/users/{author['id']}/posts", headers=viewer_headers).json()["data"]
    assert [p["content"] for p in data["posts"]] == ["visible"]
    assert data["posts"][0]["isLiked"] is True
    assert data["pagination"]["totalCount"] == 1


def test_user_posts_of_missing_user(client):
    assert client.get("/api/users/nope/posts").status_code == 404
