def test_create_and_list_comments(client, make_user, make_post):
    author, author_headers = make_user("author")
    commenter, commenter_headers = make_user("commenter")
    post = make_post(author_headers)

    first = client.post(
        f"/api/posts/{post['id']}/comments",
        json={"content": "  first!  "},
        headers=commenter_headers,
    )
    assert first.status_code == 201
    comment = first.json()["data"]["comment"]
    assert comment["content"] == "first!"
    assert comment["user"]["id"] == commenter["id"]
    assert comment["user"]["username"] == "commenter"
    assert "email" not in comment["user"]

    client.post(f"/api/posts/{post['id']}/comments", json={"content": "second"}, headers=author_headers)

    listed = client.get(f"/api/posts/{post['id']}/comments").json()["data"]
    assert [c["content"] for c in listed["comments"]] == ["second", "first!"]
    assert listed["pagination"]["totalCount"] == 2

    counted = client.get(f"/api/posts/{post['id']}").json()["data"]["post"]
    assert counted["_count"]["comments"] == 2


def test_comment_pagination(client, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers)
    for i in range(12):
        client.post(f"/api/posts/{post['id']}/comments", json={"content": f"c{i}"}, headers=headers)

    page2 = client.get(f"/api/posts/{post['id']}/comments", params={"page": 2, "limit": 5}).json()["data"]
    assert len(page2["comments"]) == 5
    assert page2["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "totalCount": 12,
        "hasNext": True,
        "hasPrev": True,
    }


def test_comment_validation(client, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers)

    empty = client.post(f"/api/posts/{post['id']}/comments", json={"content": "   "}, headers=headers)
    assert empty.status_code == 400
    assert empty.json()["errors"][0]["field"] == "content"

    too_long = client.post(f"/api/posts/{post['id']}/comments", json={"content": "x" * 501}, headers=headers)
    assert too_long.status_code == 400

    anonymous = client.post(f"/api/posts/{post['id']}/comments", json={"content": "hi"})
    assert anonymous.status_code == 401


def test_comment_on_missing_post(client, make_user):
    _, headers = make_user()
    res = client.post("/api/posts/nope/comments", json={"content": "hello"}, headers=headers)
    assert res.status_code == 404
    assert res.json()["error"] == "NOT_FOUND"


def test_list_comments_of_missing_post_is_empty(client):
    res = client.get("/api/posts/nope/comments")
    assert res.status_code == 200
    assert res.json()["data"]["comments"] == []
    assert res.json()["data"]["pagination"]["totalCount"] == 0


def test_delete_comment_ownership(client, make_user, make_post):
    _, author_headers = make_user("author")
    _, other_headers = make_user("other")
    post = make_post(author_headers)
    comment = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "mine"}, headers=author_headers,
    ).json()["data"]["comment"]

    forbidden = client.delete(f"/api/posts/comments/{comment['id']}", headers=other_headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["error"] == "FORBIDDEN"

    ok = client.delete(f"/api/posts/comments/{comment['id']}", headers=author_headers)
    assert ok.status_code == 200
    assert client.get(f"/api/posts/{post['id']}/comments").json()["data"]["comments"] == []

    gone = client.delete(f"/api/posts/comments/{comment['id']}", headers=author_headers)
    assert gone.status_code == 404
