from sqlalchemy import select, func

from models import Comment, Like


async def _create_post(client, headers, content="hello", **extra):
    r = await client.post("/api/posts", headers=headers, data={"content": content, **extra})
    assert r.status_code == 201, r.text
    return r.json()


async def test_create_post_without_media(client, make_user, uploader):
    user_id, headers = await make_user("amina")
    post = await _create_post(client, headers, "First!", title="Hello", post_type="text")
    assert post["user_id"] == user_id
    assert post["title"] == "Hello"
    assert post["media_url"] is None
    assert uploader.uploads == []


async def test_create_post_with_media(client, make_user, uploader):
    _, headers = await make_user("amina")
    r = await client.post(
        "/api/posts",
        headers=headers,
        data={"content": "look", "post_type": "image"},
        files={"mediaFile": ("beach.png", b"\x89PNG...", "image/png")},
    )
    assert r.status_code == 201
    assert r.json()["media_url"].startswith("https://media.test/posts/")
    assert r.json()["post_type"] == "image"
    assert uploader.uploads[0][0] == "posts"


async def test_media_failure_aborts_post(client, make_user, uploader):
    _, headers = await make_user("amina")
    uploader.fail = True
    r = await client.post(
        "/api/posts",
        headers=headers,
        data={"content": "look"},
        files={"mediaFile": ("beach.png", b"\x89PNG...", "image/png")},
    )
    assert r.status_code == 502
    assert (await client.get("/api/posts", headers=headers)).json() == []


async def test_feed_is_newest_first_with_aggregates(client, make_user):
    a_id, a = await make_user("amina")
    _, b = await make_user("bruno")
    first = await _create_post(client, a, "first")
    second = await _create_post(client, b, "second")

    await client.post(f"/api/posts/{first['id']}/like", headers=a)
    await client.post(f"/api/posts/{first['id']}/like", headers=b)
    await client.post(f"/api/posts/{first['id']}/comment", headers=b, json={"comment_text": "nice"})

    feed = (await client.get("/api/posts", headers=b)).json()
    assert [p["post_id"] for p in feed] == [second["id"], first["id"]]

    top, bottom = feed
    assert top["like_count"] == 0
    assert top["comment_count"] == 0
    assert top["is_liked_by_user"] is False
    assert bottom["like_count"] == 2
    assert bottom["comment_count"] == 1
    assert bottom["is_liked_by_user"] is True
    assert bottom["username"] == "amina"
    assert bottom["user_id"] == a_id


async def test_toggle_like_is_its_own_inverse(client, make_user):
    _, headers = await make_user("amina")
    post = await _create_post(client, headers)

    r = await client.post(f"/api/posts/{post['id']}/like", headers=headers)
    assert r.json() == {"message": "Post liked.", "liked": True, "like_count": 1}
    r = await client.post(f"/api/posts/{post['id']}/like", headers=headers)
    assert r.json() == {"message": "Post unliked.", "liked": False, "like_count": 0}

    feed = (await client.get("/api/posts", headers=headers)).json()
    assert feed[0]["like_count"] == 0
    assert feed[0]["is_liked_by_user"] is False


async def test_like_unknown_post(client, make_user):
    _, headers = await make_user("amina")
    assert (await client.post("/api/posts/999/like", headers=headers)).status_code == 404


async def test_comments_oldest_first(client, make_user):
    a_id, a = await make_user("amina")
    b_id, b = await make_user("bruno")
    post = await _create_post(client, a)

    r = await client.post(f"/api/posts/{post['id']}/comment", headers=b, json={"comment_text": "one"})
    assert r.status_code == 201
    assert r.json()["username"] == "bruno"
    await client.post(f"/api/posts/{post['id']}/comment", headers=a, json={"comment_text": "two"})

    comments = (await client.get(f"/api/posts/{post['id']}/comments", headers=a)).json()
    assert [c["comment_text"] for c in comments] == ["one", "two"]
    assert [c["user_id"] for c in comments] == [b_id, a_id]


async def test_comment_validation_and_unknown_post(client, make_user):
    _, headers = await make_user("amina")
    post = await _create_post(client, headers)
    r = await client.post(f"/api/posts/{post['id']}/comment", headers=headers, json={"comment_text": "  "})
    assert r.status_code == 422
    r = await client.post("/api/posts/999/comment", headers=headers, json={"comment_text": "hi"})
    assert r.status_code == 404


async def test_delete_post_ownership(client, make_user, session_factory):
    _, a = await make_user("amina")
    _, b = await make_user("bruno")
    post = await _create_post(client, a)
    await client.post(f"/api/posts/{post['id']}/like", headers=b)
    await client.post(f"/api/posts/{post['id']}/comment", headers=b, json={"comment_text": "hey"})

    r = await client.delete(f"/api/posts/{post['id']}", headers=b)
    assert r.status_code == 403

    r = await client.delete(f"/api/posts/{post['id']}", headers=a)
    assert r.status_code == 200
    assert (await client.get("/api/posts", headers=a)).json() == []
    assert (await client.get(f"/api/posts/{post['id']}/comments", headers=a)).json() == []

    async with session_factory() as db:
        likes = (await db.execute(select(func.count()).select_from(Like))).scalar_one()
        comments = (await db.execute(select(func.count()).select_from(Comment))).scalar_one()
    assert likes == 0
    assert comments == 0

    assert (await client.delete(f"/api/posts/{post['id']}", headers=a)).status_code == 404


async def test_like_on_post_removed_mid_request(client, make_user, engine, monkeypatch):
    import api.posts as posts_api

    async with engine.connect() as conn:
        await conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    real_check = posts_api._get_post_or_404
    checks = []

    async def stale_first_check(db, post_id):
        # The first lookup sees the post, it is gone by the time the like is written
        checks.append(post_id)
        if len(checks) > 1:
            return await real_check(db, post_id)

    monkeypatch.setattr(posts_api, "_get_post_or_404", stale_first_check)
    _, headers = await make_user("amina")

    r = await client.post("/api/posts/999/like", headers=headers)
    assert r.status_code == 404
    assert len(checks) == 2
