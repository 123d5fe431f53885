from api.auth import create_access_token


async def test_get_profile(client, make_user):
    user_id, headers = await make_user("amina")
    r = await client.get("/api/profile", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == user_id
    assert body["username"] == "amina"
    assert body["email"] == "amina@example.com"
    assert body["bio"] is None


async def test_get_profile_for_missing_account(client):
    token = create_access_token(424242)
    r = await client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 404


async def test_update_profile_partial(client, make_user):
    _, headers = await make_user("amina")
    r = await client.put(
        "/api/profile",
        headers=headers,
        json={"bio": "Coffee and climbing", "pronouns": "she/her", "age": 27},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "amina"
    assert body["bio"] == "Coffee and climbing"
    assert body["age"] == 27

    r = await client.put("/api/profile", headers=headers, json={"username": "amina_k"})
    assert r.json()["username"] == "amina_k"
    assert r.json()["bio"] == "Coffee and climbing"


async def test_update_profile_username_conflict(client, make_user):
    await make_user("amina")
    _, headers = await make_user("bruno")
    r = await client.put("/api/profile", headers=headers, json={"username": "amina"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Username is already taken"


async def test_update_profile_keeping_own_username(client, make_user):
    _, headers = await make_user("amina")
    r = await client.put("/api/profile", headers=headers, json={"username": "amina", "bio": "hi"})
    assert r.status_code == 200


async def test_upload_photo(client, make_user, uploader):
    _, headers = await make_user("amina")
    r = await client.post(
        "/api/profile/upload-photo",
        headers=headers,
        files={"profilePhoto": ("me.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpeg")},
    )
    assert r.status_code == 200
    url = r.json()["profile_picture_url"]
    assert url.startswith("https://media.test/profiles/")
    assert uploader.uploads[0][0] == "profiles"

    profile = (await client.get("/api/profile", headers=headers)).json()
    assert profile["profile_picture_url"] == url


async def test_upload_photo_without_file(client, make_user, uploader):
    _, headers = await make_user("amina")
    r = await client.post(
        "/api/profile/upload-photo",
        headers=headers,
        files={"somethingElse": ("me.jpg", b"data", "image/jpeg")},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "No file uploaded."
    assert uploader.uploads == []


async def test_upload_photo_media_host_failure(client, make_user, uploader):
    _, headers = await make_user("amina")
    uploader.fail = True
    r = await client.post(
        "/api/profile/upload-photo",
        headers=headers,
        files={"profilePhoto": ("me.jpg", b"data", "image/jpeg")},
    )
    assert r.status_code == 502
    profile = (await client.get("/api/profile", headers=headers)).json()
    assert profile["profile_picture_url"] is None
