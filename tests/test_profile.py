from tests.helpers import bearer, image, login, register


def test_current_user(client, tokens):
    resp = client.get("/current-user", headers=bearer(tokens["accessToken"]))

    assert resp.status_code == 200, resp.text
    user = resp.json()["data"]
    assert user["username"] == "ab"
    assert "password" not in user
    assert "refreshToken" not in user


def test_current_user_reads_access_cookie(client, tokens):
    client.cookies.set("accessToken", tokens["accessToken"])

    resp = client.get("/current-user")
    assert resp.status_code == 200, resp.text


def test_current_user_requires_token(client):
    resp = client.get("/current-user")
    assert resp.status_code == 401, resp.text


def test_change_password(client, tokens):
    resp = client.patch(
        "/change-password",
        json={"oldPassword": "secret", "newPassword": "n3w-secret"},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200, resp.text
    assert "password" not in resp.json()["data"]
    assert login(client, password="secret").status_code == 401
    assert login(client, password="n3w-secret").status_code == 200


def test_change_password_wrong_old_password(client, tokens):
    resp = client.patch(
        "/change-password",
        json={"oldPassword": "nope", "newPassword": "n3w-secret"},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 401, resp.text
    assert login(client).status_code == 200


def test_change_password_requires_both_fields(client, tokens):
    resp = client.patch(
        "/change-password",
        json={"oldPassword": "secret"},
        headers=bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 400, resp.text


def test_update_account_details(client, mongo_db, tokens):
    resp = client.patch(
        "/update-account",
        json={"fullname": "  New Name ", "email": "New@X.com"},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200, resp.text
    user = resp.json()["data"]
    assert user["fullname"] == "New Name"
    assert user["email"] == "new@x.com"
    assert mongo_db["user"].find_one({"username": "ab"})["email"] == "new@x.com"


def test_update_account_requires_fields(client, tokens):
    resp = client.patch(
        "/update-account",
        json={"fullname": "New Name"},
        headers=bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 400, resp.text


def test_update_account_rejects_invalid_email(client, tokens):
    resp = client.patch(
        "/update-account",
        json={"fullname": "New Name", "email": "not-an-email"},
        headers=bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 400, resp.text


def test_update_account_email_taken(client, tokens):
    assert register(client, username="other", email="other@x.com").status_code == 201

    resp = client.patch(
        "/update-account",
        json={"fullname": "A B", "email": "other@x.com"},
        headers=bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 409, resp.text


def test_update_avatar(client, uploads, tokens):
    before = tokens["user"]["avatar"]

    resp = client.patch(
        "/avatar",
        files={"avatar": image("fresh.png")},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200, resp.text
    avatar = resp.json()["data"]["avatar"]
    assert avatar != before
    assert avatar.endswith(".png")


def test_update_avatar_missing_file(client, tokens):
    resp = client.patch("/avatar", headers=bearer(tokens["accessToken"]))

    assert resp.status_code == 400, resp.text
    assert resp.json()["message"] == "Avatar file is missing"


def test_update_avatar_upload_failure(client, mongo_db, uploads, tokens):
    uploads.fail = True

    resp = client.patch(
        "/avatar",
        files={"avatar": image("fresh.png")},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 400, resp.text
    assert mongo_db["user"].find_one({"username": "ab"})["avatar"] == tokens["user"]["avatar"]


def test_update_cover_image(client, tokens):
    resp = client.patch(
        "/cover-image",
        files={"coverimage": image("banner.jpg")},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["coverimage"].endswith(".jpg")


def test_update_cover_image_requires_auth(client):
    resp = client.patch("/cover-image", files={"coverimage": image("banner.jpg")})
    assert resp.status_code == 401, resp.text
