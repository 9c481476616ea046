PASSWORD = "secret"


def image(name: str = "avatar.png"):
    return (name, b"\x89PNG fake image bytes", "image/png")


def register(client, files=None, **fields):
    data = {
        "fullname": "A B",
        "email": "a@x.com",
        "username": "AB",
        "password": PASSWORD,
    }
    data.update(fields)
    if files is None:
        files = {"avatar": image()}
    return client.post("/register", data=data, files=files)


def login(client, password: str = PASSWORD, **identifier):
    if not identifier:
        identifier = {"username": "ab"}
    resp = client.post("/login", json={**identifier, "password": password})
    # Keep every follow-up request explicit about which token it carries
    client.cookies.clear()
    return resp


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
