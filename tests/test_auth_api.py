async def test_register(client, name):
    res = await client.post(
        "/api/auth", json={"name": name, "email": f"{name}@jwt.com", "password": "a"}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["name"] == name
    assert body["user"]["email"] == f"{name}@jwt.com"
    assert body["user"]["roles"] == [{"role": "diner"}]
    assert "password" not in body["user"]
    assert body["token"].count(".") == 2


async def test_register_requires_all_fields(client, name):
    res = await client.post("/api/auth", json={"name": name, "email": f"{name}@jwt.com"})
    assert res.status_code == 422


async def test_register_duplicate_email(client, diner):
    res = await client.post(
        "/api/auth", json={"name": "someone", "email": diner["email"], "password": "b"}
    )
    assert res.status_code == 409
    assert res.json() == {"message": "email already in use"}


async def test_login(client, diner):
    res = await client.put(
        "/api/auth", json={"email": diner["email"], "password": diner["password"]}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["user"] == {
        "id": diner["id"],
        "name": diner["name"],
        "email": diner["email"],
        "roles": [{"role": "diner"}],
    }


async def test_login_bad_password(client, diner):
    res = await client.put("/api/auth", json={"email": diner["email"], "password": "wrong"})
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


async def test_login_unknown_email(client):
    res = await client.put("/api/auth", json={"email": "nobody@jwt.com", "password": "x"})
    assert res.status_code == 401


async def test_login_malformed_email(client):
    res = await client.put("/api/auth", json={"email": "not-an-email", "password": "x"})
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


async def test_register_login_me_logout(client, name, bearer):
    email = f"{name}@jwt.com"
    res = await client.post("/api/auth", json={"name": name, "email": email, "password": "pw"})
    assert res.status_code == 200

    res = await client.put("/api/auth", json={"email": email, "password": "pw"})
    token = res.json()["token"]

    res = await client.get("/api/user/me", headers=bearer(token))
    assert res.status_code == 200
    assert res.json()["email"] == email

    res = await client.delete("/api/auth", headers=bearer(token))
    assert res.status_code == 200
    assert res.json() == {"message": "logout successful"}

    res = await client.get("/api/user/me", headers=bearer(token))
    assert res.status_code == 401


async def test_login_revokes_previous_token(client, diner, login, bearer):
    first = await login(diner)
    second = await login(diner)

    assert (await client.get("/api/user/me", headers=bearer(first))).status_code == 401
    assert (await client.get("/api/user/me", headers=bearer(second))).status_code == 200


async def test_logout_without_token(client):
    res = await client.delete("/api/auth")
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


async def test_bad_bearer_token(client, bearer):
    res = await client.get("/api/user/me", headers=bearer("not-a-token"))
    assert res.status_code == 401


async def test_root_and_health(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["message"].startswith("welcome to")

    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "operational"
