from conftest import insert_user, run


def register(client, **overrides):
    payload = {"name": "Asha Verma", "email": "Asha@Example.com", "password": "secret123"}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_returns_token_and_profile(client, db):
    response = register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "asha@example.com"
    assert data["user"]["role"] == "user"
    assert "password" not in data["user"]

    stored = run(db.users.find_one({"email": "asha@example.com"}))
    assert stored["password"] != "secret123"


def test_register_duplicate_email(client):
    register(client)
    response = register(client, email="asha@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists with this email"


def test_register_short_password(client):
    response = register(client, password="123")
    assert response.status_code == 422


def test_login(client, user, db):
    response = client.post("/api/auth/login", json={"email": "ASHA@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["token"]

    stored = run(db.users.find_one({"_id": user["_id"]}))
    assert stored["last_login"] is not None


def test_login_wrong_password(client, user):
    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_deactivated(client, db):
    insert_user(db, email="gone@example.com", is_active=False)
    response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is deactivated"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized, no token"


def test_me_rejects_bad_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized, token failed"


def test_me(client, user_headers):
    response = client.get("/api/auth/me", headers=user_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "asha@example.com"
    assert data["is_active"] is True


def test_update_profile_merges_address(client, user_headers):
    client.put("/api/auth/profile", headers=user_headers, json={
        "address": {"street": "221 MG Road", "city": "Bengaluru"},
    })
    response = client.put("/api/auth/profile", headers=user_headers, json={
        "name": "Asha V",
        "address": {"zip_code": "560001"},
    })
    assert response.status_code == 200
    profile = response.json()["user"]
    assert profile["name"] == "Asha V"
    assert profile["address"]["city"] == "Bengaluru"
    assert profile["address"]["zip_code"] == "560001"


def test_update_profile_email_taken(client, db, user_headers):
    insert_user(db, email="taken@example.com")
    response = client.put("/api/auth/profile", headers=user_headers, json={"email": "taken@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email is already in use"


def test_wishlist_toggle(client, user_headers, make_product):
    product = make_product()
    product_id = str(product["_id"])

    added = client.post(f"/api/auth/wishlist/{product_id}", headers=user_headers)
    assert added.json()["message"] == "Added to wishlist"
    assert added.json()["wishlist"] == [product_id]

    wishlist = client.get("/api/users/wishlist", headers=user_headers).json()
    assert [p["id"] for p in wishlist] == [product_id]

    removed = client.post(f"/api/auth/wishlist/{product_id}", headers=user_headers)
    assert removed.json()["message"] == "Removed from wishlist"
    assert removed.json()["wishlist"] == []


def test_wishlist_unknown_product(client, user_headers):
    response = client.post("/api/auth/wishlist/507f1f77bcf86cd799439011", headers=user_headers)
    assert response.status_code == 404

    response = client.post("/api/auth/wishlist/not-an-id", headers=user_headers)
    assert response.status_code == 400
