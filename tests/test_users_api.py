"""Tests for the user endpoints."""

API = "/api/v1"


def test_register_returns_user_and_token(client):
    response = client.post(
        f"{API}/users/register",
        json={"name": "Karim", "email": "Karim@Example.com", "password": "secret123", "phone": "0555"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "karim@example.com"
    assert user["role"] == "CLIENT"
    assert user["phone"] == "0555"
    assert "password" not in user
    assert body["data"]["token"]


def test_duplicate_email_is_rejected(client, register):
    user = register("CLIENT")
    response = client.post(
        f"{API}/users/register",
        json={"name": "Again", "email": user.email.upper(), "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User already exists"}


def test_invalid_registration_payload(client):
    response = client.post(f"{API}/users/register", json={"name": "X", "email": "not-an-email", "password": "123"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["message"]
    assert "password" in body["message"]


def test_unknown_role_is_rejected(client):
    response = client.post(
        f"{API}/users/register",
        json={"name": "X", "email": "x@example.com", "password": "secret123", "role": "SUPERUSER"},
    )
    assert response.status_code == 400


def test_login(client, register):
    user = register("SERVICE_USER")
    response = client.post(f"{API}/users/login", json={"email": user.email, "password": user.password})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["role"] == "SERVICE_USER"
    me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.json()["data"]["id"] == user.id


def test_login_with_wrong_password(client, register):
    user = register()
    response = client.post(f"{API}/users/login", json={"email": user.email, "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_with_unknown_email(client):
    response = client.post(f"{API}/users/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_update_profile_keeps_email_and_role(client, register):
    user = register()
    response = client.put(
        f"{API}/users/update",
        json={"name": "New Name", "address": "Oran", "email": "other@example.com", "role": "ADMIN"},
        headers=user.headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "New Name"
    assert data["address"] == "Oran"
    assert data["email"] == user.email
    assert data["role"] == "CLIENT"


def test_change_password(client, register):
    user = register()
    response = client.put(
        f"{API}/users/password",
        json={"current_password": user.password, "new_password": "another456"},
        headers=user.headers,
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password updated"
    old = client.post(f"{API}/users/login", json={"email": user.email, "password": user.password})
    assert old.status_code == 401
    new = client.post(f"{API}/users/login", json={"email": user.email, "password": "another456"})
    assert new.status_code == 200


def test_change_password_requires_current_password(client, register):
    user = register()
    response = client.put(
        f"{API}/users/password",
        json={"current_password": "nope-nope", "new_password": "another456"},
        headers=user.headers,
    )
    assert response.status_code == 401


def test_only_admins_list_users(client, register):
    client_user = register("CLIENT")
    register("SERVICE_USER")
    admin = register("ADMIN")
    forbidden = client.get(f"{API}/users", headers=client_user.headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "User role CLIENT is not authorized to access this route"

    response = client.get(f"{API}/users", headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["count"] == 3

    providers = client.get(f"{API}/users", params={"role": "SERVICE_USER"}, headers=admin.headers)
    assert [user["role"] for user in providers.json()["data"]] == ["SERVICE_USER"]


def test_profile_fields_can_be_cleared(client, register):
    user = register(phone="0555", address="Oran")
    url = f"{API}/users/update"

    cleared = client.put(url, json={"phone": "", "address": None}, headers=user.headers).json()["data"]
    assert cleared["phone"] is None
    assert cleared["address"] is None
    assert cleared["name"]

    untouched = client.put(url, json={"address": "Blida"}, headers=user.headers).json()["data"]
    assert untouched["address"] == "Blida"
    assert untouched["phone"] is None

    assert client.put(url, json={"name": ""}, headers=user.headers).status_code == 400
