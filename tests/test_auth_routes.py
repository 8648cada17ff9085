def register_payload(email, role="parent", school_code=None, **extra):
    payload = {
        "email": email,
        "password": "secret123",
        "first_name": "Pat",
        "last_name": "Reyes",
        "role": role,
        "school_code": school_code,
    }
    payload.update(extra)
    return payload


def test_register_and_login(client, school):
    resp = client.post(
        "/api/auth/register",
        json=register_payload("Student@Example.com", role="student", school_code=school.school_code.lower()),
    )
    assert resp.status_code == 201
    user_id = resp.json()["user_id"]

    resp = client.post(
        "/api/auth/login",
        json={"email": "student@example.com", "password": "secret123"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["user_id"] == user_id
    assert body["user"]["school_id"] == school.id
    assert "password_hash" not in body["user"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "student@example.com"


def test_register_rejects_unknown_school_code(client):
    resp = client.post(
        "/api/auth/register",
        json=register_payload("a@example.com", school_code="ZZZ0000"),
    )
    assert resp.status_code == 400


def test_register_duplicate_email(client):
    payload = register_payload("dup@example.com")
    assert client.post("/api/auth/register", json=payload).status_code == 201
    payload["email"] = "DUP@example.com"
    assert client.post("/api/auth/register", json=payload).status_code == 409


def test_admin_registration_needs_admin_token(client):
    payload = register_payload("boss@example.com", role="admin")
    assert client.post("/api/auth/register", json=payload).status_code == 403

    payload["admin_token"] = "test-admin-token"
    assert client.post("/api/auth/register", json=payload).status_code == 201


def test_login_with_wrong_password(client, make_user):
    make_user("teacher")
    resp = client.post(
        "/api/auth/login",
        json={"email": "teacher@example.com", "password": "wrong-password"},
    )
    assert resp.status_code == 401


def test_protected_route_rejects_bad_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_update_profile(client, make_user, auth_headers, school):
    user = make_user("parent")
    resp = client.patch(
        "/api/auth/me",
        json={"phone": "555-0100", "school_code": school.school_code},
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    updated = resp.json()["user"]
    assert updated["phone"] == "555-0100"
    assert updated["school_id"] == school.id
    assert updated["first_name"] == "Test"
