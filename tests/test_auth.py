from campus_portal.models.enums import UserRole


def _register(client, **overrides):
    body = {
        "name": "New Student",
        "email": "New.Student@Example.com",
        "password": "secret123",
        "confirm_password": "secret123",
    }
    body.update(overrides)
    return client.post("/auth/register", json=body)


def test_register_creates_student(client):
    r = _register(client)
    assert r.status_code == 201
    data = r.json()
    assert data["email"] == "new.student@example.com"
    assert data["role"] == "STUDENT"
    assert "password_hash" not in data


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 400


def test_register_mismatched_passwords_returns_field_errors(client):
    r = _register(client, confirm_password="different1")
    assert r.status_code == 422
    body = r.json()
    assert body["detail"] == "Validation error"
    assert body["field_errors"]["form"] == "Passwords do not match"


def test_login_and_me(client, make_user, password):
    user = make_user(UserRole.FACULTY)
    r = client.post("/auth/login", data={"username": user.email, "password": password})
    assert r.status_code == 200
    token = r.json()
    assert token["token_type"] == "bearer"
    assert token["role"] == "FACULTY"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == user.id


def test_login_wrong_password(client, make_user):
    user = make_user()
    r = client.post("/auth/login", data={"username": user.email, "password": "wrong-password"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Invalid credentials"


def test_disabled_account_cannot_log_in(client, make_user, password):
    user = make_user(is_active=False)
    r = client.post("/auth/login", data={"username": user.email, "password": password})
    assert r.status_code == 403
    assert r.json()["detail"] == "Account disabled"


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401


def test_bad_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403


def test_reset_own_password(client, student, student_headers):
    r = client.post("/auth/reset-password", json={"password": "brand-new-pass"}, headers=student_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True}

    login = client.post("/auth/login", data={"username": student.email, "password": "brand-new-pass"})
    assert login.status_code == 200


def test_student_cannot_reset_someone_else(client, make_user, student_headers):
    other = make_user()
    r = client.post(
        "/auth/reset-password",
        json={"user_id": other.id, "password": "brand-new-pass"},
        headers=student_headers,
    )
    assert r.status_code == 403


def test_admin_resets_other_user(client, student, admin_headers):
    r = client.post(
        "/auth/reset-password",
        json={"user_id": student.id, "password": "brand-new-pass"},
        headers=admin_headers,
    )
    assert r.status_code == 200

    users = client.get(f"/admin/users/{student.id}", headers=admin_headers).json()
    assert users["last_password_reset_at"] is not None


def test_role_guard(client, student_headers):
    r = client.get("/admin/rooms", headers=student_headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "Admin only"
