from flask_jwt_extended import create_access_token


def test_login_returns_token(client):
    res = client.post('/api/auth/login', json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200
    body = res.get_json()
    assert body["token"]
    assert body["admin"]["username"] == "admin"


def test_login_rejects_bad_password(client):
    res = client.post('/api/auth/login', json={"username": "admin", "password": "nope"})
    assert res.status_code == 401
    assert res.get_json()["message"] == "Invalid credentials"


def test_login_requires_both_fields(client):
    res = client.post('/api/auth/login', json={"username": "admin"})
    assert res.status_code == 400


def test_current_admin(client, auth):
    res = client.get('/api/auth', headers=auth)
    assert res.status_code == 200
    assert res.get_json()["username"] == "admin"


def test_protected_route_without_token(client):
    res = client.get('/api/orders')
    assert res.status_code == 401
    assert "message" in res.get_json()


def test_protected_route_with_garbage_token(client):
    res = client.get('/api/orders', headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_token_without_admin_role_is_forbidden(app, client):
    token = create_access_token(identity="1", additional_claims={"role": "shopper"})
    res = client.get('/api/banners/all', headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 403
