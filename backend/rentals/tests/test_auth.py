from datetime import datetime

from rentals.models import Session


def test_health_endpoints(client):
	r = client.get("/")
	assert r.status_code == 200
	assert r.get_json() == {"message": "Backend running!", "status": "healthy"}

	r = client.get("/api/health")
	assert r.status_code == 200
	assert r.get_json()["status"] == "ok"


def test_register_creates_user(client):
	r = client.post(
		"/api/users/register",
		json={"username": "reg_alice", "password": "pw", "firstName": "Alice", "lastName": "Smith"},
	)
	assert r.status_code == 201
	body = r.get_json()
	assert body["success"] is True
	assert body["message"] == "User registered successfully"
	assert body["data"]["userId"] == body["data"]["user"]["id"]
	assert body["data"]["user"]["firstName"] == "Alice"
	assert body["data"]["user"]["role"] == "user"
	assert "password" not in body["data"]["user"]


def test_register_duplicate_username_409(client, make_user):
	make_user("reg_dup")
	r = client.post("/api/users/register", json={"username": "reg_dup", "password": "pw"})
	assert r.status_code == 409
	assert r.get_json()["message"] == "Username already exists"


def test_register_missing_fields_400(client):
	r = client.post("/api/users/register", json={"username": "reg_nopw"})
	assert r.status_code == 400
	body = r.get_json()
	assert body["success"] is False
	assert body["message"] == "Invalid data"
	assert "password" in body["errors"]


def test_login_returns_token_and_stores_session(client, make_user):
	u = make_user("login_ok", password="pw123")
	r = client.post("/api/login", json={"username": "login_ok", "password": "pw123"})
	assert r.status_code == 200
	data = r.get_json()["data"]
	assert len(data["token"]) == 64
	assert data["user"]["id"] == u.id

	s = Session.query.filter_by(token=data["token"]).first()
	assert s is not None
	assert s.user_id == u.id
	assert s.expiry > datetime.utcnow()


def test_login_wrong_password_401(client, make_user):
	make_user("login_bad", password="pw123")
	r = client.post("/api/login", json={"username": "login_bad", "password": "nope"})
	assert r.status_code == 401
	assert r.get_json()["message"] == "Invalid credentials"

	r = client.post("/api/login", json={"username": "login_ghost", "password": "nope"})
	assert r.status_code == 401


def test_login_missing_fields_400(client):
	r = client.post("/api/login", json={"username": "x"})
	assert r.status_code == 400


def test_protected_route_requires_bearer(client):
	r = client.get("/api/users/me")
	assert r.status_code == 401
	assert r.get_json()["message"] == "Authentication required"
	assert r.headers.get("WWW-Authenticate") == "Bearer"

	r = client.get("/api/users/me", headers={"Authorization": "Token abc"})
	assert r.status_code == 401
	assert r.get_json()["message"] == "Authentication required"


def test_protected_route_rejects_unknown_and_expired_tokens(client, make_user, expired_header):
	u = make_user("auth_expired")

	r = client.get("/api/users/me", headers={"Authorization": "Bearer " + "ab" * 32})
	assert r.status_code == 401
	assert r.get_json()["message"] == "Invalid or expired session"

	r = client.get("/api/users/me", headers=expired_header(u.id))
	assert r.status_code == 401
	assert r.get_json()["message"] == "Invalid or expired session"


def test_me_returns_current_user(client, make_user, auth_header):
	u = make_user("me_user", first_name="Mia")
	r = client.get("/api/users/me", headers=auth_header(u.id))
	assert r.status_code == 200
	data = r.get_json()["data"]
	assert data["id"] == u.id
	assert data["username"] == "me_user"
	assert data["firstName"] == "Mia"


def test_logout_deletes_session(client, make_user, make_token):
	u = make_user("logout_user")
	token = make_token(u.id)

	r = client.post("/api/logout", headers={"Authorization": f"Bearer {token}"})
	assert r.status_code == 200
	assert Session.query.filter_by(token=token).first() is None

	r = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
	assert r.status_code == 401


def test_logout_without_token_401(client):
	r = client.post("/api/logout")
	assert r.status_code == 401
	assert r.get_json()["message"] == "No token provided"


def test_unknown_route_uses_error_envelope(client):
	r = client.get("/api/nothing-here")
	assert r.status_code == 404
	assert r.get_json()["success"] is False


def test_create_app_registers_every_blueprint(app):
	rules = {rule.rule for rule in app.url_map.iter_rules()}
	assert "/api/login" in rules
	assert "/api/users/<int:user_id>" in rules
	assert "/api/listings/<int:listing_id>/reviews" in rules
	assert "/api/bookings/<int:booking_id>/approve" in rules
	assert "/uploads/<path:filename>" in rules


def test_register_empty_role_defaults_to_user(client):
	r = client.post("/api/users/register", json={"username": "reg_empty_role", "password": "pw", "role": ""})
	assert r.status_code == 201
	assert r.get_json()["data"]["user"]["role"] == "user"


def test_body_over_limit_returns_413_envelope(client, app, monkeypatch):
	monkeypatch.setitem(app.config, "MAX_CONTENT_LENGTH", 64)
	r = client.post("/api/login", data="{" + "x" * 500 + "}", content_type="application/json")
	assert r.status_code == 413
	body = r.get_json()
	assert body["success"] is False
	assert body["message"] == "Request body too large"
