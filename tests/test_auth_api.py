from conftest import PASSWORD

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"


def _register(client, **overrides):
    payload = {
        "email": "New.Customer@Gmail.com",
        "password": "s3cure-enough",
        "firstName": "New",
        "lastName": "Customer",
    }
    payload.update(overrides)
    return client.post(REGISTER_URL, json=payload)


class TestRegister:
    def test_creates_a_customer_and_returns_a_token(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.get_json()
        assert body["user"]["email"] == "new.customer@gmail.com"
        assert body["user"]["firstName"] == "New"
        assert body["user"]["locale"] == "en"
        assert "passwordHash" not in body["user"]
        assert body["token"]

    def test_token_authenticates_follow_up_requests(self, client):
        token = _register(client).get_json()["token"]

        response = client.get("/api/v1/users/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.get_json()["email"] == "new.customer@gmail.com"

    def test_duplicate_email_conflicts(self, client):
        _register(client)

        response = _register(client, email="new.customer@gmail.com")

        assert response.status_code == 409
        assert response.mimetype == "application/problem+json"
        assert response.get_json()["detail"] == "An account with this email already exists"

    def test_invalid_email_is_a_validation_error(self, client):
        response = _register(client, email="not-an-email")

        assert response.status_code == 400
        assert "email" in response.get_json()["errors"]

    def test_short_password_is_a_validation_error(self, client):
        response = _register(client, password="short")

        assert response.status_code == 400
        assert "password" in response.get_json()["errors"]

    def test_non_object_body_is_rejected(self, client):
        response = client.post(REGISTER_URL, json=["email"])

        assert response.status_code == 400
        assert response.get_json()["detail"] == "Request body must be a JSON object"


class TestLogin:
    def test_valid_credentials(self, client, user):
        response = client.post(LOGIN_URL, json={"email": "JANE@gmail.com", "password": PASSWORD})

        assert response.status_code == 200
        body = response.get_json()
        assert body["user"]["id"] == user.id
        assert body["token"]

    def test_wrong_password(self, client, user):
        response = client.post(LOGIN_URL, json={"email": "jane@gmail.com", "password": "wrong-password"})

        assert response.status_code == 401
        assert response.get_json()["title"] == "Invalid credentials"

    def test_unknown_email_looks_like_wrong_password(self, client):
        response = client.post(LOGIN_URL, json={"email": "ghost@gmail.com", "password": PASSWORD})

        assert response.status_code == 401
        assert response.get_json()["title"] == "Invalid credentials"

    def test_missing_fields(self, client):
        response = client.post(LOGIN_URL, json={})

        assert response.status_code == 400
        assert set(response.get_json()["errors"]) == {"email", "password"}


class TestBearerTokens:
    def test_missing_token(self, client):
        response = client.get("/api/v1/users/profile")

        assert response.status_code == 401
        assert response.get_json()["detail"] == "Authentication token required"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/users/profile", headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401

    def test_token_signed_with_another_secret(self, client, user):
        from storefront.core.config import SecurityConfig
        from storefront.core.security import issue_access_token

        token = issue_access_token(user.id, user.role, SecurityConfig(jwt_secret_key="someone-else"))

        response = client.get("/api/v1/users/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
