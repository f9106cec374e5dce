from models.refresh_token import RefreshToken
from models.user import User
from tests.helpers import PASSWORD, bearer, count

SIGNUP = "/api/v1/auth/signup"
LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh-token"
LOGOUT = "/api/v1/auth/logout"
PROFILE = "/api/v1/auth/profile"


def signup_body(**overrides):
    body = {"email": "a@x.com", "password": PASSWORD, "firstName": "A", "lastName": "B"}
    body.update(overrides)
    return body


def fields_of(resp):
    return {e["field"] for e in resp.get_json()["errors"]}


class TestSignup:
    def test_signup_then_duplicate(self, client, storage, tokens):
        # single-letter names are below the 2 character minimum
        assert client.post(SIGNUP, json=signup_body()).status_code == 400

        resp = client.post(SIGNUP, json=signup_body(firstName="Ada", lastName="Byron"))
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        data = body["data"]
        assert data["user"]["email"] == "a@x.com"
        assert data["user"]["firstName"] == "Ada"
        assert data["user"]["role"] == "customer"
        assert "password" not in data["user"] and "passwordHash" not in data["user"]
        assert data["accessToken"] and data["refreshToken"]
        claims = tokens.verify(data["accessToken"])
        assert (claims["sub"], claims["email"], claims["role"]) == (data["user"]["id"], "a@x.com", "customer")

        dup = client.post(SIGNUP, json=signup_body(firstName="Ada", lastName="Byron"))
        assert dup.status_code == 409
        assert dup.get_json() == {"success": False, "message": "User with this email already exists"}
        assert count(storage, User) == 1

    def test_email_is_normalized_before_the_conflict_check(self, client, storage):
        client.post(SIGNUP, json=signup_body(firstName="Ada", lastName="Byron"))
        resp = client.post(
            SIGNUP, json=signup_body(email="  A@X.COM ", firstName="Ada", lastName="Byron")
        )
        assert resp.status_code == 409
        assert count(storage, User) == 1

    def test_validation_errors_are_listed_per_field(self, client):
        resp = client.post(
            SIGNUP,
            json={"email": "nope", "password": "short", "firstName": "Ada1", "phone": "abc"},
        )
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert fields_of(resp) == {"email", "password", "firstName", "lastName", "phone"}

    def test_password_needs_mixed_case_and_digit(self, client):
        resp = client.post(SIGNUP, json=signup_body(password="alllowercase1", firstName="Ada", lastName="Byron"))
        assert resp.status_code == 400
        assert fields_of(resp) == {"password"}

    def test_blank_phone_is_optional(self, client):
        resp = client.post(SIGNUP, json=signup_body(phone="", firstName="Ada", lastName="Byron"))
        assert resp.status_code == 201
        assert resp.get_json()["data"]["user"]["phone"] is None

    def test_empty_body(self, client):
        resp = client.post(SIGNUP, json={})
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [{"field": "body", "message": "Request body cannot be empty"}]

    def test_malformed_json(self, client):
        resp = client.post(SIGNUP, data="{not json", content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON format in request body"


class TestLogin:
    def test_login(self, client, registered):
        resp = client.post(LOGIN, json={"email": "A@x.com", "password": PASSWORD})
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["user"]["email"] == "a@x.com"
        assert data["accessToken"] and data["refreshToken"]

    def test_wrong_password_and_unknown_email_share_a_message(self, client, registered):
        wrong = client.post(LOGIN, json={"email": "a@x.com", "password": "wrong"})
        unknown = client.post(LOGIN, json={"email": "unknown@x.com", "password": "x"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json()
        assert wrong.get_json()["message"] == "Invalid email or password"

    def test_deactivated(self, client, storage, registered):
        user = storage.get(User, registered["user"].id)
        user.is_active = False
        storage.save()
        storage.close()

        resp = client.post(LOGIN, json={"email": "a@x.com", "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Account is deactivated"
        assert count(storage, RefreshToken) == 1

    def test_missing_password(self, client):
        resp = client.post(LOGIN, json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert fields_of(resp) == {"password"}


class TestTokens:
    def test_refresh(self, client, registered, tokens):
        resp = client.post(REFRESH, json={"refreshToken": registered["refreshToken"]})
        assert resp.status_code == 200
        access = resp.get_json()["data"]["accessToken"]
        assert tokens.verify(access)["sub"] == registered["user"].id

    def test_refresh_token_too_short(self, client):
        resp = client.post(REFRESH, json={"refreshToken": "abc"})
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [
            {"field": "refreshToken", "message": "Invalid refresh token format"}
        ]

    def test_refresh_with_garbage(self, client):
        resp = client.post(REFRESH, json={"refreshToken": "x" * 32})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid token provided"

    def test_logout_is_idempotent(self, client, registered, storage):
        body = {"refreshToken": registered["refreshToken"]}
        first = client.post(LOGOUT, json=body)
        second = client.post(LOGOUT, json=body)
        assert first.status_code == second.status_code == 200
        assert first.get_json()["success"] is True
        assert count(storage, RefreshToken) == 0

        after = client.post(REFRESH, json=body)
        assert after.status_code == 401
        assert after.get_json()["message"] == "Invalid refresh token"


class TestProfile:
    def test_requires_bearer_token(self, client):
        resp = client.get(PROFILE)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Access token is required"

    def test_scheme_is_case_insensitive(self, client, registered):
        token = registered["accessToken"]
        for header in (f"bearer {token}", f"BEARER {token}"):
            resp = client.get(PROFILE, headers={"Authorization": header})
            assert resp.status_code == 200
        assert client.get(PROFILE, headers={"Authorization": f"Token {token}"}).status_code == 401
        assert client.get(PROFILE, headers={"Authorization": "Bearer "}).status_code == 401

    def test_rejects_refresh_token_as_bearer(self, client, registered):
        resp = client.get(PROFILE, headers=bearer(registered["refreshToken"]))
        assert resp.status_code == 401

    def test_get_profile(self, client, registered):
        resp = client.get(PROFILE, headers=bearer(registered["accessToken"]))
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["id"] == registered["user"].id
        assert data["email"] == "a@x.com"
        assert data["isVerified"] is False
        assert {"createdAt", "updatedAt", "phone", "role", "firstName", "lastName"} <= set(data)
        assert "passwordHash" not in data

    def test_profile_of_deleted_user(self, client, storage, registered):
        storage.delete(storage.get(User, registered["user"].id))
        storage.save()
        storage.close()
        resp = client.get(PROFILE, headers=bearer(registered["accessToken"]))
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "User not found"

    def test_update_profile(self, client, registered):
        resp = client.put(
            PROFILE,
            json={"firstName": "Augusta", "phone": ""},
            headers=bearer(registered["accessToken"]),
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["firstName"] == "Augusta"
        assert data["lastName"] == "Byron"
        # blank fields are treated as not provided
        assert data["phone"] == "+1 555 123 4567"

    def test_update_needs_one_field(self, client, registered):
        resp = client.put(
            PROFILE, json={"firstName": "  ", "email": "b@x.com"}, headers=bearer(registered["accessToken"])
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [
            {"field": "body", "message": "At least one field (firstName, lastName, or phone) must be provided"}
        ]

    def test_update_validates_fields(self, client, registered):
        resp = client.put(PROFILE, json={"phone": "12"}, headers=bearer(registered["accessToken"]))
        assert resp.status_code == 400
        assert fields_of(resp) == {"phone"}

    def test_update_for_deleted_user_is_a_storage_error(self, client, storage, registered):
        storage.delete(storage.get(User, registered["user"].id))
        storage.save()
        storage.close()
        resp = client.put(PROFILE, json={"lastName": "Gone"}, headers=bearer(registered["accessToken"]))
        assert resp.status_code == 400
        assert resp.get_json() == {"success": False, "message": "Record not found"}
