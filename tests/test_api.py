"""HTTP tests for the API over the in-memory store and identity backends (no Firebase needed)."""

import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import jwt
from fastapi.testclient import TestClient

from commons.api.errors import http_error
from commons.core.config import Settings, get_settings
from commons.core.errors import InvalidInputError
from commons.core.firebase import FirebaseNotConfiguredError
from commons.core.identity import MemoryIdentityProvider, get_identity
from commons.core.store import MemoryRecordStore, get_store
from commons.main import PROJECT_ROOT, app, resolve_static_dir


class ApiTestCase(unittest.TestCase):
    """Fresh store and identity provider per test; settings overridable per class."""

    SETTINGS: dict[str, object] = {"AUTH_ENABLED": True}

    def setUp(self) -> None:
        self.store = MemoryRecordStore()
        self.identity = MemoryIdentityProvider()
        self.settings = Settings(_env_file=None, **self.SETTINGS)
        app.dependency_overrides[get_store] = lambda: self.store
        app.dependency_overrides[get_identity] = lambda: self.identity
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def signup(self, email: str, password: str = "secret-pw", name: str = "") -> dict:
        resp = self.client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "name": name, "phone": ""},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def login(self, email: str, password: str = "secret-pw") -> dict[str, str]:
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    def make_admin(self, uid: str) -> None:
        self.store.update("users", uid, {"role": "admin"})


class TestSignupAndLogin(ApiTestCase):
    def test_signup_returns_user_record(self) -> None:
        user = self.signup("x@x.com", name="X")
        self.assertEqual(user["email"], "x@x.com")
        self.assertEqual(user["role"], "user")
        self.assertIs(user["isBanned"], False)
        self.assertIn("joinedAt", user)

    def test_duplicate_signup_returns_400(self) -> None:
        self.signup("x@x.com")
        resp = self.client.post(
            "/api/auth/signup",
            json={"email": "x@x.com", "password": "secret-pw", "name": "", "phone": ""},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Email already exists"})
        self.assertEqual(len(self.store.list("users")), 1)

    def test_validation_errors_use_error_body(self) -> None:
        resp = self.client.post("/api/auth/signup", json={"email": "not-an-email", "password": "secret-pw"})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("error", resp.json())

    def test_login_wrong_password(self) -> None:
        self.signup("a@mail.com")
        resp = self.client.post("/api/auth/login", json={"email": "a@mail.com", "password": "wrong-pw"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid credentials"})

    def test_login_returns_record_and_token(self) -> None:
        self.signup("a@mail.com")
        resp = self.client.post("/api/auth/login", json={"email": "a@mail.com", "password": "secret-pw"})
        body = resp.json()
        self.assertEqual(body["email"], "a@mail.com")
        self.assertEqual(body["token_type"], "bearer")
        self.assertTrue(body["access_token"])

    def test_invalid_token(self) -> None:
        resp = self.client.get("/api/session", headers={"Authorization": "Bearer nonsense"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid or expired token"})

    def test_token_signed_with_other_secret_rejected(self) -> None:
        user = self.signup("a@mail.com")
        token = jwt.encode({"sub": user["uid"]}, "some-other-secret", algorithm="HS256")
        resp = self.client.get("/api/session", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 401)

    def test_token_uses_configured_secret(self) -> None:
        self.settings = Settings(_env_file=None, AUTH_ENABLED=True, JWT_SECRET="k" * 40)
        user = self.signup("a@mail.com")
        headers = self.login("a@mail.com")
        token = headers["Authorization"].removeprefix("Bearer ")
        self.assertEqual(jwt.decode(token, "k" * 40, algorithms=["HS256"])["sub"], user["uid"])
        self.assertEqual(self.client.get("/api/session", headers=headers).json()["uid"], user["uid"])


class TestFeedScenario(ApiTestCase):
    def test_post_then_admin_deletes(self) -> None:
        user_a = self.signup("a@mail.com")
        admin_b = self.signup("b@mail.com")
        self.make_admin(admin_b["uid"])
        headers_a = self.login("a@mail.com")
        headers_b = self.login("b@mail.com")

        self.store.set("posts", "older", {"uid": user_a["uid"], "content": "older", "timestamp": 1})
        resp = self.client.post(
            "/api/posts",
            json={"uid": user_a["uid"], "email": "a@mail.com", "content": "hello"},
            headers=headers_a,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        post_id = resp.json()["id"]

        posts = self.client.get("/api/posts").json()
        self.assertEqual(posts[0]["content"], "hello")
        self.assertEqual(posts[0]["uid"], user_a["uid"])

        resp = self.client.delete(f"/api/posts/{post_id}", headers=headers_b)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"deleted": post_id})
        ids = [p["id"] for p in self.client.get("/api/posts").json()]
        self.assertNotIn(post_id, ids)

    def test_other_user_cannot_delete(self) -> None:
        self.signup("a@mail.com")
        self.signup("c@mail.com")
        post_id = self.client.post(
            "/api/posts", json={"content": "mine"}, headers=self.login("a@mail.com")
        ).json()["id"]
        resp = self.client.delete(f"/api/posts/{post_id}", headers=self.login("c@mail.com"))
        self.assertEqual(resp.status_code, 403)

    def test_banned_user_cannot_post_or_chat(self) -> None:
        user = self.signup("a@mail.com")
        headers = self.login("a@mail.com")
        self.store.update("users", user["uid"], {"isBanned": True})
        resp = self.client.post("/api/posts", json={"content": "hi"}, headers=headers)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "You are banned from posting"})
        self.assertEqual(self.client.post("/api/chat", json={"msg": "hi"}, headers=headers).status_code, 403)

    def test_post_requires_session(self) -> None:
        user = self.signup("a@mail.com")
        resp = self.client.post("/api/posts", json={"uid": user["uid"], "content": "hi"})
        self.assertEqual(resp.status_code, 401)

    def test_cannot_post_as_someone_else(self) -> None:
        self.signup("a@mail.com")
        other = self.signup("b@mail.com")
        resp = self.client.post(
            "/api/posts", json={"uid": other["uid"], "content": "spoof"}, headers=self.login("a@mail.com")
        )
        self.assertEqual(resp.status_code, 403)

    def test_delete_unknown_post(self) -> None:
        user = self.signup("a@mail.com")
        self.make_admin(user["uid"])
        resp = self.client.delete("/api/posts/missing", headers=self.login("a@mail.com"))
        self.assertEqual(resp.status_code, 404)


class TestRoleChanges(ApiTestCase):
    def test_admin_console_follows_role(self) -> None:
        boss = self.signup("boss@mail.com")
        member = self.signup("m@mail.com")
        self.make_admin(boss["uid"])
        boss_headers = self.login("boss@mail.com")
        member_headers = self.login("m@mail.com")

        self.assertEqual(self.client.get("/api/admin/console", headers=member_headers).status_code, 403)
        self.assertEqual(self.client.get("/api/session", headers=member_headers).json()["landing"], "dashboard")

        resp = self.client.patch(f"/api/users/{member['uid']}/role", json={"role": "admin"}, headers=boss_headers)
        self.assertEqual(resp.json()["role"], "admin")
        console = self.client.get("/api/admin/console", headers=self.login("m@mail.com"))
        self.assertEqual(console.status_code, 200)
        self.assertEqual(len(console.json()["users"]), 2)
        self.assertEqual(self.client.get("/api/session", headers=member_headers).json()["landing"], "admin")

        self.client.patch(f"/api/users/{member['uid']}/role", json={"role": "user"}, headers=boss_headers)
        self.assertEqual(self.client.get("/api/admin/console", headers=member_headers).status_code, 403)

    def test_ban_and_unban(self) -> None:
        boss = self.signup("boss@mail.com")
        member = self.signup("m@mail.com")
        self.make_admin(boss["uid"])
        boss_headers = self.login("boss@mail.com")
        resp = self.client.patch(f"/api/users/{member['uid']}/ban", json={"isBanned": True}, headers=boss_headers)
        self.assertTrue(resp.json()["isBanned"])
        state = self.client.get("/api/session", headers=self.login("m@mail.com")).json()
        self.assertFalse(state["canPost"])

    def test_member_cannot_ban(self) -> None:
        member = self.signup("m@mail.com")
        resp = self.client.patch(
            f"/api/users/{member['uid']}/ban", json={"isBanned": False}, headers=self.login("m@mail.com")
        )
        self.assertEqual(resp.status_code, 403)


class TestProfile(ApiTestCase):
    def test_update_own_profile(self) -> None:
        self.signup("a@mail.com")
        headers = self.login("a@mail.com")
        resp = self.client.patch("/api/users/me", json={"name": "Ann"}, headers=headers)
        self.assertEqual(resp.json()["name"], "Ann")
        self.assertEqual(self.client.get("/api/users/me", headers=headers).json()["name"], "Ann")

    def test_role_not_self_editable(self) -> None:
        self.signup("a@mail.com")
        resp = self.client.patch("/api/users/me", json={"role": "admin"}, headers=self.login("a@mail.com"))
        self.assertEqual(resp.status_code, 422)

    def test_unauthenticated(self) -> None:
        self.assertEqual(self.client.get("/api/users/me").status_code, 401)


class TestChatAndRequests(ApiTestCase):
    def test_chat_flow(self) -> None:
        boss = self.signup("boss@mail.com")
        self.make_admin(boss["uid"])
        self.signup("a@mail.com")
        headers = self.login("a@mail.com")
        self.store.set("chat", "earlier", {"uid": "someone", "msg": "zero", "timestamp": 1})
        first = self.client.post("/api/chat", json={"msg": "one"}, headers=headers).json()
        self.assertEqual([m["msg"] for m in self.client.get("/api/chat").json()], ["zero", "one"])
        self.assertEqual(self.client.delete(f"/api/chat/{first['id']}", headers=headers).status_code, 403)
        resp = self.client.delete(f"/api/chat/{first['id']}", headers=self.login("boss@mail.com"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(self.client.get("/api/chat").json()), 1)

    def test_request_flow(self) -> None:
        boss = self.signup("boss@mail.com")
        self.make_admin(boss["uid"])
        self.signup("a@mail.com")
        headers = self.login("a@mail.com")
        created = self.client.post("/api/requests", json={"type": "Cleaning", "desc": "Weekly"}, headers=headers)
        self.assertEqual(created.json()["status"], "pending")
        request_id = created.json()["id"]

        denied = self.client.patch(f"/api/requests/{request_id}/status", json={"status": "Approved"}, headers=headers)
        self.assertEqual(denied.status_code, 403)
        boss_headers = self.login("boss@mail.com")
        approved = self.client.patch(
            f"/api/requests/{request_id}/status", json={"status": "Approved"}, headers=boss_headers
        )
        self.assertEqual(approved.json()["status"], "Approved")
        self.assertEqual(self.client.get("/api/requests", headers=headers).json()[0]["status"], "Approved")

    def test_banned_user_can_still_request(self) -> None:
        user = self.signup("a@mail.com")
        self.store.update("users", user["uid"], {"isBanned": True})
        resp = self.client.post(
            "/api/requests", json={"type": "Cleaning", "desc": "Weekly"}, headers=self.login("a@mail.com")
        )
        self.assertEqual(resp.status_code, 200)


class TestLegacyTrustModel(ApiTestCase):
    """AUTH_ENABLED=false: body uid / X-User-Id are trusted and login skips the password."""

    SETTINGS = {"AUTH_ENABLED": False}

    def test_login_by_email_only(self) -> None:
        user = self.signup("a@mail.com")
        resp = self.client.post("/api/auth/login", json={"email": "a@mail.com"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["uid"], user["uid"])
        self.assertIsNone(resp.json()["access_token"])

    def test_login_unknown_email(self) -> None:
        resp = self.client.post("/api/auth/login", json={"email": "nobody@mail.com"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid credentials"})

    def test_post_with_body_uid(self) -> None:
        user = self.signup("a@mail.com")
        resp = self.client.post("/api/posts", json={"uid": user["uid"], "email": "a@mail.com", "content": "hello"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/api/posts").json()[0]["content"], "hello")

    def test_banned_body_uid_rejected(self) -> None:
        user = self.signup("a@mail.com")
        self.store.update("users", user["uid"], {"isBanned": True})
        resp = self.client.post("/api/posts", json={"uid": user["uid"], "content": "hello"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "You are banned from posting"})

    def test_unknown_body_uid_rejected(self) -> None:
        resp = self.client.post("/api/posts", json={"uid": "ghost", "content": "hello"})
        self.assertEqual(resp.status_code, 403)

    def test_header_identity(self) -> None:
        user = self.signup("a@mail.com")
        resp = self.client.get("/api/session", headers={"X-User-Id": user["uid"]})
        self.assertEqual(resp.json()["uid"], user["uid"])

    def test_malformed_header_identity_is_unauthenticated(self) -> None:
        resp = self.client.get("/api/session", headers={"X-User-Id": "a/b"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Not authenticated"})

    def test_malformed_body_uid_is_unauthenticated(self) -> None:
        resp = self.client.post("/api/posts", json={"uid": "a/b", "content": "hello"})
        self.assertEqual(resp.status_code, 401)


class TestUsersAndHealth(ApiTestCase):
    def test_users_listing_is_public(self) -> None:
        self.signup("a@mail.com")
        self.signup("b@mail.com")
        self.assertEqual(len(self.client.get("/api/users").json()), 2)

    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").status_code, 200)

    @patch("commons.api.health.get_store")
    def test_health_connected(self, mock_get_store: MagicMock) -> None:
        mock_get_store.return_value.ping.return_value = True
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["store"], "connected")

    @patch("commons.api.health.get_store")
    def test_health_unconfigured(self, mock_get_store: MagicMock) -> None:
        mock_get_store.side_effect = FirebaseNotConfiguredError("Firebase is not configured")
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["store"], "unconfigured")


class TestAppWiring(unittest.TestCase):
    def test_relative_static_dir_is_anchored_to_project_root(self) -> None:
        self.assertEqual(resolve_static_dir("public"), (PROJECT_ROOT / "public").resolve())
        self.assertTrue((PROJECT_ROOT / "commons" / "main.py").is_file())

    def test_absolute_static_dir_kept(self) -> None:
        absolute = Path("/srv/site").resolve()
        self.assertEqual(resolve_static_dir(str(absolute)), absolute)

    def test_invalid_input_maps_to_422(self) -> None:
        exc = http_error(InvalidInputError("bad"))
        self.assertEqual(exc.status_code, 422)
        self.assertEqual(exc.detail, "bad")


if __name__ == "__main__":
    unittest.main()
