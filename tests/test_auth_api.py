"""
Integration tests for the auth routes through the real ASGI stack:
register/login, access gate (401/403), profile and password updates,
forgot/reset password.
"""

import unittest
from datetime import timedelta

from app.core.security import SessionClaims, get_token_service
from support import ApiTestCase


class TestRegisterAndLogin(ApiTestCase):
    def test_register_then_login(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        self.assertEqual(body["message"], "User registered successfully")
        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual(body["user"]["role"], "user")
        self.assertNotIn("password", body["user"])
        self.assertNotIn("password_hash", body["user"])

        resp = self.login()
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data["id"], body["user"]["id"])
        claims = get_token_service().verify_session_token(data["token"])
        self.assertEqual(claims.id, body["user"]["id"])
        self.assertEqual(claims.email, "a@x.com")

    def test_duplicate_username_is_rejected(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        resp = self.register(email="other@x.com")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Username already taken"})

    def test_duplicate_email_is_rejected(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        resp = self.register(username="alice2")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Email already registered"})

    def test_missing_fields_is_400(self) -> None:
        resp = self.client.post(self.url("/register"), json={"username": "alice"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Missing required fields")

    def test_unknown_role_is_400(self) -> None:
        resp = self.register(role="superuser")
        self.assertEqual(resp.status_code, 400)

    def test_wrong_password_and_unknown_email_look_the_same(self) -> None:
        self.register()
        wrong = self.login(password="Wrong12")
        unknown = self.login(email="nobody@x.com")
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())
        self.assertEqual(wrong.json(), {"detail": "Invalid email or password"})


class TestAccessGate(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.register(username="root", name="Root", email="root@x.com", role="admin")

    def test_no_header(self) -> None:
        resp = self.client.get(self.url("/me"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"detail": "Unauthorized: No token provided"})

    def test_malformed_header(self) -> None:
        token = self.token_for()
        for header in (token, f"Token {token}", "Bearer"):
            resp = self.client.get(self.url("/me"), headers={"Authorization": header})
            self.assertEqual(resp.status_code, 401, header)

    def test_invalid_token(self) -> None:
        resp = self.client.get(self.url("/me"), headers=self.bearer("not.a.jwt"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"detail": "Invalid or expired token"})

    def test_expired_token(self) -> None:
        me = self.client.get(self.url("/me"), headers=self.bearer(self.token_for())).json()
        expired = get_token_service().issue_session_token(
            SessionClaims(id=me["id"], username="alice", email="a@x.com", role="user"),
            ttl=timedelta(seconds=-1),
        )
        resp = self.client.get(self.url("/me"), headers=self.bearer(expired))
        self.assertEqual(resp.status_code, 401)

    def test_token_for_missing_user(self) -> None:
        ghost = get_token_service().issue_session_token(
            SessionClaims(id=999, username="ghost", email="g@x.com", role="admin")
        )
        resp = self.client.get(self.url("/me"), headers=self.bearer(ghost))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"detail": "Unauthorized: User not found"})

    def test_reset_token_cannot_authenticate(self) -> None:
        me = self.client.get(self.url("/me"), headers=self.bearer(self.token_for())).json()
        reset = get_token_service().issue_reset_token(me["id"])
        for method, path in (("get", "/me"), ("put", "/update-password"), ("put", "/update")):
            resp = self.client.request(
                method.upper(), self.url(path), headers=self.bearer(reset), json={}
            )
            self.assertEqual(resp.status_code, 401, path)

    def test_me_returns_identity(self) -> None:
        resp = self.client.get(self.url("/me"), headers=self.bearer(self.token_for()))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "alice")
        self.assertEqual(resp.json()["role"], "user")

    def test_update_requires_admin(self) -> None:
        resp = self.client.put(
            self.url("/update"), headers=self.bearer(self.token_for()), json={"name": "Hacker"}
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"detail": "Access denied: Admins only"})

    def test_admin_update_persists(self) -> None:
        token = self.token_for("root@x.com")
        resp = self.client.put(
            self.url("/update"),
            headers=self.bearer(token),
            json={"name": "Root Admin", "email": "admin@x.com", "password": "NewRoot1"},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["user"]["name"], "Root Admin")
        self.assertEqual(resp.json()["user"]["email"], "admin@x.com")
        self.assertEqual(self.login("admin@x.com", "NewRoot1").status_code, 200)
        self.assertEqual(self.login("root@x.com", "Secret1").status_code, 401)

    def test_admin_update_to_taken_email(self) -> None:
        token = self.token_for("root@x.com")
        resp = self.client.put(
            self.url("/update"), headers=self.bearer(token), json={"email": "a@x.com"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Email already registered"})


class TestUpdatePassword(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.token = self.token_for()

    def _put(self, current: str, new: str):
        return self.client.put(
            self.url("/update-password"),
            headers=self.bearer(self.token),
            json={"currentPassword": current, "newPassword": new},
        )

    def test_success(self) -> None:
        resp = self._put("Secret1", "Changed1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Password updated successfully"})
        self.assertEqual(self.login(password="Changed1").status_code, 200)
        self.assertEqual(self.login(password="Secret1").status_code, 401)

    def test_wrong_current_password(self) -> None:
        resp = self._put("Nope123", "Changed1")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"detail": "Current password is incorrect"})
        self.assertEqual(self.login().status_code, 200)

    def test_old_session_token_still_valid_after_change(self) -> None:
        self._put("Secret1", "Changed1")
        resp = self.client.get(self.url("/me"), headers=self.bearer(self.token))
        self.assertEqual(resp.status_code, 200)


class TestForgotAndResetPassword(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.register().json()["user"]["id"]

    def test_forgot_unknown_email(self) -> None:
        resp = self.client.post(self.url("/forgot-password"), json={"email": "nobody@x.com"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.sender.sent, [])

    def test_forgot_sends_exactly_one_email(self) -> None:
        resp = self.client.post(self.url("/forgot-password"), json={"email": "a@x.com"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Password reset link sent to your email"})
        self.assertEqual(len(self.sender.sent), 1)
        email, token = self.sender.sent[0]
        self.assertEqual(email, "a@x.com")
        self.assertEqual(get_token_service().verify_reset_token(token), self.user_id)

    def test_forgot_send_failure_is_500(self) -> None:
        self.sender.fail = True
        resp = self.client.post(self.url("/forgot-password"), json={"email": "a@x.com"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"detail": "Error sending reset email"})

    def test_reset_with_emailed_token(self) -> None:
        self.client.post(self.url("/forgot-password"), json={"email": "a@x.com"})
        _, token = self.sender.sent[0]
        resp = self.client.post(
            self.url(f"/reset-password/{token}"), json={"newPassword": "Brand1New"}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(self.login(password="Brand1New").status_code, 200)
        self.assertEqual(self.login().status_code, 401)

    def test_reset_token_reusable_until_expiry(self) -> None:
        token = get_token_service().issue_reset_token(self.user_id)
        url = self.url(f"/reset-password/{token}")
        self.assertEqual(self.client.post(url, json={"newPassword": "First11"}).status_code, 200)
        self.assertEqual(self.client.post(url, json={"newPassword": "Second2"}).status_code, 200)

    def test_reset_missing_new_password(self) -> None:
        token = get_token_service().issue_reset_token(self.user_id)
        resp = self.client.post(self.url(f"/reset-password/{token}"), json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "New password is required"})

    def test_reset_too_short_password_is_rejected(self) -> None:
        token = get_token_service().issue_reset_token(self.user_id)
        resp = self.client.post(self.url(f"/reset-password/{token}"), json={"newPassword": "a"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "New password must be at least 6 characters"})
        self.assertEqual(self.login(password="a").status_code, 401)
        self.assertEqual(self.login().status_code, 200)

    def test_reset_expired_token_leaves_password(self) -> None:
        token = get_token_service().issue_reset_token(self.user_id, ttl=timedelta(seconds=-1))
        resp = self.client.post(
            self.url(f"/reset-password/{token}"), json={"newPassword": "Brand1New"}
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"detail": "Invalid or expired token"})
        self.assertEqual(self.login().status_code, 200)

    def test_reset_with_session_token_is_rejected(self) -> None:
        token = self.token_for()
        resp = self.client.post(
            self.url(f"/reset-password/{token}"), json={"newPassword": "Brand1New"}
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.login().status_code, 200)

    def test_reset_for_deleted_user(self) -> None:
        token = get_token_service().issue_reset_token(4242)
        resp = self.client.post(
            self.url(f"/reset-password/{token}"), json={"newPassword": "Brand1New"}
        )
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
