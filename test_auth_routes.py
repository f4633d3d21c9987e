import unittest
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from app import app
from auth_config import AuthConfig
from fake_mongo import FakeDatabase
from services.auth_service import pwd_context
from services.dependencies import get_password_reset_service
from services.password_reset_service import RESET_REQUESTED_MESSAGE, PasswordResetService


class AuthRoutesTests(unittest.TestCase):

    def setUp(self) -> None:
        self.db = FakeDatabase()
        self.db["users"].insert_one(
            {"handle": "alice", "user_name": "alice-gh", "password": pwd_context.hash("oldpass1")}
        )
        self.now = datetime(2026, 1, 1, 12, 0, 0)
        self.config = AuthConfig(dev_reset_code_echo=False)
        self.production = True
        app.dependency_overrides[get_password_reset_service] = lambda: PasswordResetService(
            self.db,
            clock=lambda: self.now,
            code_generator=lambda: "482913",
            config=self.config,
            production=self.production,
        )
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _forgot(self, **body):
        return self.client.post("/auth/forgot-password", json=body)

    def _reset(self, code="482913", new_password="newpass1", **body):
        payload = {"handle": "alice", "user_name": "alice-gh", "reset_code": code, "new_password": new_password}
        payload.update(body)
        return self.client.post("/auth/reset-password", json=payload)

    def test_forgot_password_same_body_for_unknown_account(self) -> None:
        known = self._forgot(handle="alice", user_name="alice-gh")
        unknown = self._forgot(handle="mallory", user_name="mallory-gh")

        self.assertEqual(known.status_code, 200)
        self.assertEqual(unknown.status_code, 200)
        self.assertEqual(known.json(), {"message": RESET_REQUESTED_MESSAGE})
        self.assertEqual(known.json(), unknown.json())

    def test_forgot_password_missing_field(self) -> None:
        response = self._forgot(handle="alice")
        self.assertEqual(response.status_code, 400)
        self.assertIn("required", response.json()["message"])

    def test_full_reset_flow(self) -> None:
        self.assertEqual(self._forgot(handle="alice", user_name="alice-gh").status_code, 200)

        response = self._reset()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "success"})

        replay = self._reset()
        self.assertEqual(replay.status_code, 400)
        self.assertIn("Invalid or expired", replay.json()["message"])

    def test_camel_case_payload_is_accepted(self) -> None:
        self.client.post("/auth/forgot-password", json={"handle": "alice", "secondaryIdentifier": "alice-gh"})
        response = self.client.post(
            "/auth/reset-password",
            json={
                "handle": "alice",
                "secondaryIdentifier": "alice-gh",
                "suppliedCode": "482913",
                "newCredential": "newpass1",
            },
        )
        self.assertEqual(response.json(), {"message": "success"})

    def test_wrong_codes_then_too_many_requests(self) -> None:
        self._forgot(handle="alice", user_name="alice-gh")

        for remaining in (4, 3, 2, 1, 0):
            response = self._reset(code="000000")
            self.assertEqual(response.status_code, 400)
            self.assertIn(f"{remaining} attempts remaining", response.json()["message"])

        response = self._reset(code="000000")
        self.assertEqual(response.status_code, 429)
        self.assertIn("Too many failed attempts", response.json()["message"])

    def test_expired_code_is_bad_request(self) -> None:
        self._forgot(handle="alice", user_name="alice-gh")
        self.now = self.now + timedelta(minutes=16)

        response = self._reset()
        self.assertEqual(response.status_code, 400)
        self.assertIn("expired", response.json()["message"])

    def test_short_password_and_missing_fields(self) -> None:
        self._forgot(handle="alice", user_name="alice-gh")

        short = self._reset(new_password="abc")
        self.assertEqual(short.status_code, 400)
        self.assertIn("at least 6 characters", short.json()["message"])

        missing = self.client.post("/auth/reset-password", json={"handle": "alice", "user_name": "alice-gh"})
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json(), {"message": "All fields are required"})

    def test_storage_failure_is_generic_500(self) -> None:
        self.db["users"].fail_on.add("find_one")

        forgot = self._forgot(handle="alice", user_name="alice-gh")
        self.assertEqual(forgot.status_code, 500)
        self.assertEqual(forgot.json(), {"message": "Password reset request failed"})

        reset = self._reset()
        self.assertEqual(reset.status_code, 500)
        self.assertEqual(reset.json(), {"message": "Password reset failed"})

    def test_dev_code_echo_only_when_enabled(self) -> None:
        self.config = AuthConfig(dev_reset_code_echo=True)
        self.production = False
        response = self._forgot(handle="alice", user_name="alice-gh")
        self.assertEqual(response.json()["dev_reset_code"], "482913")

        self.production = True
        response = self._forgot(handle="alice", user_name="alice-gh")
        self.assertNotIn("dev_reset_code", response.json())

    def test_health(self) -> None:
        response = self.client.get("/auth/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()
