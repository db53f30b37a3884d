"""Shared fixtures for API tests: in-memory SQLite app client and a recording mailer."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.database import get_db
from app.main import app
from app.models import Base
from app.services.notifications import (
    NotificationError,
    ResetLinkSender,
    get_reset_link_sender,
)


class RecordingSender(ResetLinkSender):
    """ResetLinkSender that records calls instead of talking to SMTP."""

    def __init__(self, fail: bool = False) -> None:
        super().__init__(get_settings())
        self.sent: list[tuple[str, str]] = []
        self.fail = fail

    def send_reset_link(self, email: str, token: str) -> None:
        if self.fail:
            raise NotificationError("Failed to send reset email")
        self.sent.append((email, token))


def make_engine():
    """One shared connection so every session sees the same in-memory database."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class ApiTestCase(unittest.TestCase):
    """Runs the app against a fresh in-memory database per test."""

    prefix = get_settings().API_PREFIX

    def setUp(self) -> None:
        self.engine = make_engine()
        Base.metadata.create_all(self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.sender = RecordingSender()

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_reset_link_sender] = lambda: self.sender
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def register(self, **overrides: object):
        body = {
            "username": "alice",
            "name": "Alice",
            "password": "Secret1",
            "email": "a@x.com",
        }
        body.update(overrides)
        return self.client.post(self.url("/register"), json=body)

    def login(self, email: str = "a@x.com", password: str = "Secret1"):
        return self.client.post(self.url("/login"), json={"email": email, "password": password})

    def token_for(self, email: str = "a@x.com", password: str = "Secret1") -> str:
        resp = self.login(email, password)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
