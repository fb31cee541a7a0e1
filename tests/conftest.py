import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from blogapi.app import create_app
from blogapi.auth.tokens import TokenIssuer
from blogapi.config import Settings
from blogapi.core.errors import AuthError
from blogapi.infra.provider import PROVIDER_FAILED, ProviderClaims
from blogapi.infra.repo import MemoryRepository

SECRET = "test-secret"


class FakeVerifier:
    """Provider verifier answering from a fixed token -> claims table."""

    def __init__(self):
        self.tokens: Dict[str, ProviderClaims] = {}

    def add(self, token: str, email: str, name: str = "Google User", picture: str = "") -> None:
        self.tokens[token] = ProviderClaims(email=email, name=name, picture=picture)

    def verify(self, token: str) -> ProviderClaims:
        if token not in self.tokens:
            raise AuthError(PROVIDER_FAILED)
        return self.tokens[token]


class FakeUploads:
    def upload_url(self) -> str:
        return "https://bucket.example/abc-1.jpeg?sig=1"


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key=SECRET, log_level="WARNING")


@pytest.fixture()
def repo() -> MemoryRepository:
    return MemoryRepository()


@pytest.fixture()
def tokens() -> TokenIssuer:
    return TokenIssuer(SECRET)


@pytest.fixture()
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture()
def client(settings, repo, verifier) -> TestClient:
    app = create_app(settings, repo=repo, verifier=verifier, uploads=FakeUploads())
    return TestClient(app)


@pytest.fixture()
def auth_header(client):
    r = client.post("/signup", json={"fullname": "Jane Doe", "email": "jane@example.com", "password": "Passw0rd"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
