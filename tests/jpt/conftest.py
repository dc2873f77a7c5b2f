import time
from collections.abc import Callable
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from flask import Flask

import jpt as m

SECRET = "unit-test-secret"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def make_config() -> Callable[..., m.TokenConfig]:
    """
    Factory fixture that returns a function.

    Usage in tests:
        config = make_config(iss="A", ttl=60)
    """

    def _make(**overrides: Any) -> m.TokenConfig:
        options: dict[str, Any] = {
            "secret": SECRET,
            "iss": "auth.test",
            "aud": "api.test",
            "ttl": 3600,
        }
        options.update(overrides)
        return m.TokenConfig(**options)

    return _make


@pytest.fixture(scope="session")
def rsa_keys() -> dict[str, bytes]:
    """A 2048-bit RSA key pair as PEM, plus an encrypted copy of the private key."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return {
        "private": key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ),
        "private_encrypted": key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(b"pem-password"),
        ),
        "public": key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        ),
    }


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock(1_700_000_000.0)
    monkeypatch.setattr(time, "time", fake)
    return fake
