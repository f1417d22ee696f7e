"""
Shared fixtures: a fake rewriter, apps on either backend, and plain storages.
"""

import threading

import pytest

from app import create_app
from domain.models import db
from services.ai.base import Rewriter, RewriteProviderError, UPSTREAM
from storage.memory import MemoryStorage


class FakeRewriter(Rewriter):
    """Deterministic provider: '[to_style] text', or raises when fail is set."""

    name = "fake"

    def __init__(self):
        self.calls = []
        self.fail = None
        self._lock = threading.Lock()

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        with self._lock:
            self.calls.append((original_text, from_style, to_style, preservation_percentage))
        if self.fail:
            raise RewriteProviderError(self.name, "boom", self.fail)
        return f"[{to_style}] {original_text}"

    def validate_credentials(self):
        return self.fail is None


def _app_config(backend):
    return dict(
        TESTING=True,
        STORAGE_BACKEND=backend,
        SQLALCHEMY_DATABASE_URI="sqlite://",
        AUTO_CREATE_SCHEMA=True,
        RATELIMIT_ENABLED=False,
        VALIDATE_PROVIDER_ON_STARTUP=False,
        SESSION_COOKIE_SECURE=False,
        SECRET_KEY="test-secret",
        GUEST_MAX_USAGE=10,
    )


def make_app(backend="memory", rewriter=None):
    return create_app(rewriter=rewriter or FakeRewriter(), **_app_config(backend))


@pytest.fixture
def rewriter():
    return FakeRewriter()


@pytest.fixture(params=["memory", "database"])
def app(request, rewriter):
    app = make_app(request.param, rewriter)
    with app.app_context():
        yield app
        if app.storage.name == "database":
            db.session.remove()
            db.drop_all()


@pytest.fixture
def memory_app(rewriter):
    app = make_app("memory", rewriter)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """A bare storage; the database one runs inside an app context on sqlite."""
    if request.param == "memory":
        yield MemoryStorage()
        return
    app = make_app("database")
    with app.app_context():
        yield app.storage
        db.session.remove()
        db.drop_all()
