import importlib

import pytest

from app import create_app
from core.config import DEV_SECRET_KEY
from storage.database import DatabaseStorage
from storage.factory import create_storage, select_backend
from storage.memory import MemoryStorage
from tests.conftest import FakeRewriter


class TestBackendSelection:
    def test_explicit_backend_wins(self):
        assert select_backend({"STORAGE_BACKEND": "memory", "DATABASE_URL": "postgresql://x"}) == "memory"
        assert select_backend({"STORAGE_BACKEND": "Database"}) == "database"

    def test_database_url_selects_database(self):
        assert select_backend({"DATABASE_URL": "postgresql://x"}) == "database"

    def test_memory_flag_overrides_url(self):
        assert select_backend({"DATABASE_URL": "postgresql://x", "USE_MEMORY_STORAGE": True}) == "memory"

    def test_default_is_memory(self):
        assert select_backend({}) == "memory"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            select_backend({"STORAGE_BACKEND": "redis"})

    def test_create_storage(self):
        assert isinstance(create_storage({}), MemoryStorage)
        assert isinstance(create_storage({"STORAGE_BACKEND": "database"}), DatabaseStorage)


def _create(**overrides):
    params = dict(STORAGE_BACKEND="memory", RATELIMIT_ENABLED=False, VALIDATE_PROVIDER_ON_STARTUP=False,
                  SECRET_KEY="test-secret")
    params.update(overrides)
    rewriter = params.pop("rewriter", None) or FakeRewriter()
    return create_app(rewriter=rewriter, **params)


class TestCreateApp:
    def test_wires_dependencies(self):
        rewriter = FakeRewriter()
        app = _create(rewriter=rewriter)
        assert app.rewriter is rewriter
        assert app.transformer.storage is app.storage
        assert app.ledger.storage is app.storage

    def test_startup_validation_failure_only_warns(self):
        rewriter = FakeRewriter()
        rewriter.fail = "credentials"
        app = _create(rewriter=rewriter, VALIDATE_PROVIDER_ON_STARTUP=True)
        assert app.rewriter is rewriter

    def test_check_provider_command(self):
        result = _create().test_cli_runner().invoke(args=["check-provider"])
        assert "fake: ok" in result.output


class TestSecretKey:
    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret_key(self, secret):
        with pytest.raises(RuntimeError):
            _create(SECRET_KEY=secret)

    def test_default_key_rejected_outside_development(self):
        with pytest.raises(RuntimeError):
            _create(SECRET_KEY=DEV_SECRET_KEY, ENV="production")

    def test_default_key_allowed_in_development(self):
        app = _create(SECRET_KEY=DEV_SECRET_KEY, ENV="development")
        assert app.secret_key == DEV_SECRET_KEY

    def test_no_built_in_default_in_production(self, monkeypatch):
        for name in ("SESSION_SECRET", "SECRET_KEY"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("FLASK_ENV", "production")
        import core.config

        reloaded = importlib.reload(core.config)
        try:
            assert reloaded.Config.SECRET_KEY is None
        finally:
            monkeypatch.undo()
            importlib.reload(core.config)
