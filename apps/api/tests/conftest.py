from __future__ import annotations

import pytest

from jotpad_api.dependencies import get_repository, get_settings


def _reset_dependencies() -> None:
    if get_repository.cache_info().currsize:
        get_repository().dispose()
    get_repository.cache_clear()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clear_dependency_cache():
    _reset_dependencies()
    yield
    _reset_dependencies()


@pytest.fixture
def api_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'notes.db'}")
    monkeypatch.delenv("API_AUTH_MODE", raising=False)
    monkeypatch.delenv("API_AUTH_TOKEN", raising=False)
    return tmp_path
