from unittest.mock import Mock

from shorturlapi import serve
from shorturlapi.core.config import get_settings


def test_main_runs_the_app_with_uvicorn(monkeypatch):
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    run = Mock()
    monkeypatch.setattr(serve.uvicorn, "run", run)

    try:
        serve.main()
    finally:
        get_settings.cache_clear()

    run.assert_called_once_with("shorturlapi.main:app", host="0.0.0.0", port=8123, log_level="warning")
