import logging

import pytest
import uvicorn
from fastapi.testclient import TestClient

import main
from shortlinks.config import Settings
from shortlinks.log import configure_logging, resolve_log_level, uvicorn_log_level


class TestLogging:
    """Test logging setup and request tracing"""

    def test_unknown_level_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            level = configure_logging("chatty")

        assert level == logging.INFO
        assert "Unknown LOG_LEVEL 'chatty'" in caplog.text

    def test_known_level_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING):
            level = configure_logging("DEBUG")

        assert level == logging.DEBUG
        assert "Unknown LOG_LEVEL" not in caplog.text

    @pytest.mark.parametrize("name, expected", [
        ("info", logging.INFO),
        ("WARN", logging.WARNING),
        (" error ", logging.ERROR),
        ("chatty", logging.INFO),
    ])
    def test_resolve_log_level(self, name, expected):
        assert resolve_log_level(name) == expected

    def test_requests_are_traced(self, client: TestClient, caplog):
        with caplog.at_level(logging.INFO, logger="shortlinks.http"):
            client.get("/health")

        assert "GET /health -> 200" in caplog.text

    def test_failed_requests_are_traced(self, app, caplog):
        """Test that an unhandled error still gets a trace line"""
        @app.get("/boom/now")
        async def boom():
            raise RuntimeError("kaput")

        with caplog.at_level(logging.INFO, logger="shortlinks.http"):
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.get("/boom/now")

        assert response.status_code == 500
        assert "GET /boom/now failed" in caplog.text


class TestUvicornLogLevel:
    """Test the level handed to uvicorn"""

    @pytest.mark.parametrize("name, expected", [
        ("info", "info"),
        ("warn", "warning"),
        ("WARNING", "warning"),
        ("Debug", "debug"),
        ("fatal", "critical"),
        ("chatty", "info"),
        ("notset", "info"),
    ])
    def test_names(self, name, expected):
        assert uvicorn_log_level(name) == expected

    @pytest.mark.parametrize("name", ["warn", "chatty"])
    def test_uvicorn_accepts_level(self, name):
        config = uvicorn.Config("main:app", log_level=uvicorn_log_level(name))
        assert config.log_level is not None

    @pytest.mark.parametrize("name, expected", [("warn", "warning"), ("chatty", "info")])
    def test_run_passes_resolved_level(self, monkeypatch, name, expected):
        calls = []
        settings = Settings(_env_file=None, bind_address="127.0.0.1:8081", log_level=name)
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

        main.run()

        assert calls == [{"host": "127.0.0.1", "port": 8081, "log_level": expected}]
