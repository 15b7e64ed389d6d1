"""Tests for the threaded log server and bootstrap wiring."""

import logging
import threading
from unittest.mock import patch

import httpx
import pytest

from logwire.config import ConfigurationError, Settings
from logwire.cors import CORS_HEADERS
from logwire.levels import Severity
from logwire.main import bootstrap
from logwire.server import LogServer, ServerStartError
from logwire.services.log_handler import RingBufferSink


def get(url: str) -> httpx.Response:
    return httpx.get(url, trust_env=False)


def make_server(port=0, level=Severity.TRACE, capacity=50):
    return LogServer(Settings(address="127.0.0.1", port=port, level=level, num_messages=capacity))


@pytest.fixture
def app_logger():
    logger = logging.getLogger("test-server")
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


class TestInitLogger:
    def test_registers_shared_sink(self, app_logger):
        server = make_server(level=Severity.WARN)
        server.init_logger(app_logger)
        assert server.sink in app_logger.handlers
        assert app_logger.level == logging.WARNING

        app_logger.info("dropped")
        app_logger.warning("kept")
        assert [e.message for e in server.sink.snapshot()] == ["kept"]

    def test_registering_twice_adds_one_handler(self, app_logger):
        server = make_server()
        server.init_logger(app_logger)
        server.init_logger(app_logger)
        assert app_logger.handlers.count(server.sink) == 1


class TestLiveServer:
    def test_serves_logs_over_http(self, app_logger):
        server = make_server()
        server.init_logger(app_logger)
        app_logger.debug("Debug")
        app_logger.error("Error")

        host, port = server.start_server()
        try:
            assert host == "127.0.0.1"
            assert port > 0
            assert server.running
            res = get(f"{server.url}/logs")
            assert res.status_code == 200
            assert [(i["level"], i["message"]) for i in res.json()] == [
                ("DEBUG", "Debug"),
                ("ERROR", "Error"),
            ]
            for name, value in CORS_HEADERS.items():
                assert res.headers[name] == value

            assert get(f"{server.url}/").text == "Logserver online"
        finally:
            server.stop()
        assert not server.running
        assert server.bound_address is None

    def test_fresh_server_returns_empty_list(self):
        server = make_server()
        server.start_server()
        try:
            res = get(f"{server.url}/logs")
            assert res.status_code == 200
            assert res.json() == []
        finally:
            server.stop()

    def test_start_does_not_block_writers(self, app_logger):
        server = make_server(capacity=1000)
        server.init_logger(app_logger)
        server.start_server()
        try:
            def worker(n: int) -> None:
                for i in range(100):
                    app_logger.info("w%d-%d", n, i)

            threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            assert len(get(f"{server.url}/logs").json()) == 400
        finally:
            server.stop()

    def test_bind_failure_is_reported(self):
        first = make_server()
        _, port = first.start_server()
        try:
            second = make_server(port=port)
            with pytest.raises(ServerStartError):
                second.start_server()
            assert not second.running
        finally:
            first.stop()

    def test_double_start_rejected(self):
        server = make_server()
        server.start_server()
        try:
            with pytest.raises(RuntimeError):
                server.start_server()
        finally:
            server.stop()

    def test_retry_after_start_timeout(self):
        server = make_server()
        abandoned = []

        def keep_running(self, timeout=5.0):
            abandoned.append(self._server)

        with patch.object(LogServer, "stop", autospec=True, side_effect=keep_running):
            with pytest.raises(ServerStartError, match="did not start"):
                server.start_server(timeout=-1)
        assert not server.running
        assert server.bound_address is None

        try:
            server.start_server()
            assert server.running
        finally:
            server.stop()
            abandoned[0].should_exit = True

    def test_stop_is_idempotent(self):
        server = make_server()
        server.stop()
        server.start_server()
        server.stop()
        server.stop()
        assert not server.running


class TestBootstrap:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in ("APP_ADDRESS", "APP_PORT", "APP_LEVEL", "APP_NUM_MESSAGES"):
            monkeypatch.delenv(key, raising=False)

    def test_bootstrap_from_file(self, tmp_path, app_logger):
        (tmp_path / "logwire.yaml").write_text(
            "address: 127.0.0.1\nport: 0\nlevel: info\nnum_messages: 5\n"
        )
        server = bootstrap(tmp_path, "logwire", logger=app_logger)
        try:
            for i in range(8):
                app_logger.info("line %d", i)
            app_logger.debug("too verbose")
            items = get(f"{server.url}/logs").json()
            assert [i["message"] for i in items] == ["line 3", "line 4", "line 5", "line 6", "line 7"]
        finally:
            server.stop()

    def test_bootstrap_fails_before_serving(self, tmp_path, app_logger):
        (tmp_path / "logwire.yaml").write_text("address: 127.0.0.1\nport: 0\n")
        with pytest.raises(ConfigurationError):
            bootstrap(tmp_path, "logwire.yaml", logger=app_logger)
        assert not any(isinstance(h, RingBufferSink) for h in app_logger.handlers)
