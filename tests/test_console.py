"""
Unit tests for utils/console.py

Tests cover:
- parse_verbose_level
- Rendering request/response/error events at each verbose level
- API key redaction in rendered output
- attach/detach on an EventEmitter
"""

import pytest

from utils.console import Console, VerboseLevel, parse_verbose_level
from utils.events import EventEmitter

RAW_KEY = "sk_live_1234567890abcdef"


@pytest.fixture
def plain_console(monkeypatch):
    """A Console with colors off and LIGHT verbosity."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("PRODUCT_API_VERBOSE", raising=False)
    return Console()


def _request_event(**overrides):
    event = {
        "timestamp": "2026-01-01T00:00:00+00:00",
        "method": "GET",
        "url": "https://api.test/admin/v2/products?limit=50",
        "headers": {"X-Api-Key": "sk_live_...cdef", "Content-Type": "application/json"},
        "params": {"limit": 50},
    }
    event.update(overrides)
    return event


# =============================================================================
# Verbose Level Tests
# =============================================================================


class TestParseVerboseLevel:
    """Test parse_verbose_level."""

    @pytest.mark.parametrize("value,expected", [
        ("off", VerboseLevel.OFF),
        ("0", VerboseLevel.OFF),
        ("light", VerboseLevel.LIGHT),
        ("ON", VerboseLevel.LIGHT),
        ("deep", VerboseLevel.DEEP),
        (" full ", VerboseLevel.DEEP),
        (2, VerboseLevel.DEEP),
        (7, VerboseLevel.DEEP),
        (-1, VerboseLevel.OFF),
        (VerboseLevel.LIGHT, VerboseLevel.LIGHT),
        ("garbage", VerboseLevel.OFF),
    ])
    def test_values(self, value, expected):
        assert parse_verbose_level(value) == expected

    def test_default_from_env(self, monkeypatch):
        monkeypatch.setenv("PRODUCT_API_VERBOSE", "deep")
        assert Console().get_verbose() == VerboseLevel.DEEP

    def test_default_is_light(self, plain_console):
        assert plain_console.get_verbose() == VerboseLevel.LIGHT


# =============================================================================
# Rendering Tests
# =============================================================================


class TestRendering:
    """Test log event rendering on stderr."""

    def test_off_prints_nothing(self, plain_console, capsys):
        plain_console.set_verbose("off")
        plain_console.request_log(_request_event())
        plain_console.response_log({"status": 200, "duration_ms": 5, "size_bytes": 10, "data": {}})
        plain_console.error_log({"kind": "network", "status": None, "duration_ms": 5, "message": "x"})
        assert capsys.readouterr().err == ""

    def test_light_request_line(self, plain_console, capsys):
        plain_console.request_log(_request_event())
        err = capsys.readouterr().err
        assert "[request] GET https://api.test/admin/v2/products?limit=50" in err
        assert "X-Api-Key" not in err

    def test_light_response_line(self, plain_console, capsys):
        plain_console.response_log({"status": 200, "duration_ms": 42, "size_bytes": 2048, "data": {}})
        assert "[response] 200 in 42ms (2.00 KB)" in capsys.readouterr().err

    def test_light_error_line_with_status(self, plain_console, capsys):
        plain_console.error_log({"kind": "server", "status": 404, "duration_ms": 8, "message": "Product not found"})
        assert "[error] server 404 in 8ms: Product not found" in capsys.readouterr().err

    def test_light_error_line_without_status(self, plain_console, capsys):
        plain_console.error_log({"kind": "network", "status": None, "duration_ms": 30000, "message": "timed out"})
        assert "[error] network in 30000ms: timed out" in capsys.readouterr().err

    def test_deep_request_block(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.request_log(_request_event(body={"name": "Widget"}))
        err = capsys.readouterr().err
        assert "========== Request Log ==========" in err
        assert "--- Request Headers ---" in err
        assert '"X-Api-Key": "sk_live_...cdef"' in err
        assert "--- Query Parameters ---" in err
        assert "--- Request Body ---" in err
        assert '"name": "Widget"' in err

    def test_deep_request_block_without_body_or_params(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        event = _request_event()
        del event["params"]
        plain_console.request_log(event)
        err = capsys.readouterr().err
        assert "--- Query Parameters ---" not in err
        assert "--- Request Body ---" not in err

    def test_deep_redacts_raw_key(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.request_log(_request_event(headers={"X-Api-Key": RAW_KEY}))
        err = capsys.readouterr().err
        assert RAW_KEY not in err
        assert "sk_live_...cdef" in err

    def test_deep_response_block(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.response_log({
            "timestamp": "t", "status": 200, "duration_ms": 12, "size_bytes": 512,
            "data": {"count": 1},
        })
        err = capsys.readouterr().err
        assert "========== Response Log ==========" in err
        assert "Response Time: 12ms" in err
        assert "Status Code: 200" in err
        assert "Response Size: 0.50 KB" in err
        assert '"count": 1' in err

    def test_deep_server_error_block(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.error_log({
            "timestamp": "t", "kind": "server", "status": 500, "duration_ms": 3,
            "error": {"message": "boom"}, "message": "boom",
        })
        err = capsys.readouterr().err
        assert "Request Failed after 3ms" in err
        assert "Status Code: 500" in err
        assert "--- Error Response ---" in err

    def test_deep_network_error_block(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.error_log({
            "timestamp": "t", "kind": "network", "status": None, "duration_ms": 3,
            "error": "No response received", "message": "Connection refused",
        })
        err = capsys.readouterr().err
        assert "No response received from server" in err
        assert "Error: Connection refused" in err

    def test_deep_setup_error_block(self, plain_console, capsys):
        plain_console.set_verbose("deep")
        plain_console.error_log({
            "timestamp": "t", "kind": "setup", "status": None, "duration_ms": 0,
            "error": "Request setup error", "message": "Object of type object is not JSON serializable",
        })
        assert "Request setup error: Object of type object" in capsys.readouterr().err

    def test_colors_applied_when_forced(self, monkeypatch, capsys):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("PRODUCT_API_NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")
        Console().error("bad")
        assert "\033[" in capsys.readouterr().err


# =============================================================================
# Attach Tests
# =============================================================================


class TestAttach:
    """Test subscribing the console to an emitter."""

    def test_attach_renders_events(self, plain_console, capsys):
        emitter = EventEmitter()
        plain_console.attach(emitter)
        emitter.emit("request_log", _request_event())
        emitter.emit("response_log", {"status": 200, "duration_ms": 1, "size_bytes": 0, "data": None})
        err = capsys.readouterr().err
        assert "[request]" in err
        assert "[response]" in err

    def test_detach(self, plain_console, capsys):
        emitter = EventEmitter()
        plain_console.attach(emitter)
        plain_console.detach(emitter)
        emitter.emit("request_log", _request_event())
        assert capsys.readouterr().err == ""
