"""Tests for result types and error tagging."""

import pytest

from bridge_session.interfaces import (
    BridgeError,
    BridgeTimeoutError,
    ErrorKind,
    ExecResult,
    HttpResult,
)


class TestExecResult:
    def test_success_defaults(self):
        result = ExecResult(stdout=b"hello\n", returncode=0)
        assert result.success
        assert result.reconnected is False
        assert result.raise_for_error() is result

    def test_text_replaces_bad_bytes(self):
        assert ExecResult(stdout=b"ok \xff").text() == "ok �"

    def test_raise_generic(self):
        result = ExecResult(error=ErrorKind.RECONNECT_FAILED, message="reconnect timeout")
        with pytest.raises(BridgeError) as excinfo:
            result.raise_for_error()
        assert excinfo.value.kind is ErrorKind.RECONNECT_FAILED
        assert not isinstance(excinfo.value, TimeoutError)

    def test_raise_timeout(self):
        result = ExecResult(error=ErrorKind.TIMEOUT, message="timed out")
        with pytest.raises(TimeoutError) as excinfo:
            result.raise_for_error()
        assert isinstance(excinfo.value, BridgeTimeoutError)
        assert excinfo.value.kind is ErrorKind.TIMEOUT


class TestHttpResult:
    def test_defaults_mean_no_response(self):
        result = HttpResult(error=ErrorKind.TRANSPORT_FAILED, message="refused")
        assert result.status_code == -1
        assert result.body == b""
        assert not result.success

    def test_non_2xx_is_success(self):
        result = HttpResult(status_code=404, body=b"not found")
        assert result.success
        assert result.raise_for_error() is result

    @pytest.mark.parametrize("kind", [
        ErrorKind.FORWARD_SETUP_FAILED,
        ErrorKind.UNSUPPORTED_METHOD,
        ErrorKind.BODY_READ_FAILED,
    ])
    def test_raise_carries_kind(self, kind):
        with pytest.raises(BridgeError) as excinfo:
            HttpResult(error=kind, message="x").raise_for_error()
        assert excinfo.value.kind is kind
