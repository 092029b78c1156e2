"""
Tests for the bounded reconnect state machine.

DIRECTIVE -> POLL_1 -> POLL_2 -> POLL_3 -> FAILED, CONNECTED from any poll.
"""

import time

import pytest

from bridge_session.implementations import RealClock
from bridge_session.interfaces import ErrorKind, ExecResult
from bridge_session.liveness import LivenessProber
from bridge_session.reconnection import ReconnectState, Reconnector


@pytest.fixture
def reconnector(config, executor, clock):
    return Reconnector(config, executor, LivenessProber(config, executor), clock)


class TestReconnector:
    def test_connected_on_first_poll(self, reconnector, executor, clock):
        executor.set_alive(True)

        result = reconnector.reconnect()

        assert result.connected is True
        assert result.state is ReconnectState.CONNECTED
        assert result.polls == 1
        assert result.directive_error is None
        assert clock.get_sleep_calls() == [0.5]

    def test_connected_on_last_poll(self, reconnector, executor, clock):
        executor.set_alive(False, False, True)

        result = reconnector.reconnect()

        assert result.connected is True
        assert result.polls == 3
        assert clock.get_sleep_calls() == [0.5, 0.5, 0.5]

    def test_fails_after_three_polls(self, reconnector, executor, clock):
        executor.set_alive(False)

        result = reconnector.reconnect()

        assert result.connected is False
        assert result.state is ReconnectState.FAILED
        assert result.polls == 3
        assert result.reason == "reconnect timeout"
        assert len(executor.get_calls("get-state")) == 3
        assert clock.get_sleep_calls() == [0.5, 0.5, 0.5]

    def test_directive_is_issued_first_with_one_second_bound(self, reconnector, executor):
        executor.set_alive(True)

        reconnector.reconnect()

        first = executor.get_calls()[0]
        assert first.command_line == "adb -s emulator-5554 reconnect"
        assert first.timeout_s == 1.0

    def test_directive_error_does_not_abort(self, reconnector, executor):
        executor.set_response(
            "reconnect",
            ExecResult(
                stderr=b"error: no devices/emulators found\n",
                error=ErrorKind.COMMAND_FAILED,
                message="exit status 1",
                returncode=1,
            ),
        )
        executor.set_alive(False, True)

        result = reconnector.reconnect()

        assert result.connected is True
        assert result.polls == 2
        assert result.directive_error == "exit status 1"

    def test_directive_timeout_fails_without_polling(self, reconnector, executor, clock):
        executor.set_response("reconnect", ExecResult(error=ErrorKind.TIMEOUT, message="timed out"))

        result = reconnector.reconnect()

        assert result.connected is False
        assert result.state is ReconnectState.FAILED
        assert result.polls == 0
        assert result.reason == "reconnect directive timed out"
        assert executor.get_calls("get-state") == []
        assert clock.get_sleep_calls() == []

    def test_hung_probes_stay_within_time_bound(self, config, executor):
        executor.set_hang("get-state")
        reconnector = Reconnector(config, executor, LivenessProber(config, executor), RealClock())

        start = time.monotonic()
        result = reconnector.reconnect()
        elapsed = time.monotonic() - start

        assert result.connected is False
        assert 2.5 <= elapsed <= 6.0
