"""
Reconnector for a bridge-attached device.

Issues a ``reconnect`` directive and then polls liveness on a fixed,
bounded schedule:

    DIRECTIVE -> POLL_1 -> POLL_2 -> POLL_3 -> FAILED

Any POLL_n whose probe reports alive moves to CONNECTED.

Worst case: 1s directive + 3 x (0.5s sleep + 1s probe) = 5.5s.
There is no backoff and the poll count is not configurable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import DIRECTIVE_TIMEOUT_S, POLL_INTERVAL_S, SessionConfig
from .interfaces import ClockInterface, CommandExecutorInterface, ErrorKind
from .liveness import LivenessProber

logger = logging.getLogger(__name__)


class ReconnectState(Enum):
    """States of one reconnect cycle."""
    DIRECTIVE = "directive"
    POLL_1 = "poll_1"
    POLL_2 = "poll_2"
    POLL_3 = "poll_3"
    CONNECTED = "connected"
    FAILED = "failed"


# Where each poll state goes when the device is still not alive.
_NEXT_POLL = {
    ReconnectState.POLL_1: ReconnectState.POLL_2,
    ReconnectState.POLL_2: ReconnectState.POLL_3,
    ReconnectState.POLL_3: ReconnectState.FAILED,
}

_TERMINAL = (ReconnectState.CONNECTED, ReconnectState.FAILED)


@dataclass(frozen=True)
class ReconnectResult:
    connected: bool
    state: ReconnectState
    polls: int = 0
    reason: str = ""
    directive_error: Optional[str] = None


class Reconnector:
    """
    Runs one bounded reconnect cycle.

    The directive's exit status is unreliable (the tool usually prints
    errors on stderr and still exits 0, or vice versa), so a non-timeout
    directive failure is only recorded; polling decides the outcome.
    """

    def __init__(
        self,
        config: SessionConfig,
        executor: CommandExecutorInterface,
        prober: LivenessProber,
        clock: ClockInterface,
    ):
        self._config = config
        self._executor = executor
        self._prober = prober
        self._clock = clock

    def reconnect(self) -> ReconnectResult:
        state = ReconnectState.DIRECTIVE
        polls = 0
        directive_error: Optional[str] = None
        reason = ""

        while state not in _TERMINAL:
            logger.debug("%s: reconnect state %s", self._config.device_id, state.value)
            if state is ReconnectState.DIRECTIVE:
                result = self._executor.run(
                    self._config.bridge_command("reconnect"), DIRECTIVE_TIMEOUT_S
                )
                if result.error is ErrorKind.TIMEOUT:
                    reason = "reconnect directive timed out"
                    state = ReconnectState.FAILED
                    continue
                if not result.success:
                    directive_error = result.message or "reconnect directive failed"
                    logger.warning(
                        "%s: reconnect directive reported an error: %s",
                        self._config.device_id, directive_error,
                    )
                state = ReconnectState.POLL_1
                continue

            self._clock.sleep(POLL_INTERVAL_S)
            polls += 1
            if self._prober.is_alive():
                state = ReconnectState.CONNECTED
            else:
                state = _NEXT_POLL[state]
                if state is ReconnectState.FAILED:
                    reason = "reconnect timeout"

        connected = state is ReconnectState.CONNECTED
        if connected:
            logger.info("%s: reconnected after %d poll(s)", self._config.device_id, polls)
        else:
            logger.warning("%s: reconnect failed: %s", self._config.device_id, reason)
        return ReconnectResult(
            connected=connected,
            state=state,
            polls=polls,
            reason=reason,
            directive_error=directive_error,
        )
