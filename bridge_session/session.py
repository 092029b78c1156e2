"""Serialized command execution against one bridge-attached device.

``DeviceSession`` holds the command lock for every bridge-tool invocation,
so at most one command runs against the device at a time. Its
``HttpForwardTunnel`` holds a separate forward lock for each whole
forward-then-request HTTP sequence.

The forward lock is always taken before the command lock, never after.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from .config import SessionConfig
from .http_forward import HttpClient, HttpForwardTunnel, HttpMethod
from .implementations import RealClock, SubprocessExecutor
from .interfaces import (
    ClockInterface,
    CommandExecutorInterface,
    ErrorKind,
    ExecResult,
    HttpResult,
)
from .liveness import LivenessProber
from .reconnection import ReconnectResult, Reconnector

logger = logging.getLogger(__name__)


class DeviceSession:
    """A single logical connection to one device through the bridge tool."""

    def __init__(
        self,
        config: SessionConfig,
        executor: Optional[CommandExecutorInterface] = None,
        clock: Optional[ClockInterface] = None,
        http: Optional[HttpClient] = None,
    ):
        self.config = config
        self._executor = executor or SubprocessExecutor()
        self._clock = clock or RealClock()
        self._command_lock = threading.Lock()
        self._prober = LivenessProber(config, self._executor)
        self._reconnector = Reconnector(config, self._executor, self._prober, self._clock)
        self._tunnel = HttpForwardTunnel(self, http=http)

    def execute(self, command: str, timeout_s: float = 0) -> ExecResult:
        """Run ``<bridge> -s <device> <command>`` serially.

        The device is probed first and reconnected once if it is not alive.
        ``timeout_s`` bounds only the command itself; <= 0 waits forever.
        The result's ``reconnected`` flag is True whenever a reconnect was
        attempted. May block 0~6.5s + timeout_s.
        """
        with self._command_lock:
            reconnected = False
            if not self._prober.is_alive():
                logger.warning("%s is not alive, reconnecting", self.config.device_id)
                reconnected = True
                outcome = self._reconnector.reconnect()
                if not outcome.connected:
                    return ExecResult(
                        error=ErrorKind.RECONNECT_FAILED,
                        message=f"device is not alive and reconnect failed: {outcome.reason}",
                        reconnected=True,
                    )

            result = self._executor.run(self.config.bridge_command(command), timeout_s)
            return ExecResult(
                stdout=result.stdout,
                stderr=result.stderr,
                error=result.error,
                message=result.message,
                returncode=result.returncode,
                reconnected=reconnected,
            )

    def is_alive(self) -> bool:
        with self._command_lock:
            return self._prober.is_alive()

    def reconnect(self) -> ReconnectResult:
        """Run one reconnect cycle regardless of the current state."""
        with self._command_lock:
            return self._reconnector.reconnect()

    def http_forward(
        self,
        guest_port: Union[str, int],
        method: Union[str, HttpMethod],
        path: str,
        body: Optional[bytes] = None,
        timeout_s: float = 0,
    ) -> HttpResult:
        """Forward to ``guest_port`` and issue one GET or POST through it."""
        return self._tunnel.forward_and_request(guest_port, method, path, body, timeout_s)
