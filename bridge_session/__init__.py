"""
Bridge Session

Serialized, self-reconnecting command execution and HTTP port forwarding
for a device reachable through a command-line bridge tool (adb and similar).
"""

from .interfaces import (
    ErrorKind,
    ExecResult,
    HttpResult,
    BridgeError,
    BridgeTimeoutError,
    CommandExecutorInterface,
    ClockInterface,
)

from .config import SessionConfig, default_bridge_path
from .implementations import SubprocessExecutor, RealClock
from .liveness import LivenessProber, ALIVE_MARKER
from .reconnection import Reconnector, ReconnectResult, ReconnectState
from .http_forward import HttpForwardTunnel, HttpMethod
from .session import DeviceSession

__all__ = [
    "ErrorKind",
    "ExecResult",
    "HttpResult",
    "BridgeError",
    "BridgeTimeoutError",
    "CommandExecutorInterface",
    "ClockInterface",
    "SessionConfig",
    "default_bridge_path",
    "SubprocessExecutor",
    "RealClock",
    "LivenessProber",
    "ALIVE_MARKER",
    "Reconnector",
    "ReconnectResult",
    "ReconnectState",
    "HttpForwardTunnel",
    "HttpMethod",
    "DeviceSession",
]
