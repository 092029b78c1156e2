"""
Interfaces for the Bridge Session library

Abstract base classes and result types shared by every component.
This enables dependency injection and mock-based testing without a device.
"""

from abc import ABC, abstractmethod
from typing import Optional
from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Failure kinds carried on result objects."""
    TIMEOUT = "timeout"
    COMMAND_FAILED = "command_failed"
    RECONNECT_FAILED = "reconnect_failed"
    FORWARD_SETUP_FAILED = "forward_setup_failed"
    UNSUPPORTED_METHOD = "unsupported_method"
    TRANSPORT_FAILED = "transport_failed"
    BODY_READ_FAILED = "body_read_failed"


class BridgeError(Exception):
    """Raised by ``raise_for_error()`` on a failed result."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class BridgeTimeoutError(BridgeError, TimeoutError):
    """A command or HTTP call exceeded its bound."""


def _raise(kind: Optional[ErrorKind], message: str) -> None:
    if kind is None:
        return
    if kind is ErrorKind.TIMEOUT:
        raise BridgeTimeoutError(kind, message)
    raise BridgeError(kind, message)


@dataclass(frozen=True)
class ExecResult:
    """Outcome of one bridge-tool invocation."""
    stdout: bytes = b""
    stderr: bytes = b""
    error: Optional[ErrorKind] = None
    message: str = ""
    returncode: Optional[int] = None
    reconnected: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    def text(self) -> str:
        """Decode stdout as UTF-8, replacing undecodable bytes."""
        return self.stdout.decode("utf-8", errors="replace")

    def raise_for_error(self) -> "ExecResult":
        _raise(self.error, self.message)
        return self


@dataclass(frozen=True)
class HttpResult:
    """Outcome of one forward-then-request sequence.

    ``status_code`` is -1 when no HTTP response was received.
    """
    status_code: int = -1
    body: bytes = b""
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "HttpResult":
        _raise(self.error, self.message)
        return self


class CommandExecutorInterface(ABC):
    """
    Abstract interface for running a command line with a timeout.

    Implementations:
    - SubprocessExecutor: Spawns the real bridge tool
    - MockExecutor: Scripted responses for unit testing
    """

    @abstractmethod
    def run(self, command_line: str, timeout_s: float = 0) -> ExecResult:
        """Run command_line, waiting at most timeout_s (<= 0 means forever).

        Never raises for process failures; the outcome is tagged on the
        result as COMMAND_FAILED or TIMEOUT.
        """
        pass


class ClockInterface(ABC):
    """
    Abstract interface for sleeping.

    Allows tests to skip the reconnect polling delays.
    """

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        pass

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic timestamp in seconds."""
        pass
