"""
Mock implementations for testing.

These classes implement the abstract interfaces with in-memory behavior
suitable for unit testing without a device or bridge tool.
"""

import shlex
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Union

from .interfaces import ClockInterface, CommandExecutorInterface, ErrorKind, ExecResult


@dataclass
class MockCall:
    """One recorded executor invocation."""
    command_line: str
    subcommand: str
    timeout_s: float
    started: float
    finished: float = 0.0


def _subcommand(command_line: str) -> str:
    argv = shlex.split(command_line)
    if len(argv) >= 3 and argv[1] == "-s":
        return " ".join(argv[3:])
    return " ".join(argv)


class MockExecutor(CommandExecutorInterface):
    """
    Scripted bridge tool.

    Responses are keyed by the full subcommand (``forward tcp:1 tcp:2``) or
    its first word (``get-state``, ``reconnect``, ``shell``). Each key holds a
    queue; the last queued result keeps being returned once the rest are used.
    Unscripted commands succeed with empty output. ``get-state`` answers
    ``device`` until told otherwise.
    """

    def __init__(self):
        self._responses: Dict[str, Deque[ExecResult]] = {}
        self._delays: Dict[str, float] = {}
        self._hangs: set = set()
        self._calls: List[MockCall] = []
        self._lock = threading.Lock()
        self.set_alive(True)

    def run(self, command_line: str, timeout_s: float = 0) -> ExecResult:
        sub = _subcommand(command_line)
        key = self._key_for(sub)
        call = MockCall(command_line, sub, timeout_s, started=time.monotonic())
        with self._lock:
            self._calls.append(call)

        if key in self._hangs:
            if timeout_s > 0:
                time.sleep(timeout_s)
            call.finished = time.monotonic()
            return ExecResult(error=ErrorKind.TIMEOUT, message=f"command timed out: {sub}")

        delay = self._delays.get(key, 0.0)
        if delay:
            time.sleep(delay)

        with self._lock:
            queue = self._responses.get(key)
            if queue:
                result = queue.popleft() if len(queue) > 1 else queue[0]
            else:
                result = ExecResult(returncode=0)
        call.finished = time.monotonic()
        return result

    def _key_for(self, sub: str) -> str:
        if sub in self._responses or sub in self._delays or sub in self._hangs:
            return sub
        return sub.split(" ", 1)[0] if sub else sub

    # Test helper methods

    def set_response(self, key: str, *results: Union[ExecResult, str]) -> None:
        """Queue results for a subcommand. Strings become successful stdout."""
        queue: Deque[ExecResult] = deque()
        for r in results:
            if isinstance(r, str):
                r = ExecResult(stdout=r.encode(), returncode=0)
            queue.append(r)
        with self._lock:
            self._responses[key] = queue

    def set_alive(self, *states: bool) -> None:
        """Script consecutive ``get-state`` answers."""
        self.set_response(
            "get-state",
            *[
                ExecResult(stdout=b"device\n", returncode=0) if s
                else ExecResult(
                    stderr=b"error: device 'emulator-5554' not found\n",
                    error=ErrorKind.COMMAND_FAILED,
                    message="exit status 1",
                    returncode=1,
                )
                for s in states
            ],
        )

    def set_delay(self, key: str, seconds: float) -> None:
        """Make a subcommand take real time before answering."""
        self._delays[key] = seconds

    def set_hang(self, key: str) -> None:
        """Make a subcommand block until its timeout and report TIMEOUT."""
        self._hangs.add(key)

    def get_calls(self, key: Optional[str] = None) -> List[MockCall]:
        with self._lock:
            calls = list(self._calls)
        if key is None:
            return calls
        return [c for c in calls if c.subcommand == key or c.subcommand.split(" ", 1)[0] == key]

    def get_subcommands(self) -> List[str]:
        return [c.subcommand for c in self.get_calls()]

    def overlapping(self) -> bool:
        """True if any two recorded invocations ran at the same time."""
        calls = sorted(self.get_calls(), key=lambda c: c.started)
        for prev, cur in zip(calls, calls[1:]):
            if cur.started < prev.finished:
                return True
        return False

    def clear_calls(self) -> None:
        with self._lock:
            self._calls.clear()


class MockClock(ClockInterface):
    """
    Controllable clock for testing.

    Sleeps are recorded and advance virtual time without blocking.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._sleep_calls: List[float] = []

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        self._now += seconds

    def monotonic(self) -> float:
        return self._now

    # Test helper methods

    def get_sleep_calls(self) -> List[float]:
        """Get list of all sleep() call durations."""
        return self._sleep_calls.copy()
