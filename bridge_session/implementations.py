"""
Real implementations of interfaces for production use.

These classes wrap actual system resources (processes, wall clock)
and implement the abstract interfaces.
"""

import logging
import shlex
import subprocess
import time

from .interfaces import ClockInterface, CommandExecutorInterface, ErrorKind, ExecResult

logger = logging.getLogger(__name__)


class SubprocessExecutor(CommandExecutorInterface):
    """
    Runs a command line as a child process and captures both streams.
    """

    def run(self, command_line: str, timeout_s: float = 0) -> ExecResult:
        try:
            argv = shlex.split(command_line)
        except ValueError as e:
            return ExecResult(error=ErrorKind.COMMAND_FAILED, message=f"bad command line: {e}")
        if not argv:
            return ExecResult(error=ErrorKind.COMMAND_FAILED, message="empty command line")

        timeout = timeout_s if timeout_s > 0 else None
        logger.debug("run %s (timeout=%s)", argv, timeout)
        try:
            proc = subprocess.run(argv, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            return ExecResult(
                stdout=e.stdout or b"",
                stderr=e.stderr or b"",
                error=ErrorKind.TIMEOUT,
                message=f"command timed out after {timeout_s}s: {command_line}",
            )
        except OSError as e:
            return ExecResult(error=ErrorKind.COMMAND_FAILED, message=str(e))

        if proc.returncode != 0:
            return ExecResult(
                stdout=proc.stdout,
                stderr=proc.stderr,
                error=ErrorKind.COMMAND_FAILED,
                message=f"exit status {proc.returncode}",
                returncode=proc.returncode,
            )
        return ExecResult(stdout=proc.stdout, stderr=proc.stderr, returncode=0)


class RealClock(ClockInterface):
    """
    Real clock implementation using the time module.
    """

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def monotonic(self) -> float:
        return time.monotonic()
