"""Session configuration and bridge-tool discovery."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass

DEFAULT_IP = "127.0.0.1"
DEFAULT_FORWARD_PORT = "8080"

# Fixed bounds for the bridge-tool housekeeping commands.
PROBE_TIMEOUT_S = 1.0
DIRECTIVE_TIMEOUT_S = 1.0
FORWARD_TIMEOUT_S = 1.0
POLL_INTERVAL_S = 0.5
POLL_ATTEMPTS = 3


def default_bridge_path() -> str:
    """Locate the bridge executable.

    Uses BSCTL_BRIDGE if set, then ``adb`` on PATH, then the bare name.
    """
    env = os.environ.get("BSCTL_BRIDGE")
    if env:
        return env
    return shutil.which("adb") or "adb"


@dataclass(frozen=True)
class SessionConfig:
    """Immutable identity of one device session.

    - bridge_path: e.g. /opt/android-sdk/platform-tools/adb
    - device_id: e.g. emulator-5554
    - ip: address the forwarded port is reachable on, usually 127.0.0.1
    - forward_port: host side of ``forward tcp:<host> tcp:<guest>``.
      A device has a single forwarding slot; set any value if HTTP is unused.
    """
    bridge_path: str
    device_id: str
    ip: str = DEFAULT_IP
    forward_port: str = DEFAULT_FORWARD_PORT

    def __post_init__(self) -> None:
        if not self.bridge_path:
            raise ValueError("bridge_path must not be empty")
        if not self.device_id:
            raise ValueError("device_id must not be empty")
        if not str(self.forward_port).isdigit():
            raise ValueError(f"forward_port must be numeric, got {self.forward_port!r}")
        object.__setattr__(self, "forward_port", str(self.forward_port))

    def bridge_command(self, subcommand: str) -> str:
        """Build ``<bridge> -s <device> <subcommand>``."""
        return f"{self.bridge_path} -s {self.device_id} {subcommand}"
