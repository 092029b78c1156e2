"""Device liveness probing via ``get-state``."""

from __future__ import annotations

import logging

from .config import PROBE_TIMEOUT_S, SessionConfig
from .interfaces import CommandExecutorInterface

logger = logging.getLogger(__name__)

ALIVE_MARKER = "device"


def output_says_alive(stdout: bytes) -> bool:
    """Return True if the trimmed ``get-state`` output ends with the marker.

    Only the suffix is checked because the output may be preceded by
    daemon start-up banners, e.g.::

        * daemon not running; starting now at tcp:5037
        * daemon started successfully
        device
    """
    text = stdout.decode("utf-8", errors="replace").strip()
    return text.endswith(ALIVE_MARKER)


class LivenessProber:
    """Asks the bridge tool whether the device connection is up."""

    def __init__(self, config: SessionConfig, executor: CommandExecutorInterface):
        self._config = config
        self._executor = executor

    def is_alive(self) -> bool:
        """May block up to one second. Never raises."""
        result = self._executor.run(self._config.bridge_command("get-state"), PROBE_TIMEOUT_S)
        if not result.success:
            logger.debug("get-state failed for %s: %s", self._config.device_id, result.message)
            return False
        return output_says_alive(result.stdout)
