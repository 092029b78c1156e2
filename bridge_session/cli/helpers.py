"""Shared utilities for bsctl CLI commands."""

from __future__ import annotations

import json
from typing import Any, Optional

from bridge_session.config import (
    DEFAULT_FORWARD_PORT,
    DEFAULT_IP,
    SessionConfig,
    default_bridge_path,
)
from bridge_session.device_registry import load_device


def _print(obj: Any, *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(obj, indent=2, sort_keys=True))
    else:
        if isinstance(obj, str):
            print(obj)
        else:
            print(json.dumps(obj, indent=2, sort_keys=True))


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _resolve_config(
    *,
    device: Optional[str],
    bridge: Optional[str],
    serial: Optional[str],
    ip: Optional[str],
    forward_port: Optional[str],
) -> SessionConfig:
    """Resolve the session config.

    Priority per field:
    1. Explicit flag (--bridge, --serial, --ip, --forward-port)
    2. Registered --device entry
    3. Defaults (BSCTL_BRIDGE / adb on PATH, 127.0.0.1, 8080)

    Raises:
        ValueError: unknown --device, or no serial from any source.
    """
    base: Optional[SessionConfig] = None
    if device:
        base = load_device(device)
        if base is None:
            raise ValueError(f"device not registered: {device}")

    serial = serial or (base.device_id if base else None)
    if not serial:
        raise ValueError("no device serial (use --serial or --device)")

    return SessionConfig(
        bridge_path=bridge or (base.bridge_path if base else default_bridge_path()),
        device_id=serial,
        ip=ip or (base.ip if base else DEFAULT_IP),
        forward_port=forward_port or (base.forward_port if base else DEFAULT_FORWARD_PORT),
    )
