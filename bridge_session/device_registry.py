"""Device registry for named bridge sessions.

Stores per-device configuration under /tmp/bsctl-devices/.
Each device gets a directory with a session.info file containing
the session identity (bridge path, serial, ip, forward port).
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bridge_session.config import DEFAULT_FORWARD_PORT, DEFAULT_IP, SessionConfig

INFO_FILE = "session.info"


@dataclass(frozen=True)
class RegisteredDevice:
    name: str
    device_dir: str
    registered: str
    config: Optional[SessionConfig]


def _get_devices_dir() -> str:
    """Return the devices root directory.

    Uses BSCTL_RUN_DIR env var if set, otherwise /tmp.
    Implemented as a function (not module-level constant) so tests
    can monkeypatch BSCTL_RUN_DIR after import.
    """
    return os.path.join(os.environ.get("BSCTL_RUN_DIR", "/tmp"), "bsctl-devices")


def _parse_info_file(path: str) -> dict[str, str]:
    """Parse a session.info key=value file into a dict.

    Args:
        path: Absolute path to the session.info file.

    Returns:
        Dict mapping keys to values. Empty dict on read failure.
    """
    result: dict[str, str] = {}
    try:
        with open(path, "r") as f:
            for line in f:
                key_val = line.strip().split("=", 1)
                if len(key_val) != 2:
                    continue
                result[key_val[0]] = key_val[1]
    except IOError:
        pass
    return result


def _write_info_file(path: str, config: SessionConfig) -> None:
    with open(path, "w") as f:
        f.write(f"bridge={config.bridge_path}\n")
        f.write(f"serial={config.device_id}\n")
        f.write(f"ip={config.ip}\n")
        f.write(f"forward_port={config.forward_port}\n")
        f.write(f"registered={datetime.now().isoformat()}\n")


def _info_to_config(info: dict[str, str]) -> Optional[SessionConfig]:
    """Build a SessionConfig from parsed info, or None if it is unusable."""
    try:
        return SessionConfig(
            bridge_path=info.get("bridge", ""),
            device_id=info.get("serial", ""),
            ip=info.get("ip", DEFAULT_IP),
            forward_port=info.get("forward_port", DEFAULT_FORWARD_PORT),
        )
    except ValueError:
        return None


def _device_dir(name: str) -> str:
    """Return the directory for ``name``, rejecting names that escape the registry."""
    if name in ("", ".", "..") or os.sep in name or (os.altsep and os.altsep in name):
        raise ValueError(f"invalid device name: {name!r}")
    return os.path.join(_get_devices_dir(), name)


def register_device(name: str, config: SessionConfig) -> str:
    """Register a device, overwriting any previous entry of the same name.

    Returns:
        Path to the device directory.
    """
    device_dir = _device_dir(name)
    os.makedirs(device_dir, exist_ok=True)
    _write_info_file(os.path.join(device_dir, INFO_FILE), config)
    return device_dir


def load_device(name: str) -> Optional[SessionConfig]:
    """Return the stored config for ``name``, or None if missing or corrupt."""
    info_file = os.path.join(_device_dir(name), INFO_FILE)
    if not os.path.isfile(info_file):
        return None
    return _info_to_config(_parse_info_file(info_file))


def list_devices() -> list[RegisteredDevice]:
    """Scan the devices directory for all registered devices."""
    devices_dir = _get_devices_dir()
    devices: list[RegisteredDevice] = []
    if not os.path.isdir(devices_dir):
        return devices

    for name in sorted(os.listdir(devices_dir)):
        device_dir = os.path.join(devices_dir, name)
        info_file = os.path.join(device_dir, INFO_FILE)
        if not os.path.isfile(info_file):
            continue
        info = _parse_info_file(info_file)
        devices.append(RegisteredDevice(
            name=name,
            device_dir=device_dir,
            registered=info.get("registered", ""),
            config=_info_to_config(info),
        ))
    return devices


def unregister_device(name: str) -> bool:
    """Remove a device directory.

    Returns:
        True if removed, False if the device was not registered.
    """
    device_dir = _device_dir(name)
    if not os.path.isdir(device_dir):
        return False
    shutil.rmtree(device_dir, ignore_errors=True)
    return True
