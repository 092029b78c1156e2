"""Device registry commands for bsctl: devices, device add, device remove."""

from __future__ import annotations

from bridge_session.cli.helpers import _print
from bridge_session.config import SessionConfig
from bridge_session.device_registry import list_devices, register_device, unregister_device


def cmd_devices(*, json_mode: bool) -> int:
    devices = list_devices()
    rows = []
    for d in devices:
        c = d.config
        rows.append({
            "name": d.name,
            "serial": c.device_id if c else None,
            "bridge": c.bridge_path if c else None,
            "ip": c.ip if c else None,
            "forward_port": c.forward_port if c else None,
            "registered": d.registered,
            "valid": c is not None,
        })
    if json_mode:
        _print({"devices": rows}, json_mode=True)
        return 0
    if not rows:
        print("No devices registered (use bsctl device add)")
        return 0
    for r in rows:
        if r["valid"]:
            print(f"{r['name']}: {r['serial']} via {r['bridge']} ({r['ip']}:{r['forward_port']})")
        else:
            print(f"{r['name']}: <invalid session.info>")
    return 0


def cmd_device_add(*, name: str, config: SessionConfig, json_mode: bool) -> int:
    try:
        device_dir = register_device(name, config)
    except ValueError as e:
        _print({"error": str(e)}, json_mode=json_mode)
        return 2
    _print(
        {"registered": name, "device_dir": device_dir, "serial": config.device_id},
        json_mode=json_mode,
    )
    return 0


def cmd_device_remove(*, name: str, json_mode: bool) -> int:
    try:
        removed = unregister_device(name)
    except ValueError as e:
        _print({"error": str(e)}, json_mode=json_mode)
        return 2
    if not removed:
        _print({"error": f"device not registered: {name}"}, json_mode=json_mode)
        return 1
    _print({"removed": name}, json_mode=json_mode)
    return 0
