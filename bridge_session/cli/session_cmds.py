"""Device commands for bsctl: exec, state, reconnect, http."""

from __future__ import annotations

from typing import Optional

from bridge_session.cli.helpers import _decode, _print
from bridge_session.session import DeviceSession


def cmd_exec(session: DeviceSession, *, command: str, timeout_s: float, json_mode: bool) -> int:
    result = session.execute(command, timeout_s)
    payload = {
        "device": session.config.device_id,
        "command": command,
        "stdout": _decode(result.stdout),
        "stderr": _decode(result.stderr),
        "returncode": result.returncode,
        "reconnected": result.reconnected,
        "error": result.error.value if result.error else None,
        "message": result.message or None,
    }
    if json_mode:
        _print(payload, json_mode=True)
    else:
        if result.stdout:
            print(_decode(result.stdout), end="")
        if result.stderr:
            print(f"[stderr] {_decode(result.stderr)}", end="")
        if result.reconnected:
            print("[reconnected]")
        if result.error:
            print(f"error ({result.error.value}): {result.message}")
    return 0 if result.success else 1


def cmd_state(session: DeviceSession, *, json_mode: bool) -> int:
    alive = session.is_alive()
    _print(
        {"device": session.config.device_id, "alive": alive}
        if json_mode else f"{session.config.device_id}: {'alive' if alive else 'not alive'}",
        json_mode=json_mode,
    )
    return 0 if alive else 1


def cmd_reconnect(session: DeviceSession, *, json_mode: bool) -> int:
    outcome = session.reconnect()
    _print(
        {
            "device": session.config.device_id,
            "connected": outcome.connected,
            "state": outcome.state.value,
            "polls": outcome.polls,
            "reason": outcome.reason or None,
            "directive_error": outcome.directive_error,
        },
        json_mode=json_mode,
    )
    return 0 if outcome.connected else 1


def cmd_http(
    session: DeviceSession,
    *,
    guest_port: str,
    method: str,
    path: str,
    data: Optional[str],
    timeout_s: float,
    json_mode: bool,
) -> int:
    body = data.encode("utf-8") if data is not None else None
    result = session.http_forward(guest_port, method, path, body, timeout_s)
    if json_mode:
        _print(
            {
                "status_code": result.status_code,
                "body": _decode(result.body),
                "error": result.error.value if result.error else None,
                "message": result.message or None,
            },
            json_mode=True,
        )
    elif result.error:
        print(f"error ({result.error.value}): {result.message}")
    else:
        print(f"HTTP {result.status_code}")
        print(_decode(result.body))
    return 0 if result.success else 1
