"""
bsctl: Agent-friendly CLI for Bridge Session.

Design goals:
- Tiny, stable surface area for scripts and LLM agents
- Optional JSON output for reliable parsing
- One device per invocation, selected by --device (registry) or --serial

Main commands:
- exec: Run a bridge command serially (reconnecting once if needed)
- state: Probe device liveness
- reconnect: Run one reconnect cycle
- http: Forward a port and issue one GET/POST into the device
- devices / device add / device remove: Manage the device registry

Entry points:
- bsctl: Main CLI entry point (installed via pip)
- python -m bridge_session.cli
- Can also be imported and called programmatically via main(argv)
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from typing import Optional

from bridge_session.cli.device_cmds import cmd_device_add, cmd_device_remove, cmd_devices
from bridge_session.cli.helpers import _print, _resolve_config
from bridge_session.cli.session_cmds import cmd_exec, cmd_http, cmd_reconnect, cmd_state
from bridge_session.session import DeviceSession

_GLOBAL_FLAGS = ("--json", "--verbose")
_GLOBAL_OPTIONS = ("--device", "--bridge", "--serial", "--ip", "--forward-port")


def _preprocess_argv(argv: list[str]) -> list[str]:
    """Reorder global flags before the subcommand.

    Agent ergonomics: allow global flags anywhere (before or after subcommand).
    argparse doesn't support this reliably with subparsers, so we reorder.
    Everything after ``exec``'s command starts is passed through verbatim.

    Args:
        argv: Raw argument list (without ``sys.argv[0]``).

    Returns:
        Reordered argument list with global flags moved to the front.
    """
    global_args: list[str] = []
    rest: list[str] = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if rest[:1] == ["exec"] and rest[-1] != "--timeout" and not token.startswith("-"):
            rest.extend(argv[i:])
            break
        if token in _GLOBAL_FLAGS:
            global_args.append(token)
            i += 1
            continue
        if any(token.startswith(opt + "=") for opt in _GLOBAL_OPTIONS):
            global_args.append(token)
            i += 1
            continue
        if token in _GLOBAL_OPTIONS:
            # Needs a value.
            if i + 1 >= len(argv):
                rest.append(token)
                i += 1
                continue
            global_args.extend([token, argv[i + 1]])
            i += 2
            continue

        rest.append(token)
        i += 1

    return global_args + rest


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bsctl", description="Bridge Session CLI")
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0 (bridge-session)",
    )
    parser.add_argument("--json", action="store_true", help="Output machine-parseable JSON")
    parser.add_argument("--verbose", action="store_true", help="Log bridge activity to stderr")
    parser.add_argument("--device", default=None, help="Registered device name")
    parser.add_argument("--bridge", default=None, help="Bridge tool path (default: BSCTL_BRIDGE or adb)")
    parser.add_argument("--serial", default=None, help="Device serial, e.g. emulator-5554")
    parser.add_argument("--ip", default=None, help="Device address for forwarded HTTP (default 127.0.0.1)")
    parser.add_argument("--forward-port", default=None, help="Host-side forward port (default 8080)")

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_exec = sub.add_parser(
        "exec",
        help="Run a bridge command, e.g. 'shell echo hello'",
        description="Run a bridge command. Everything from the first non-option token on "
        "is passed to the device verbatim, so global flags such as --json must come "
        "before the command.",
    )
    p_exec.add_argument("--timeout", type=float, default=0, help="Seconds; <= 0 waits forever")
    p_exec.add_argument("command", nargs=argparse.REMAINDER)

    sub.add_parser("state", help="Check whether the device is alive")
    sub.add_parser("reconnect", help="Reconnect the device and wait until alive")

    p_http = sub.add_parser("http", help="Forward a guest port and send one HTTP request")
    p_http.add_argument("guest_port", help="Port of the service inside the device")
    p_http.add_argument("method", help="GET or POST")
    p_http.add_argument("path", help="Path without leading '/', e.g. 'hello?param1=1'")
    p_http.add_argument("--data", default=None, help="JSON body for POST")
    p_http.add_argument("--timeout", type=float, default=0, help="Seconds; <= 0 waits forever")

    sub.add_parser("devices", help="List registered devices")

    p_device = sub.add_parser("device", help="Manage registered devices")
    device_sub = p_device.add_subparsers(dest="device_cmd", required=True)
    p_add = device_sub.add_parser("add", help="Register a device (uses --serial/--bridge/--ip/--forward-port)")
    p_add.add_argument("name")
    p_remove = device_sub.add_parser("remove", help="Unregister a device")
    p_remove.add_argument("name")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``bsctl`` CLI.

    Args:
        argv: Argument list to parse.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 on success, 1 on device/transport error, 2 on usage error.
    """
    if argv is None:
        argv = sys.argv[1:]

    argv = _preprocess_argv(argv)

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    if args.cmd == "devices":
        return cmd_devices(json_mode=args.json)
    if args.cmd == "device" and args.device_cmd == "remove":
        return cmd_device_remove(name=args.name, json_mode=args.json)

    try:
        config = _resolve_config(
            device=args.device,
            bridge=args.bridge,
            serial=args.serial,
            ip=args.ip,
            forward_port=args.forward_port,
        )
    except ValueError as e:
        _print({"error": str(e)}, json_mode=args.json)
        return 2

    if args.cmd == "device" and args.device_cmd == "add":
        return cmd_device_add(name=args.name, config=config, json_mode=args.json)

    session = DeviceSession(config)

    if args.cmd == "exec":
        if not args.command:
            _print({"error": "missing command"}, json_mode=args.json)
            return 2
        return cmd_exec(
            session,
            command=shlex.join(args.command),
            timeout_s=args.timeout,
            json_mode=args.json,
        )
    if args.cmd == "state":
        return cmd_state(session, json_mode=args.json)
    if args.cmd == "reconnect":
        return cmd_reconnect(session, json_mode=args.json)
    if args.cmd == "http":
        return cmd_http(
            session,
            guest_port=args.guest_port,
            method=args.method,
            path=args.path,
            data=args.data,
            timeout_s=args.timeout,
            json_mode=args.json,
        )

    parser.error(f"Unknown command: {args.cmd}")
    return 2
