#!/usr/bin/env python3
"""Poll or command the panel's devices against a live Home Assistant.

Useful for checking what the extractor sees in real state responses, and
whether service calls are accepted, without running the panel UI.

Usage
-----
Set environment variables and run::

    export HAPANEL_TOKEN="long-lived-access-token"
    export HAPANEL_BASE_URL="http://homeassistant.local:8123/api"
    python scripts/panel_probe.py poll
    python scripts/panel_probe.py poll --entity light.videolampor --raw
    python scripts/panel_probe.py send light.videolampor --on --brightness 200 --kelvin 4500
    python scripts/panel_probe.py send cover.persienn_arbetsrum --position 40

Options::

    --verbose, -v        Enable debug logging (add --trace for request traces)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyhapanel import (  # noqa: E402
    Cover,
    DeviceCommand,
    DimmableLight,
    PanelClient,
    PanelConfig,
    PanelError,
)


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


async def _poll(client: PanelClient, args: argparse.Namespace) -> int:
    entity_ids = [args.entity] if args.entity else list(client.state.entity_ids)
    failures = 0
    for entity_id in entity_ids:
        snapshot = await client.scheduler.poll_once(entity_id)
        print(_section(entity_id))
        if args.raw:
            buffer = client.scheduler.buffer
            print(f"  raw ({buffer.length} bytes, truncated={buffer.truncated}):")
            print(f"    {buffer.payload().decode('utf-8', errors='replace')}")
        if snapshot is None:
            failures += 1
            print("  no usable snapshot (see --verbose for the reason)")
        else:
            print(f"  snapshot  : {snapshot.present_fields()}")

    print(_section("device table"))
    print(json.dumps(client.state.as_dict(), indent=2))
    return 1 if failures else 0


def _build_command(client: PanelClient, args: argparse.Namespace) -> DeviceCommand:
    device = client.state.get(args.entity)
    values: dict[str, Any] = {"entity_id": device.entity_id, "kind": device.kind}
    if isinstance(device, Cover):
        if args.position is None:
            raise PanelError(f"{device.entity_id} is a cover; pass --position")
        values["position"] = args.position
        return DeviceCommand(**values)
    if args.on is None:
        raise PanelError(f"{device.entity_id} is a light; pass --on or --off")
    values["on"] = args.on
    if isinstance(device, DimmableLight):
        values["brightness"] = args.brightness
        values["color_temp_kelvin"] = args.kelvin
    return DeviceCommand(**values)


async def _send(client: PanelClient, args: argparse.Namespace) -> int:
    command = _build_command(client, args)
    result = await client.execute_command(command)
    print(_section(f"{result.domain}/{result.action} {result.entity_id}"))
    print(f"  success   : {result.success}")
    print(f"  status    : {result.status_code}")
    if result.failure is not None:
        print(f"  failure   : {result.failure} ({result.message})")
    return 0 if result.success else 1


async def main() -> int:
    parser = argparse.ArgumentParser(description="Probe the panel's devices against a live Home Assistant.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--trace", action="store_true", help="Log redacted request headers and bodies")
    sub = parser.add_subparsers(dest="command", required=True)

    poll = sub.add_parser("poll", help="Poll device states once")
    poll.add_argument("--entity", help="Only poll this entity (default: every device)")
    poll.add_argument("--raw", action="store_true", help="Print the buffered response body")

    send = sub.add_parser("send", help="Send one command")
    send.add_argument("entity", help="Target entity id")
    switch = send.add_mutually_exclusive_group()
    switch.add_argument("--on", dest="on", action="store_const", const=True, default=None)
    switch.add_argument("--off", dest="on", action="store_const", const=False)
    send.add_argument("--brightness", type=int, help="Brightness 0-255 (dimmable lights)")
    send.add_argument("--kelvin", type=int, help="Color temperature in Kelvin (dimmable lights)")
    send.add_argument("--position", type=int, help="Cover position 0-100")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = PanelConfig.from_env(api_trace_enabled=args.trace)
        async with PanelClient(config) as client:
            if args.command == "poll":
                return await _poll(client, args)
            return await _send(client, args)
    except PanelError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
