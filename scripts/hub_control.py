"""Hub control — send a control request or module event to a running hub.

Run with:
    python scripts/hub_control.py shutdown [--exit-code N]
    python scripts/hub_control.py restart
    python scripts/hub_control.py event <module> <event> [key=value ...]
Requires: NATS running and a hub connected to it
"""

import argparse
import asyncio
import json
import os
import sys

from hubkit import (
    Control,
    ControlAction,
    HubBusClient,
    ModuleEvent,
    create_message,
    validate_message,
)

SENDER = "hub-control"


def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def build_message(args: argparse.Namespace):
    """Turn parsed arguments into (topic, envelope)."""
    if args.command == "event":
        data = {}
        for pair in args.data:
            key, sep, value = pair.partition("=")
            if not sep:
                raise ValueError(f"expected key=value, got {pair!r}")
            data[key] = _parse_value(value)
        payload = ModuleEvent(module=args.module, event=args.event, data=data)
        envelope = create_message(from_hub=SENDER, payload=payload)
        return envelope.topic, envelope

    payload = Control(action=ControlAction(args.command), exit_code=getattr(args, "exit_code", None))
    envelope = create_message(from_hub=SENDER, payload=payload)
    return envelope.topic, envelope


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a request to a running SPN hub")
    sub = parser.add_subparsers(dest="command", required=True)
    shutdown = sub.add_parser("shutdown", help="stop the hub")
    shutdown.add_argument("--exit-code", type=int, default=None)
    sub.add_parser("restart", help="stop the hub with the restart exit code")
    event = sub.add_parser("event", help="emit a module event")
    event.add_argument("module")
    event.add_argument("event")
    event.add_argument("data", nargs="*", help="key=value pairs, values parsed as JSON when possible")
    return parser.parse_args(argv)


async def main(argv: list[str]) -> int:
    args = parse_args(argv)
    try:
        topic, envelope = build_message(args)
    except ValueError as e:
        print(f"invalid request: {e}", file=sys.stderr)
        return 2

    errors = validate_message(envelope)
    if errors:
        print(f"invalid request: {'; '.join(errors)}", file=sys.stderr)
        return 2

    nats_url = os.environ.get("NATS_URL", "nats://localhost:4222")
    client = HubBusClient(nats_url)
    await client.connect()
    try:
        await client.publish(topic, envelope)
        print(f"Sent {envelope.type} to {topic} ({nats_url})")
    finally:
        await client.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
