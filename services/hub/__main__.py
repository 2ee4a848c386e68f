"""Entry point: python -m services.hub [version|show-config] [--reboot-on-restart]"""

import asyncio
import functools
import sys

from hubkit import ExitCode, HubSettings, LogSystem, Supervisor
from pydantic import ValidationError

from services.hub.hub import HubInstance


async def main(argv: list[str]) -> int:
    try:
        settings = HubSettings.from_env()
    except ValidationError as e:
        print(f"error creating an instance: invalid settings: {e}", file=sys.stderr)
        return ExitCode.CREATE_FAILED

    supervisor = Supervisor(
        create=functools.partial(HubInstance.create, settings, argv),
        logs=LogSystem(settings.log_level),
        force_exit_signals=settings.force_exit_signals,
        shutdown_timeout=settings.shutdown_timeout,
    )
    return await supervisor.run()


def run() -> None:
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    run()
