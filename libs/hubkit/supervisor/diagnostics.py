"""Stack dumps of every running thread and asyncio task."""

import asyncio
import logging
import sys
import threading
import traceback
from typing import TextIO

logger = logging.getLogger(__name__)


def dump_tasks(sink: TextIO, label: str) -> Exception | None:
    """Write a labeled snapshot of all threads and pending tasks to `sink`.

    Write failures are logged and returned, never raised.
    """
    try:
        sink.write(f"===== {label} =====\n")
        _write_threads(sink)
        _write_tasks(sink)
        sink.flush()
    except (OSError, ValueError) as err:
        logger.error("failed to write stack trace: %s", err)
        return err
    return None


def _write_threads(sink: TextIO) -> None:
    frames = sys._current_frames()
    for thread in threading.enumerate():
        frame = frames.get(thread.ident) if thread.ident is not None else None
        sink.write(f"\nThread {thread.name} ({thread.ident}):\n")
        if frame is not None:
            sink.writelines(traceback.format_stack(frame))


def _write_tasks(sink: TextIO) -> None:
    try:
        tasks = asyncio.all_tasks()
    except RuntimeError:
        return  # no running loop
    for task in sorted(tasks, key=lambda t: t.get_name()):
        sink.write(f"\nTask {task.get_name()}:\n")
        task.print_stack(file=sink)
