"""Process supervisor — startup, signal-driven shutdown, forced-exit escalation."""

from hubkit.supervisor.diagnostics import dump_tasks
from hubkit.supervisor.escalation import DEFAULT_FORCE_BUDGET, EscalationCounter
from hubkit.supervisor.exit import ExitCode, ExitGate, hard_exit
from hubkit.supervisor.instance import CommandLineOperationRequested, Instance
from hubkit.supervisor.signals import (
    DEFAULT_SIGNALS,
    SIGNAL_KINDS,
    SignalEvent,
    SignalKind,
    SignalListener,
)
from hubkit.supervisor.supervisor import Supervisor
from hubkit.supervisor.watchdog import DEFAULT_SHUTDOWN_TIMEOUT, Watchdog

__all__ = [
    "CommandLineOperationRequested",
    "DEFAULT_FORCE_BUDGET",
    "DEFAULT_SHUTDOWN_TIMEOUT",
    "DEFAULT_SIGNALS",
    "EscalationCounter",
    "ExitCode",
    "ExitGate",
    "Instance",
    "SIGNAL_KINDS",
    "SignalEvent",
    "SignalKind",
    "SignalListener",
    "Supervisor",
    "Watchdog",
    "dump_tasks",
    "hard_exit",
]
