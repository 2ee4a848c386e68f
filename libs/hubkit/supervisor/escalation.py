"""EscalationCounter — turns repeated interrupts during shutdown into a forced exit."""

DEFAULT_FORCE_BUDGET = 5


class EscalationCounter:
    """Counts termination signals received after shutdown has started.

    Only the shutdown-phase listening task touches an instance, so there is
    no locking.
    """

    def __init__(self, budget: int = DEFAULT_FORCE_BUDGET) -> None:
        if budget < 1:
            raise ValueError(f"budget must be at least 1, got {budget}")
        self._remaining = budget

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def exhausted(self) -> bool:
        return self._remaining <= 0

    def on_termination_signal(self) -> int:
        """Record one more termination signal and return the remaining budget."""
        self._remaining -= 1
        return self._remaining
