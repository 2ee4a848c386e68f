"""Verdict cache for connections seen by the privacy filter."""

from dataclasses import dataclass, field
from enum import StrEnum


class Verdict(StrEnum):
    UNDECIDED = "undecided"
    ACCEPT = "accept"
    BLOCK = "block"
    DROP = "drop"


@dataclass
class VerdictCache:
    """Per-connection verdicts, keyed by connection ID.

    Resetting keeps the connections but marks them undecided so they are
    evaluated again under the current configuration.
    """

    verdicts: dict[str, Verdict] = field(default_factory=dict)
    resets: int = 0

    def __len__(self) -> int:
        return len(self.verdicts)

    def get(self, conn_id: str) -> Verdict:
        return self.verdicts.get(conn_id, Verdict.UNDECIDED)

    def set(self, conn_id: str, verdict: Verdict) -> None:
        self.verdicts[conn_id] = verdict

    def remove(self, conn_id: str) -> None:
        self.verdicts.pop(conn_id, None)

    def reset_all(self) -> int:
        """Mark every connection undecided. Returns how many verdicts changed."""
        changed = 0
        for conn_id, verdict in self.verdicts.items():
            if verdict != Verdict.UNDECIDED:
                self.verdicts[conn_id] = Verdict.UNDECIDED
                changed += 1
        self.resets += 1
        return changed
