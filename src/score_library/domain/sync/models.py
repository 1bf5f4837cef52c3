"""
Sync result types.

A push or pull returns a ``SyncReport`` listing every step it attempted, so
callers can see which assets or records were dropped without parsing logs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional


class SyncDirection(Enum):
    PUSH = "push"  # local -> remote
    PULL = "pull"  # remote -> local


class StepKind(Enum):
    AVATAR = "avatar"
    COMPOSER = "composer"
    WORK_FILE = "work_file"
    WORK = "work"
    RECORDING_FILE = "recording_file"
    RECORDING = "recording"


class StepOutcome(Enum):
    OK = "ok"
    SKIPPED = "skipped"  # Nothing to transfer (empty asset reference)
    FAILED = "failed"


class StepResult(NamedTuple):
    """Outcome of one sync step.

    Attributes:
        kind: What was transferred
        entity_id: Id of the source entity
        outcome: ok, skipped or failed
        destination_id: New id (records) or new reference (assets), if any
        reason: Error message for failed steps
    """

    kind: StepKind
    entity_id: str
    outcome: StepOutcome
    destination_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class SyncReport:
    """Everything a single push or pull did."""

    direction: SyncDirection
    source_composer_id: str
    destination_composer_id: Optional[str] = None
    steps: List[StepResult] = field(default_factory=list)

    def record(self, step: StepResult) -> StepResult:
        self.steps.append(step)
        return step

    @property
    def failures(self) -> List[StepResult]:
        return [s for s in self.steps if s.outcome is StepOutcome.FAILED]

    @property
    def succeeded(self) -> bool:
        """True when every attempted step completed or was skipped."""
        return self.destination_composer_id is not None and not self.failures

    def count(self, kind: StepKind, outcome: StepOutcome = StepOutcome.OK) -> int:
        return sum(1 for s in self.steps if s.kind is kind and s.outcome is outcome)

    def summary(self) -> str:
        """One-line human summary for logs and CLI output."""
        works = self.count(StepKind.WORK)
        recordings = self.count(StepKind.RECORDING)
        text = (
            f"{self.direction.value} {self.source_composer_id} -> "
            f"{self.destination_composer_id}: {works} works, {recordings} recordings"
        )
        if self.failures:
            text += f", {len(self.failures)} failed steps"
        return text
