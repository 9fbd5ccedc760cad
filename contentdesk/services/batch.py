"""Result types for operations applied to many documents."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RecordOutcome:
    """Outcome of applying an operation to one document."""

    id: Any
    ok: bool
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Per-record outcomes of a batch operation.

    ``stopped_early`` is set when the batch was configured to stop at the
    first failure and did so; records after the failing one were not tried.
    Updates that already succeeded are never rolled back.
    """

    operation: str
    outcomes: List[RecordOutcome] = field(default_factory=list)
    stopped_early: bool = False

    def record_success(self, record_id: Any) -> None:
        self.outcomes.append(RecordOutcome(id=record_id, ok=True))

    def record_failure(self, record_id: Any, error: str) -> None:
        self.outcomes.append(RecordOutcome(id=record_id, ok=False, error=error))

    @property
    def succeeded(self) -> List[Any]:
        return [outcome.id for outcome in self.outcomes if outcome.ok]

    @property
    def failures(self) -> List[RecordOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def has_failures(self) -> bool:
        return any(not outcome.ok for outcome in self.outcomes)

    def failures_as_dicts(self) -> List[Dict[str, Any]]:
        return [{"id": outcome.id, "error": outcome.error} for outcome in self.failures]
