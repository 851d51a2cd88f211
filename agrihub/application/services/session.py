from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from ...domain.errors import InvalidInputError
from ...domain.progress import ProgressTracker
from ...infra.config import get_config
from ...observability.logging_utils import log_failure
from ...schemas import AnalysisOutcome


def new_tracker(listener: Optional[Callable[[int], None]] = None) -> ProgressTracker:
    return ProgressTracker(
        reset_delay=get_config().progress_reset_seconds, listener=listener
    )


def missing_fields(values: Dict[str, Any], required: List[str]) -> List[str]:
    return [name for name in required if not str(values.get(name) or "").strip()]


def rejected_outcome(name: str, error: InvalidInputError) -> AnalysisOutcome:
    """Outcome for input turned away before anything was sent."""
    log_failure(
        "analysis_rejected",
        request=name,
        error=error.message,
        missing_fields=error.missing_fields,
    )
    data: Dict[str, Any] = {}
    if error.missing_fields:
        data["missingFields"] = error.missing_fields
    return AnalysisOutcome(
        name=name,
        status="failed",
        data=data,
        error=error.message,
        error_kind="invalid_input",
    )


class AnalysisSession:
    """
    State of one analysis view: loading flag, last good outcome, last error.

    Whatever happens during a run, `loading` is back to False afterwards.
    Two overlapping runs on one session simply overwrite each other.
    """

    def __init__(self, tracker: Optional[ProgressTracker] = None) -> None:
        self.tracker = tracker or new_tracker()
        self.loading = False
        self.outcome: Optional[AnalysisOutcome] = None
        self.error: Optional[str] = None

    def run(self, call: Callable[[ProgressTracker], AnalysisOutcome]) -> AnalysisOutcome:
        self.loading = True
        self.error = None
        try:
            outcome = call(self.tracker)
        finally:
            self.loading = False
        if outcome.ok:
            self.outcome = outcome
        else:
            self.error = outcome.error
        return outcome
