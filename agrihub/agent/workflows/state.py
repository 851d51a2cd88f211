"""
LangGraph state for the structured AI request workflow.
"""

from typing import Any, Dict, List, Optional, TypedDict

from ...domain.progress import ProgressTracker
from ...schemas import ImageUpload, ResultSection


class AnalysisState(TypedDict, total=False):
    """State shared across the read, encode, send, receive and parse nodes."""

    request_name: str
    model: str
    spec: Any
    prompt: str
    image: Optional[ImageUpload]
    tracker: ProgressTracker
    body: Dict[str, Any]
    payload: Dict[str, Any]
    raw_text: str
    data: Dict[str, Any]
    sections: List[ResultSection]
    status: str
    error: Optional[str]
    error_kind: Optional[str]
    notices: List[str]
    trace: List[str]
    halt: bool


def add_trace(state: AnalysisState, message: str) -> AnalysisState:
    """Append a message to the workflow trace."""
    trace = list(state.get("trace") or [])
    trace.append(message)
    return {**state, "trace": trace}
