"""
LangGraph workflow shared by every page that asks the generative model for a result.

read -> encode -> send -> receive -> parse, each node advancing the progress
checkpoint. Any node can stop the run with an error kind; the parse node
applies the request's fallback policy when the reply cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from langgraph.graph import END, StateGraph
from pydantic import BaseModel

from ...domain.errors import AgriHubError, InvalidInputError, MalformedResponseError
from ...domain.progress import ENCODE, PARSE, READ, RECEIVE, SEND, ProgressTracker
from ...infra.config import get_config
from ...infra.llm import build_generate_body, extract_reply_text, get_generative_client
from ...infra.llm_extract import extract_embedded_json, validate_payload
from ...observability.logging_utils import log_event, log_failure
from ...observability.otel import (
    build_span_attributes,
    record_exception,
    set_span_attributes,
    start_span,
    summarize_state,
)
from ...prompts.report_messages import (
    INVALID_IMAGE_MESSAGE,
    MISSING_IMAGE_MESSAGE,
    PARSE_FAILURE_MESSAGE,
)
from ...schemas import AnalysisOutcome, GenerationConfig, ImageUpload, ResultSection
from .state import AnalysisState, add_trace


ANALYSIS_WORKFLOW_NAME = "structured_request_workflow"

DegradeBuilder = Callable[[str], Tuple[Dict[str, Any], List[ResultSection]]]
SectionParser = Callable[[str], List[ResultSection]]


@dataclass(frozen=True)
class FallbackPolicy:
    """What a request does with a reply it cannot parse: fail, or degrade via `degrade`."""

    degrade: Optional[DegradeBuilder] = None

    @property
    def degrades(self) -> bool:
        return self.degrade is not None


FAIL = FallbackPolicy()


def degrade_with(builder: DegradeBuilder) -> FallbackPolicy:
    return FallbackPolicy(degrade=builder)


@dataclass(frozen=True)
class StructuredRequestSpec:
    """
    One kind of structured AI request.

    `schema` validates a JSON object embedded in the reply; `parser` instead
    turns free text into display sections. A spec carries one or the other.
    """

    name: str
    model: str
    generation: GenerationConfig
    schema: Optional[Type[BaseModel]] = None
    fallback: FallbackPolicy = FAIL
    parser: Optional[SectionParser] = None
    requires_image: bool = False
    failure_message: str = "Request failed"
    parse_failure_message: str = PARSE_FAILURE_MESSAGE
    stage_notices: Dict[int, str] = field(default_factory=dict)


def _advance(state: AnalysisState, checkpoint: int) -> AnalysisState:
    tracker: ProgressTracker = state["tracker"]
    tracker.advance(checkpoint)
    spec: StructuredRequestSpec = state["spec"]
    log_event(
        "analysis_progress",
        request=state.get("request_name"),
        progress=checkpoint,
    )
    notice = spec.stage_notices.get(checkpoint)
    if notice:
        notices = list(state.get("notices") or [])
        notices.append(notice)
        state = {**state, "notices": notices}
    return state


def _halt(state: AnalysisState, kind: str, message: str, detail: str = "") -> AnalysisState:
    log_failure(
        "analysis_failed",
        request=state.get("request_name"),
        error_kind=kind,
        error=message,
        detail=detail,
    )
    state = add_trace(state, f"halt:{kind}")
    return {
        **state,
        "status": "failed",
        "error": message,
        "error_kind": kind,
        "halt": True,
    }


def _read_node(state: AnalysisState) -> AnalysisState:
    spec: StructuredRequestSpec = state["spec"]
    image: Optional[ImageUpload] = state.get("image")
    if spec.requires_image:
        if image is None:
            return _halt(state, InvalidInputError.kind, MISSING_IMAGE_MESSAGE)
        if not image.is_image:
            return _halt(
                state,
                InvalidInputError.kind,
                INVALID_IMAGE_MESSAGE,
                detail=image.mime_type,
            )
    if not (state.get("prompt") or "").strip():
        return _halt(state, InvalidInputError.kind, "Prompt must not be empty")
    state = add_trace(state, "read")
    return _advance(state, READ)


def _encode_node(state: AnalysisState) -> AnalysisState:
    spec: StructuredRequestSpec = state["spec"]
    body = build_generate_body(state["prompt"], spec.generation, state.get("image"))
    state = add_trace({**state, "body": body}, "encode")
    return _advance(state, ENCODE)


def _send_node(state: AnalysisState) -> AnalysisState:
    spec: StructuredRequestSpec = state["spec"]
    state = _advance(state, SEND)
    client = get_generative_client()
    try:
        payload = client.send(spec.model, state["body"])
    except AgriHubError as exc:
        return _halt(state, exc.kind, spec.failure_message, detail=exc.message)
    return add_trace({**state, "payload": payload}, "send")


def _receive_node(state: AnalysisState) -> AnalysisState:
    raw_text = extract_reply_text(state.get("payload"))
    state = add_trace({**state, "raw_text": raw_text}, "receive")
    return _advance(state, RECEIVE)


def _apply_fallback(state: AnalysisState, reason: str) -> AnalysisState:
    spec: StructuredRequestSpec = state["spec"]
    raw_text = state.get("raw_text") or ""
    if not spec.fallback.degrades:
        return _halt(
            state, MalformedResponseError.kind, spec.parse_failure_message, detail=reason
        )
    data, sections = spec.fallback.degrade(raw_text)
    log_failure("analysis_degraded", request=state.get("request_name"), reason=reason)
    state = add_trace(state, "degraded")
    state = {**state, "data": data, "sections": sections, "status": "degraded"}
    return _advance(state, PARSE)


def _parse_node(state: AnalysisState) -> AnalysisState:
    spec: StructuredRequestSpec = state["spec"]
    raw_text = state.get("raw_text") or ""
    if spec.parser is not None:
        try:
            sections = spec.parser(raw_text)
        except ValueError as exc:
            return _apply_fallback(state, str(exc))
        if not sections:
            return _apply_fallback(state, "no sections in reply")
        state = {**state, "sections": sections, "status": "ok"}
        return _advance(add_trace(state, "parse"), PARSE)

    if spec.schema is None:
        state = {**state, "data": {"text": raw_text}, "status": "ok"}
        return _advance(add_trace(state, "parse"), PARSE)

    strategy = get_config().extraction_strategy
    result = validate_payload(extract_embedded_json(raw_text, strategy), spec.schema)
    if not result.ok:
        return _apply_fallback(state, result.error.reason)
    data = result.value.model_dump(by_alias=True)
    state = {**state, "data": data, "status": "ok"}
    return _advance(add_trace(state, "parse"), PARSE)


def _route_unless_halted(next_node: str):
    def _route(state: AnalysisState) -> str:
        if state.get("halt"):
            return END
        return next_node

    return _route


def _trace_node(node_name: str, func):
    def _inner(state: AnalysisState) -> AnalysisState:
        attrs = {
            "workflow.name": ANALYSIS_WORKFLOW_NAME,
            "node.name": node_name,
            "request.name": state.get("request_name") or "",
        }
        attrs.update(build_span_attributes("node.input", summarize_state(state)))
        with start_span(
            f"workflow.{ANALYSIS_WORKFLOW_NAME}.{node_name}", attributes=attrs
        ) as span:
            try:
                result = func(state)
            except Exception as exc:
                record_exception(span, exc)
                raise
            set_span_attributes(
                span, build_span_attributes("node.output", summarize_state(result))
            )
            return result

    return _inner


@lru_cache(maxsize=1)
def build_analysis_graph():
    """
    Construct and return the structured request LangGraph workflow.
    """
    graph = StateGraph(AnalysisState)
    graph.add_node("read", _trace_node("read", _read_node))
    graph.add_node("encode", _trace_node("encode", _encode_node))
    graph.add_node("send", _trace_node("send", _send_node))
    graph.add_node("receive", _trace_node("receive", _receive_node))
    graph.add_node("parse", _trace_node("parse", _parse_node))

    graph.set_entry_point("read")
    graph.add_conditional_edges("read", _route_unless_halted("encode"))
    graph.add_edge("encode", "send")
    graph.add_conditional_edges("send", _route_unless_halted("receive"))
    graph.add_edge("receive", "parse")
    graph.add_edge("parse", END)
    return graph.compile()


def run_structured_request(
    spec: StructuredRequestSpec,
    prompt: str,
    image: Optional[ImageUpload] = None,
    tracker: Optional[ProgressTracker] = None,
) -> AnalysisOutcome:
    """Run one request through the workflow; the tracker is always finished."""
    tracker = tracker or ProgressTracker()
    tracker.start()
    state: AnalysisState = {
        "request_name": spec.name,
        "model": spec.model,
        "spec": spec,
        "prompt": prompt,
        "image": image,
        "tracker": tracker,
        "notices": [],
        "trace": [],
        "halt": False,
    }
    log_event("analysis_start", request=spec.name, model=spec.model, has_image=image is not None)
    try:
        final = build_analysis_graph().invoke(state)
    finally:
        tracker.finish()
    outcome = AnalysisOutcome(
        name=spec.name,
        status=final.get("status") or "failed",
        data=final.get("data") or {},
        sections=final.get("sections") or [],
        raw_text=final.get("raw_text") or "",
        error=final.get("error"),
        error_kind=final.get("error_kind"),
        progress=tracker.history,
        notices=final.get("notices") or [],
    )
    log_event(
        "analysis_done",
        request=spec.name,
        status=outcome.status,
        error_kind=outcome.error_kind,
        trace=final.get("trace") or [],
    )
    return outcome
