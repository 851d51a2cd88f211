"""
OpenTelemetry wiring for the analysis workflow, the API and the outbound HTTP clients.

Spans are always created through the global tracer; they are only exported
when an OTLP endpoint is configured in the environment.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


_SERVICE_NAME = "agrihub"
_DISABLED_EXPORTERS = {"none", "off", "false", "0"}
_SPAN_VALUE_TYPES = (str, bool, int, float)
_ATTR_MAX_LEN = int(os.getenv("OTEL_ATTR_MAX_LEN", "2000"))

_exporter_installed = False
_fastapi_instrumented = False


@dataclass(frozen=True)
class _ExporterSettings:
    endpoint: Optional[str]
    service_name: str
    headers: Dict[str, str] = field(default_factory=dict)
    resource: Dict[str, str] = field(default_factory=dict)


def _env_pairs(name: str) -> Dict[str, str]:
    """Parse ``key=value,key2=value2`` environment values; malformed items are skipped."""
    pairs: Dict[str, str] = {}
    for item in (os.getenv(name) or "").split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip() and value.strip():
            pairs[key.strip()] = value.strip()
    return pairs


def _traces_endpoint() -> Optional[str]:
    explicit = (os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT") or "").strip()
    if explicit:
        return explicit
    base = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").strip()
    if not base:
        return None
    return base if "/v1/" in base else f"{base.rstrip('/')}/v1/traces"


def _exporter_settings(service_name: Optional[str] = None) -> _ExporterSettings:
    exporter = (os.getenv("OTEL_TRACES_EXPORTER") or "otlp").strip().lower()
    return _ExporterSettings(
        endpoint=None if exporter in _DISABLED_EXPORTERS else _traces_endpoint(),
        service_name=service_name or os.getenv("OTEL_SERVICE_NAME") or _SERVICE_NAME,
        headers=_env_pairs("OTEL_EXPORTER_OTLP_HEADERS"),
        resource=_env_pairs("OTEL_RESOURCE_ATTRIBUTES"),
    )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def _clip(text: str, limit: int) -> Tuple[str, bool]:
    if limit and len(text) > limit:
        return text[:limit] + "...", True
    return text, False


def build_span_attributes(
    prefix: str, payload: object, limit: Optional[int] = None
) -> Dict[str, object]:
    """Serialize `payload` into ``prefix``, ``prefix.size`` and ``prefix.truncated``."""
    text = _as_text(payload)
    max_len = _ATTR_MAX_LEN if limit is None else limit
    clipped, truncated = _clip(text, max_len)
    return {prefix: clipped, f"{prefix}.size": len(text), f"{prefix}.truncated": truncated}


def summarize_state(state: object) -> object:
    """Span-sized view of the workflow state; image bytes and the request spec are left out."""
    if not isinstance(state, dict):
        return state
    summary: Dict[str, object] = {"keys": sorted(state.keys())}
    for key in ("request_name", "model", "error", "error_kind", "status"):
        if state.get(key) is not None:
            summary[key] = state.get(key)
    tracker = state.get("tracker")
    if tracker is not None:
        summary["progress"] = getattr(tracker, "value", None)
    raw_text = state.get("raw_text")
    if isinstance(raw_text, str):
        summary["raw_text_size"] = len(raw_text)
    return summary


def set_span_attributes(span: object, attributes: Optional[Dict[str, object]]) -> None:
    if not span or not attributes:
        return
    for key, value in attributes.items():
        if value is None:
            continue
        span.set_attribute(key, value if isinstance(value, _SPAN_VALUE_TYPES) else str(value))


@contextmanager
def start_span(name: str, attributes: Optional[Dict[str, object]] = None) -> Iterator[object]:
    tracer = trace.get_tracer(os.getenv("OTEL_SERVICE_NAME") or _SERVICE_NAME)
    with tracer.start_as_current_span(name) as span:
        set_span_attributes(span, attributes)
        yield span


def record_exception(span: object, exc: Exception) -> None:
    if span:
        span.record_exception(exc)
        span.set_status(Status(StatusCode.ERROR, str(exc)))


def init_otel(service_name: Optional[str] = None) -> bool:
    """Install an OTLP/HTTP trace exporter when an endpoint is configured."""
    global _exporter_installed
    if _exporter_installed:
        return True
    settings = _exporter_settings(service_name)
    if not settings.endpoint:
        return False

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.service_name, **settings.resource})
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint, headers=settings.headers))
    )
    trace.set_tracer_provider(provider)
    logging.getLogger(__name__).info("otel exporter configured: %s", settings.endpoint)
    _exporter_installed = True
    return True


def instrument_fastapi(app: object) -> bool:
    global _fastapi_instrumented
    if not _fastapi_instrumented:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
        _fastapi_instrumented = True
    return True


def instrument_httpx() -> bool:
    """Instrument the generative AI and news clients."""
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    instrumentor = HTTPXClientInstrumentor()
    if not instrumentor.is_instrumented_by_opentelemetry:
        instrumentor.instrument()
    return True
