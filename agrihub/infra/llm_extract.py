"""Locate and parse a JSON object embedded in free-text model output."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError


BALANCED = "balanced"
OUTERMOST = "outermost"
STRATEGIES = (BALANCED, OUTERMOST)


@dataclass(frozen=True)
class MalformedResponse:
    reason: str
    text: str = ""


@dataclass(frozen=True)
class ExtractionResult:
    value: Optional[Any] = None
    error: Optional[MalformedResponse] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "ExtractionResult":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str, text: str = "") -> "ExtractionResult":
        return cls(error=MalformedResponse(reason=reason, text=text))


def _iter_balanced_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) of every brace-balanced span, one per opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        end = None
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    end = index + 1
                    break
        if end is not None:
            yield start, end
        start = text.find("{", start + 1)


def _parse_object(fragment: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(fragment)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def _extract_balanced(text: str) -> ExtractionResult:
    for start, end in _iter_balanced_spans(text):
        value = _parse_object(text[start:end])
        if value is not None:
            return ExtractionResult.success(value)
    return ExtractionResult.failure("no balanced JSON object in response", text)


def _extract_outermost(text: str) -> ExtractionResult:
    start = text.find("{")
    end = text.rfind("}")
    if end <= start:
        return ExtractionResult.failure("no closing brace after opening brace", text)
    value = _parse_object(text[start : end + 1])
    if value is None:
        return ExtractionResult.failure("outermost brace span is not a JSON object", text)
    return ExtractionResult.success(value)


def extract_embedded_json(text: Optional[str], strategy: str = BALANCED) -> ExtractionResult:
    """
    Pull the JSON object out of a model reply such as
    ``Here is the result: {"a": 1} thanks``.

    Never raises for malformed input; callers decide between degrading to the
    raw text and failing the request.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"unknown extraction strategy: {strategy}")
    if not text or not text.strip():
        return ExtractionResult.failure("empty response text", text or "")
    if "{" not in text:
        return ExtractionResult.failure("no opening brace in response", text)
    if strategy == OUTERMOST:
        return _extract_outermost(text)
    return _extract_balanced(text)


def validate_payload(result: ExtractionResult, schema: Type[BaseModel]) -> ExtractionResult:
    if not result.ok:
        return result
    try:
        model = schema.model_validate(result.value)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return ExtractionResult.failure(f"unexpected shape: {errors}")
    return ExtractionResult.success(model)
