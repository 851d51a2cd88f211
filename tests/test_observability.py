import importlib.util
import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agrihub.observability.logging_utils import (
    event_line,
    reset_trace_id,
    set_trace_id,
    summarize_text,
)

_MISSING_OTEL = importlib.util.find_spec("opentelemetry") is None


class EventLineTests(unittest.TestCase):
    def test_trace_id_is_scoped(self) -> None:
        token = set_trace_id("abc123")
        try:
            payload = json.loads(event_line("analysis_start", request="pest"))
        finally:
            reset_trace_id(token)
        self.assertEqual(payload, {"event": "analysis_start", "trace_id": "abc123", "request": "pest"})
        self.assertEqual(json.loads(event_line("x"))["trace_id"], "unknown")

    def test_non_json_values_are_stringified(self) -> None:
        payload = json.loads(event_line("saved", path=Path("a/b")))
        self.assertEqual(payload["path"], str(Path("a/b")))

    def test_summarize_text(self) -> None:
        self.assertEqual(summarize_text("abcdef", 3), "abc...")
        self.assertEqual(summarize_text(None), "")


@unittest.skipUnless(not _MISSING_OTEL, "opentelemetry is not installed")
class SpanAttributeTests(unittest.TestCase):
    def test_attributes_are_clipped(self) -> None:
        from agrihub.observability.otel import build_span_attributes

        attrs = build_span_attributes("node.input", {"a": "x" * 50}, limit=10)
        self.assertTrue(attrs["node.input.truncated"])
        self.assertEqual(len(attrs["node.input"]), 13)
        self.assertGreater(attrs["node.input.size"], 50)

    def test_state_summary_omits_payloads(self) -> None:
        from agrihub.observability.otel import summarize_state

        summary = summarize_state(
            {"request_name": "soil", "raw_text": "{}", "image": b"bytes", "status": "ok"}
        )
        self.assertEqual(summary["request_name"], "soil")
        self.assertEqual(summary["raw_text_size"], 2)
        self.assertNotIn("image", {k for k in summary if k != "keys"})

    def test_exporter_disabled_without_endpoint(self) -> None:
        from agrihub.observability.otel import init_otel

        with patch.dict(os.environ, {}, clear=True):
            self.assertFalse(init_otel())


if __name__ == "__main__":
    unittest.main()
