import importlib.util
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_MISSING_DEPS = importlib.util.find_spec("pydantic_settings") is None

if not _MISSING_DEPS:
    from pydantic import ValidationError

    from agrihub.infra.config import AppConfig


@unittest.skipUnless(not _MISSING_DEPS, "pydantic-settings is not installed")
class ExtractionStrategySettingTests(unittest.TestCase):
    def _load(self, value: str) -> "AppConfig":
        with patch.dict(os.environ, {"EXTRACTION_STRATEGY": value}):
            return AppConfig(_env_file=None)

    def test_known_strategies_are_normalized(self) -> None:
        self.assertEqual(self._load("Outermost ").extraction_strategy, "outermost")
        self.assertEqual(self._load("BALANCED").extraction_strategy, "balanced")

    def test_unknown_strategy_fails_at_load(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self._load("outer")
        self.assertIn("EXTRACTION_STRATEGY", str(ctx.exception))

    def test_default_is_balanced(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(AppConfig(_env_file=None).extraction_strategy, "balanced")

    def test_urls_lose_trailing_slash(self) -> None:
        with patch.dict(os.environ, {"GENAI_API_BASE": "https://example.test/v1/"}):
            self.assertEqual(AppConfig(_env_file=None).genai_api_base, "https://example.test/v1")


if __name__ == "__main__":
    unittest.main()
