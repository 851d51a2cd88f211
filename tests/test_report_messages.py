import importlib.util
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_MISSING_PYDANTIC = importlib.util.find_spec("pydantic") is None

if not _MISSING_PYDANTIC:
    from agrihub.prompts.analysis_prompts import build_plant_prompt
    from agrihub.prompts.report_messages import (
        format_price_prediction,
        format_soil_report,
        iter_reveal_chunks,
        split_plant_sections,
    )
    from agrihub.schemas import PricePrediction, SoilReport


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class PlantSectionTests(unittest.TestCase):
    def test_blank_piece_consumes_heading_slot(self) -> None:
        sections = split_plant_sections("1. Mango\n2. \n3. Humid")
        self.assertEqual(
            [(section.title, section.content) for section in sections],
            [("Plant Identification", "Mango"), ("Current Conditions", "Humid")],
        )

    def test_windows_line_endings(self) -> None:
        sections = split_plant_sections("1. Mango\r\n2. Healthy")
        self.assertEqual([section.icon for section in sections], ["flower", "heart"])

    def test_top_level_headings_also_start_sections(self) -> None:
        sections = split_plant_sections("# Mango\nTall tree\n## Leaves\n# Healthy")
        self.assertEqual(
            [(section.title, section.content) for section in sections],
            [
                ("Plant Identification", "Mango\nTall tree\n## Leaves"),
                ("Health Status", "Healthy"),
            ],
        )

    def test_prompt_language_fallthrough(self) -> None:
        self.assertIn("in Telugu:", build_plant_prompt("xx"))
        self.assertIn("in Hindi:", build_plant_prompt("hi"))


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class RevealTests(unittest.TestCase):
    def test_chunks_rebuild_text(self) -> None:
        self.assertEqual(list(iter_reveal_chunks("abcde", 2)), ["ab", "cd", "e"])
        self.assertEqual(list(iter_reveal_chunks("")), [])

    def test_size_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            list(iter_reveal_chunks("abc", 0))


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class ReportFormattingTests(unittest.TestCase):
    def test_soil_report_markdown(self) -> None:
        report = SoilReport.model_validate(
            {
                "healthScore": 81,
                "summary": "Good structure",
                "nutrients": [{"name": "Potassium", "level": 180, "status": "Optimal"}],
                "suitableCrops": ["Cotton", "Maize"],
            }
        )
        text = format_soil_report(report)
        self.assertTrue(text.startswith("# Soil health score: 81"))
        self.assertIn("- Potassium: 180 (Optimal)", text)
        self.assertIn("Cotton, Maize", text)

    def test_price_prediction_table(self) -> None:
        prediction = PricePrediction.model_validate(
            {
                "currentPrice": 45,
                "predictions": [
                    {"month": "January 2025", "price": 48, "change": 6.67, "supplyStatus": "Low"}
                ],
                "recommendations": [{"type": "Sell", "suggestion": "Hold until February"}],
            }
        )
        text = format_price_prediction(prediction, "Tomato")
        self.assertIn("# Tomato price outlook", text)
        self.assertIn("**Current price:** ₹45/kg", text)
        self.assertIn("| January 2025 | ₹48 | +6.67% | Low |  |", text)
        self.assertIn("- Sell: Hold until February", text)


if __name__ == "__main__":
    unittest.main()
