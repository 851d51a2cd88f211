from __future__ import annotations

from typing import Optional

from ...agent.workflows.analysis_graph import FAIL, StructuredRequestSpec, run_structured_request
from ...domain.errors import InvalidInputError
from ...domain.progress import PARSE, ProgressTracker
from ...infra.config import get_config
from ...prompts.analysis_prompts import build_soil_prompt
from ...prompts.report_messages import (
    ANALYSIS_COMPLETE_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    SOIL_FAILURE_MESSAGE,
)
from ...schemas import AnalysisOutcome, GenerationConfig, SoilReport, SoilTestInput
from .session import missing_fields, rejected_outcome


SOIL_REQUEST_NAME = "soil"
SOIL_TEXTURES = ["Sandy", "Loamy", "Clay", "Silt", "Sandy Loam", "Clay Loam"]
SOIL_REQUIRED_FIELDS = [
    "ph",
    "nitrogen",
    "phosphorus",
    "potassium",
    "organic_matter",
    "texture",
    "moisture",
    "conductivity",
]
SOIL_GENERATION = GenerationConfig(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=2048
)


def soil_request_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=SOIL_REQUEST_NAME,
        model=get_config().text_model,
        generation=SOIL_GENERATION,
        schema=SoilReport,
        fallback=FAIL,
        failure_message=SOIL_FAILURE_MESSAGE,
        stage_notices={PARSE: ANALYSIS_COMPLETE_MESSAGE},
    )


def analyze_soil(
    soil: SoilTestInput, tracker: Optional[ProgressTracker] = None
) -> AnalysisOutcome:
    """Every form field must be filled in; nothing is sent otherwise."""
    missing = missing_fields(soil.model_dump(), SOIL_REQUIRED_FIELDS)
    if missing:
        return rejected_outcome(
            SOIL_REQUEST_NAME, InvalidInputError(MISSING_FIELDS_MESSAGE, missing)
        )
    return run_structured_request(
        soil_request_spec(), build_soil_prompt(soil), tracker=tracker
    )


def soil_report(outcome: AnalysisOutcome) -> Optional[SoilReport]:
    if outcome.status != "ok":
        return None
    return SoilReport.model_validate(outcome.data)
