from __future__ import annotations

from typing import Optional

from ...agent.workflows.analysis_graph import FAIL, StructuredRequestSpec, run_structured_request
from ...domain.progress import PARSE, READ, RECEIVE, SEND, ProgressTracker
from ...infra.config import get_config
from ...prompts.analysis_prompts import build_pest_prompt
from ...prompts.report_messages import ANALYSIS_COMPLETE_MESSAGE, PEST_FAILURE_MESSAGE
from ...schemas import AnalysisOutcome, GenerationConfig, ImageUpload, PestReport


PEST_REQUEST_NAME = "pest"
PEST_GENERATION = GenerationConfig(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=2048
)


def pest_request_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=PEST_REQUEST_NAME,
        model=get_config().vision_model,
        generation=PEST_GENERATION,
        schema=PestReport,
        fallback=FAIL,
        requires_image=True,
        failure_message=PEST_FAILURE_MESSAGE,
        stage_notices={
            READ: "Processing image...",
            SEND: "Analyzing pest characteristics...",
            RECEIVE: "Generating analysis report...",
            PARSE: ANALYSIS_COMPLETE_MESSAGE,
        },
    )


def analyze_pest(
    image: Optional[ImageUpload], tracker: Optional[ProgressTracker] = None
) -> AnalysisOutcome:
    return run_structured_request(
        pest_request_spec(), build_pest_prompt(), image=image, tracker=tracker
    )


def pest_report(outcome: AnalysisOutcome) -> Optional[PestReport]:
    if outcome.status != "ok":
        return None
    return PestReport.model_validate(outcome.data)
