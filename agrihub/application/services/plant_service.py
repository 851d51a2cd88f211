from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ...agent.workflows.analysis_graph import (
    StructuredRequestSpec,
    degrade_with,
    run_structured_request,
)
from ...domain.errors import InvalidInputError
from ...domain.progress import PARSE, READ, RECEIVE, SEND, ProgressTracker
from ...infra.config import get_config
from ...observability.logging_utils import log_event
from ...prompts.analysis_prompts import PLANT_LANGUAGE_NAMES, build_plant_prompt
from ...prompts.report_messages import (
    ANALYSIS_COMPLETE_MESSAGE,
    PLANT_FAILURE_MESSAGE,
    fallback_sections,
    split_plant_sections,
)
from ...schemas import AnalysisOutcome, GenerationConfig, ImageUpload, ResultSection
from .session import AnalysisSession, rejected_outcome


PLANT_REQUEST_NAME = "plant"
SUPPORTED_LANGUAGES = tuple(PLANT_LANGUAGE_NAMES)
PLANT_GENERATION = GenerationConfig(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=1024
)


def _degrade_to_raw_text(text: str) -> Tuple[Dict[str, Any], List[ResultSection]]:
    return {"text": text}, fallback_sections(text)


def plant_request_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=PLANT_REQUEST_NAME,
        model=get_config().plant_model,
        generation=PLANT_GENERATION,
        parser=split_plant_sections,
        fallback=degrade_with(_degrade_to_raw_text),
        requires_image=True,
        failure_message=PLANT_FAILURE_MESSAGE,
        stage_notices={
            READ: "Processing image...",
            SEND: "Analyzing plant...",
            RECEIVE: "Generating analysis...",
            PARSE: ANALYSIS_COMPLETE_MESSAGE,
        },
    )


def analyze_plant(
    image: Optional[ImageUpload],
    language: str = "en",
    tracker: Optional[ProgressTracker] = None,
) -> AnalysisOutcome:
    """Identify the plant in `image` and describe its health in `language`."""
    if language not in SUPPORTED_LANGUAGES:
        return rejected_outcome(
            PLANT_REQUEST_NAME, InvalidInputError(f"Unsupported language: {language}")
        )
    return run_structured_request(
        plant_request_spec(), build_plant_prompt(language), image=image, tracker=tracker
    )


class PlantAnalysisSession(AnalysisSession):
    """Plant page: remembers the last image so a language switch can re-run it."""

    def __init__(self, language: str = "en", tracker: Optional[ProgressTracker] = None):
        super().__init__(tracker)
        self.language = language
        self.image: Optional[ImageUpload] = None

    def analyze(self, image: Optional[ImageUpload]) -> AnalysisOutcome:
        if image is not None and image.is_image:
            self.image = image
        language = self.language
        return self.run(lambda tracker: analyze_plant(image, language, tracker))

    def change_language(self, language: str) -> Optional[AnalysisOutcome]:
        """Switch language; re-analyze only when an image already has a result."""
        self.language = language
        if self.image is None or self.outcome is None:
            return None
        log_event("plant_language_changed", language=language)
        return self.analyze(self.image)
