from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ...agent.workflows.analysis_graph import (
    FAIL,
    StructuredRequestSpec,
    degrade_with,
    run_structured_request,
)
from ...domain.errors import InvalidInputError
from ...domain.progress import PARSE, ProgressTracker
from ...infra.config import get_config
from ...prompts.analysis_prompts import (
    build_price_options_prompt,
    build_price_prediction_prompt,
)
from ...prompts.report_messages import (
    MISSING_FIELDS_MESSAGE,
    PRICE_FAILURE_MESSAGE,
    PRICE_SUCCESS_MESSAGE,
)
from ...schemas import (
    AnalysisOutcome,
    GenerationConfig,
    PriceOptions,
    PricePrediction,
    PricePredictionInput,
    ResultSection,
)
from .session import missing_fields, rejected_outcome


PRICE_OPTIONS_REQUEST_NAME = "price_options"
PRICE_PREDICTION_REQUEST_NAME = "price_prediction"
PREDICTION_DURATIONS = (3, 6, 9)
PRICE_REQUIRED_FIELDS = ["vegetable", "state", "season", "quality", "market_type"]
OPTIONS_GENERATION = GenerationConfig(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=1024
)
PREDICTION_GENERATION = GenerationConfig(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=2048
)


def _empty_options(_text: str) -> Tuple[Dict[str, Any], List[ResultSection]]:
    return PriceOptions().model_dump(by_alias=True), []


def price_options_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=PRICE_OPTIONS_REQUEST_NAME,
        model=get_config().text_model,
        generation=OPTIONS_GENERATION,
        schema=PriceOptions,
        fallback=degrade_with(_empty_options),
        failure_message="Failed to get options",
    )


def price_prediction_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=PRICE_PREDICTION_REQUEST_NAME,
        model=get_config().text_model,
        generation=PREDICTION_GENERATION,
        schema=PricePrediction,
        fallback=FAIL,
        failure_message=PRICE_FAILURE_MESSAGE,
        parse_failure_message=PRICE_FAILURE_MESSAGE,
        stage_notices={PARSE: PRICE_SUCCESS_MESSAGE},
    )


def load_price_options(tracker: Optional[ProgressTracker] = None) -> PriceOptions:
    """Form choices for the prediction page; empty lists when the model cannot supply them."""
    outcome = run_structured_request(
        price_options_spec(), build_price_options_prompt(), tracker=tracker
    )
    if not outcome.ok:
        return PriceOptions()
    return PriceOptions.model_validate(outcome.data)


def predict_prices(
    selection: PricePredictionInput, tracker: Optional[ProgressTracker] = None
) -> AnalysisOutcome:
    missing = missing_fields(selection.model_dump(), PRICE_REQUIRED_FIELDS)
    if missing:
        return rejected_outcome(
            PRICE_PREDICTION_REQUEST_NAME,
            InvalidInputError(MISSING_FIELDS_MESSAGE, missing),
        )
    if selection.duration not in PREDICTION_DURATIONS:
        return rejected_outcome(
            PRICE_PREDICTION_REQUEST_NAME,
            InvalidInputError(
                f"Duration must be one of {', '.join(map(str, PREDICTION_DURATIONS))} months",
                ["duration"],
            ),
        )
    return run_structured_request(
        price_prediction_spec(), build_price_prediction_prompt(selection), tracker=tracker
    )


def price_prediction(outcome: AnalysisOutcome) -> Optional[PricePrediction]:
    if outcome.status != "ok":
        return None
    return PricePrediction.model_validate(outcome.data)
