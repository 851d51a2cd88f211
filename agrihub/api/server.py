import traceback
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, Form, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..application.services.forum_service import ForumBoard
from ..application.services.listings_service import (
    donate,
    equipment_share,
    land_share,
    list_farmer_cases,
    propose_land_price,
    request_rental,
    search_equipment,
    search_land,
)
from ..application.services.news_service import DEFAULT_CATEGORY, NEWS_CATEGORIES, fetch_news
from ..application.services.pest_service import analyze_pest
from ..application.services.plant_service import analyze_plant
from ..application.services.price_service import load_price_options, predict_prices
from ..application.services.session import new_tracker
from ..application.services.soil_service import SOIL_TEXTURES, analyze_soil
from ..data.catalog import EQUIPMENT_LOCATIONS, EQUIPMENT_TYPES, LAND_STATES
from ..domain.errors import AgriHubError
from ..domain.listings import ALL_LOCATIONS, ALL_TYPES
from ..domain.speech import prepare_utterance
from ..infra.config import get_config
from ..observability.logging_utils import (
    init_logging,
    log_event,
    reset_trace_id,
    set_trace_id,
)
from ..observability.otel import init_otel, instrument_fastapi, instrument_httpx
from ..schemas import (
    AnalysisOutcome,
    DonationRequest,
    ForumQuestion,
    ImageUpload,
    PricePredictionInput,
    ProposalRequest,
    RentalQuoteRequest,
    SoilTestInput,
    SpeechPrepareRequest,
    SpeechPreparation,
)


_PROJECT_ROOT = Path(__file__).resolve().parents[2]
TRACE_HEADER = "X-Trace-Id"
ERROR_STATUS = {
    "invalid_input": 400,
    "not_found": 404,
    "upstream": 502,
    "malformed": 502,
    "device": 503,
}


def _error_log_path() -> Path:
    configured = get_config().api_error_log_path
    return Path(configured) if configured else _PROJECT_ROOT / "api_errors.log"


def _append_error_log(message: str, tb: str = "") -> None:
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        with _error_log_path().open("a", encoding="utf-8") as handle:
            handle.write(f"[{timestamp}] {message}\n{tb}\n")
    except OSError:
        pass


@lru_cache(maxsize=1)
def get_forum_board() -> ForumBoard:
    return ForumBoard()


@asynccontextmanager
async def lifespan(_: FastAPI):
    cfg = get_config()
    init_logging(log_path=cfg.log_path)
    log_path = _error_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.touch(exist_ok=True)
    except OSError:
        pass
    log_event("api_started", error_log=str(log_path))
    yield


app = FastAPI(title="AgriHub", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
if init_otel():
    instrument_fastapi(app)
    instrument_httpx()


@app.middleware("http")
async def _trace_id_middleware(request: Request, call_next):
    trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
    token = set_trace_id(trace_id)
    try:
        response = await call_next(request)
    finally:
        reset_trace_id(token)
    response.headers[TRACE_HEADER] = trace_id
    return response


@app.exception_handler(AgriHubError)
async def _agrihub_error_handler(request: Request, exc: AgriHubError):
    detail = {"error": exc.message, "kind": exc.kind}
    missing = getattr(exc, "missing_fields", None)
    if missing:
        detail["missing_fields"] = missing
    return JSONResponse(status_code=ERROR_STATUS.get(exc.kind, 500), content={"detail": detail})


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    _append_error_log(f"Unhandled error at {request.url.path}: {exc}", tb)
    return JSONResponse(status_code=500, content={"detail": {"error": str(exc)}})


def _outcome_response(outcome: AnalysisOutcome) -> JSONResponse:
    status_code = 200 if outcome.ok else ERROR_STATUS.get(outcome.error_kind or "", 500)
    return JSONResponse(status_code=status_code, content=outcome.model_dump(mode="json"))


def _read_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    if upload is None:
        return None
    return ImageUpload(
        filename=upload.filename or "upload",
        mime_type=upload.content_type or "application/octet-stream",
        data=upload.file.read(),
    )


@app.get("/health")
def health():
    cfg = get_config()
    return {
        "status": "ok",
        "genai_configured": bool(cfg.genai_api_key),
        "news_configured": bool(cfg.news_api_key),
    }


@app.post("/api/v1/analysis/plant")
def plant_analysis(image: UploadFile = File(None), language: str = Form("en")):
    outcome = analyze_plant(_read_upload(image), language, tracker=new_tracker())
    return _outcome_response(outcome)


@app.post("/api/v1/analysis/pest")
def pest_analysis(image: UploadFile = File(None)):
    outcome = analyze_pest(_read_upload(image), tracker=new_tracker())
    return _outcome_response(outcome)


@app.get("/api/v1/analysis/soil/textures")
def soil_textures():
    return {"textures": SOIL_TEXTURES}


@app.post("/api/v1/analysis/soil")
def soil_analysis(soil: SoilTestInput):
    return _outcome_response(analyze_soil(soil, tracker=new_tracker()))


@app.get("/api/v1/forum/threads")
def forum_threads():
    return {"threads": get_forum_board().threads}


@app.post("/api/v1/forum/threads")
def forum_ask(question: ForumQuestion):
    board = get_forum_board()
    outcome, index = board.ask(question.question, tracker=new_tracker())
    if index is None:
        return _outcome_response(outcome)
    return {"thread": board.threads[index], "index": index, "notices": outcome.notices}


@app.post("/api/v1/forum/threads/{index}/like")
def forum_like(index: int):
    return get_forum_board().toggle_like(index)


@app.get("/api/v1/prices/options")
def price_options():
    return load_price_options(tracker=new_tracker())


@app.post("/api/v1/prices/predict")
def price_predict(selection: PricePredictionInput):
    return _outcome_response(predict_prices(selection, tracker=new_tracker()))


@app.get("/api/v1/news")
def news(category: str = DEFAULT_CATEGORY):
    return {
        "category": category,
        "categories": NEWS_CATEGORIES,
        "articles": fetch_news(category),
    }


@app.get("/api/v1/equipment")
def equipment(
    q: Optional[str] = None,
    equipment_type: str = Query(ALL_TYPES, alias="type"),
    location: str = ALL_LOCATIONS,
):
    return {
        "items": search_equipment(q, equipment_type, location),
        "types": EQUIPMENT_TYPES,
        "locations": EQUIPMENT_LOCATIONS,
    }


@app.post("/api/v1/equipment/{equipment_id}/quote")
def equipment_quote(equipment_id: int, request: RentalQuoteRequest):
    return request_rental(equipment_id, request.days)


@app.get("/api/v1/equipment/{equipment_id}/share")
def equipment_share_payload(equipment_id: int):
    return equipment_share(equipment_id)


@app.get("/api/v1/land")
def land(q: Optional[str] = None, state: Optional[str] = None):
    return {"items": search_land(q, state), "states": LAND_STATES}


@app.post("/api/v1/land/{land_id}/proposal")
def land_proposal(land_id: int, request: ProposalRequest):
    return propose_land_price(land_id, request.price)


@app.get("/api/v1/land/{land_id}/share")
def land_share_payload(land_id: int):
    return land_share(land_id)


@app.get("/api/v1/farmers")
def farmers():
    return {"cases": list_farmer_cases()}


@app.post("/api/v1/farmers/{farmer_id}/donations")
def farmer_donation(farmer_id: int, request: DonationRequest):
    return donate(farmer_id, request.amount, request.message)


@app.post("/api/v1/speech/prepare", response_model=SpeechPreparation)
def speech_prepare(request: SpeechPrepareRequest):
    prepared = prepare_utterance(request.title, request.content, request.language, request.voices)
    return SpeechPreparation(**prepared)
