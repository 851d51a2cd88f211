from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..domain.errors import UpstreamRequestError
from ..observability.logging_utils import log_event, log_failure
from .config import get_config


FETCH_FAILED_MESSAGE = "Failed to fetch news"
INVALID_DATA_MESSAGE = "Invalid data received"


def build_news_params(query: str) -> Dict[str, Any]:
    cfg = get_config()
    params: Dict[str, Any] = {
        "q": query,
        "lang": cfg.news_language,
        "country": cfg.news_country,
        "max": cfg.news_max_articles,
    }
    if cfg.news_api_key:
        params["apikey"] = cfg.news_api_key
    return params


def search_news(query: str) -> List[Dict[str, Any]]:
    """GET the news-search endpoint and return the raw ``articles`` list."""
    cfg = get_config()
    if not cfg.news_api_key:
        raise UpstreamRequestError("NEWS_API_KEY is not configured")
    try:
        with httpx.Client(timeout=cfg.news_timeout_seconds, trust_env=False) as client:
            response = client.get(cfg.news_api_url, params=build_news_params(query))
    except httpx.HTTPError as exc:
        log_failure("news_transport_error", query=query, error=str(exc))
        raise UpstreamRequestError(FETCH_FAILED_MESSAGE) from exc
    if response.is_error:
        log_failure("news_http_error", query=query, status_code=response.status_code)
        raise UpstreamRequestError(FETCH_FAILED_MESSAGE, status_code=response.status_code)
    try:
        payload: Optional[object] = response.json()
    except ValueError as exc:
        raise UpstreamRequestError(INVALID_DATA_MESSAGE) from exc
    articles = payload.get("articles") if isinstance(payload, dict) else None
    if not isinstance(articles, list):
        raise UpstreamRequestError(INVALID_DATA_MESSAGE)
    log_event("news_fetched", query=query, count=len(articles))
    return articles
