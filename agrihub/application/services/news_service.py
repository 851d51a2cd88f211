from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import ValidationError

from ...domain.errors import InvalidInputError
from ...infra.news_client import search_news
from ...observability.logging_utils import log_failure
from ...schemas import NewsArticle


NEWS_CATEGORIES = {
    "agriculture": "Agriculture",
    "farming": "Farming",
    "organic farming": "Organic",
    "sustainable agriculture": "Sustainable",
}
DEFAULT_CATEGORY = "agriculture"
NEWS_LOAD_FAILED_MESSAGE = "Failed to load news. Please try again later."


def format_published_label(value: str) -> str:
    """ISO timestamp to a reader-friendly date such as ``May 15, 2024``."""
    if not value:
        return ""
    try:
        published = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{published.strftime('%B')} {published.day}, {published.year}"


def _to_article(raw: Dict[str, Any]) -> NewsArticle:
    source = raw.get("source") if isinstance(raw.get("source"), dict) else {}
    published_at = str(raw.get("publishedAt") or "")
    return NewsArticle(
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        url=raw.get("url") or "",
        image=raw.get("image") or None,
        published_at=published_at,
        source_name=source.get("name") or "",
        published_label=format_published_label(published_at),
    )


def fetch_news(category: str = DEFAULT_CATEGORY) -> List[NewsArticle]:
    category = (category or DEFAULT_CATEGORY).strip().lower()
    if category not in NEWS_CATEGORIES:
        raise InvalidInputError(
            f"Unknown news category: {category}", missing_fields=["category"]
        )
    articles: List[NewsArticle] = []
    for raw in search_news(category):
        if not isinstance(raw, dict):
            continue
        try:
            articles.append(_to_article(raw))
        except ValidationError as exc:
            log_failure("news_article_skipped", category=category, error=str(exc))
    return articles
