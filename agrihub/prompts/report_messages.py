from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional

from ..schemas import (
    ForumThread,
    NewsArticle,
    PestReport,
    PricePrediction,
    ResultSection,
    SoilReport,
)


INVALID_IMAGE_MESSAGE = "Please select a valid image file"
MISSING_IMAGE_MESSAGE = "Please select an image file"
MISSING_FIELDS_MESSAGE = "Please fill all fields"
EMPTY_QUESTION_MESSAGE = "Please enter a question"
PLANT_FAILURE_MESSAGE = "Failed to analyze the image. Please try again."
PEST_FAILURE_MESSAGE = "Failed to analyze the image"
SOIL_FAILURE_MESSAGE = "Failed to analyze soil data"
PARSE_FAILURE_MESSAGE = "Failed to parse analysis results"
FORUM_FAILURE_MESSAGE = "Failed to get responses. Please try again."
PRICE_FAILURE_MESSAGE = "Failed to generate predictions"
ANALYSIS_COMPLETE_MESSAGE = "Analysis complete!"
FORUM_SUCCESS_MESSAGE = "Farmers have responded to your question!"
PRICE_SUCCESS_MESSAGE = "Predictions generated successfully!"

PLANT_SECTION_HEADINGS = [
    ("Plant Identification", "flower"),
    ("Health Status", "heart"),
    ("Current Conditions", "alert"),
    ("Care Recommendations", "droplet"),
]
EXTRA_SECTION_HEADING = ("Additional Information", "sun")
FALLBACK_SECTION_HEADING = ("Analysis Result", "flower")

REVEAL_INTERVAL_SECONDS = 0.03

_SECTION_BREAK = re.compile(r"(?:\r?\n|\r)(?=\d+\.|#\s)")
_SECTION_MARKER = re.compile(r"^(?:\d+\.|#)\s*")


def split_plant_sections(text: str) -> List[ResultSection]:
    """Cut a plant reply at numbered items or top-level headings; empty pieces are dropped."""
    sections: List[ResultSection] = []
    index = 0
    for piece in _SECTION_BREAK.split(text or ""):
        content = _SECTION_MARKER.sub("", piece).strip()
        if not content:
            # blank pieces still consume their heading slot
            index += 1
            continue
        if index < len(PLANT_SECTION_HEADINGS):
            title, icon = PLANT_SECTION_HEADINGS[index]
        else:
            title, icon = EXTRA_SECTION_HEADING
        sections.append(ResultSection(title=title, content=content, icon=icon))
        index += 1
    return sections


def fallback_sections(text: str) -> List[ResultSection]:
    title, icon = FALLBACK_SECTION_HEADING
    return [ResultSection(title=title, content=text or "", icon=icon)]


def iter_reveal_chunks(text: str, size: int = 1) -> Iterator[str]:
    """Yield the text in small pieces, the way the result view types it out."""
    if size < 1:
        raise ValueError("size must be positive")
    for start in range(0, len(text or ""), size):
        yield text[start : start + size]


def format_plant_sections(sections: Iterable[ResultSection]) -> str:
    return "\n\n".join(f"## {section.title}\n{section.content}" for section in sections)


def _bullets(items: Iterable[str]) -> List[str]:
    return [f"- {item}" for item in items if item]


def format_pest_report(report: PestReport) -> str:
    lines = [f"# {report.pest_name}"]
    if report.threat_level:
        lines.append(f"**Threat level:** {report.threat_level}")
    for label, value in (
        ("Characteristics", report.characteristics),
        ("Behavior", report.behavior),
        ("Life cycle", report.life_cycle),
        ("Affected parts", report.affected_parts),
        ("Spread pattern", report.spread_pattern),
    ):
        if value:
            lines.append(f"**{label}:** {value}")
    if report.symptoms:
        lines.append("\n## Symptoms")
        lines.extend(_bullets(report.symptoms))
    if report.treatments:
        lines.append("\n## Treatments")
        for treatment in report.treatments:
            lines.append(f"### {treatment.name}")
            if treatment.description:
                lines.append(treatment.description)
            details = [
                f"{label}: {value}"
                for label, value in (
                    ("Dosage", treatment.dosage),
                    ("Frequency", treatment.frequency),
                    ("Precautions", treatment.precautions),
                )
                if value
            ]
            lines.extend(_bullets(details))
    if report.prevention_measures:
        lines.append("\n## Prevention")
        lines.extend(_bullets(report.prevention_measures))
    if report.natural_enemies:
        lines.append("\n## Natural enemies")
        lines.extend(_bullets(report.natural_enemies))
    if report.recommended_products:
        lines.append("\n## Recommended products")
        for product in report.recommended_products:
            kind = " / ".join(part for part in (product.category, product.type) if part)
            lines.append(f"- {product.name} ({kind})" if kind else f"- {product.name}")
    return "\n".join(lines)


def format_soil_report(report: SoilReport) -> str:
    lines = [f"# Soil health score: {report.health_score}"]
    if report.summary:
        lines.append(report.summary)
    if report.nutrients:
        lines.append("\n## Nutrients")
        for nutrient in report.nutrients:
            status = f" ({nutrient.status})" if nutrient.status else ""
            lines.append(f"- {nutrient.name}: {nutrient.level}{status}")
    if report.recommendations:
        lines.append("\n## Recommendations")
        lines.extend(_bullets(report.recommendations))
    if report.suitable_crops:
        lines.append("\n## Suitable crops")
        lines.append(", ".join(report.suitable_crops))
    return "\n".join(lines)


def format_forum_thread(thread: ForumThread) -> str:
    lines = [f"**{thread.question.author}:** {thread.question.content}"]
    for response in thread.responses:
        lines.append(
            f"\n**{response.author}** ({response.village}, "
            f"{response.experience} years of experience)\n{response.content}"
        )
    return "\n".join(lines)


def format_price_prediction(prediction: PricePrediction, vegetable: str = "") -> str:
    heading = f"# {vegetable} price outlook" if vegetable else "# Price outlook"
    lines = [heading, f"**Current price:** ₹{prediction.current_price:g}/kg"]
    if prediction.predictions:
        lines.append("\n| Month | Price | Change | Supply | Demand |")
        lines.append("|---|---|---|---|---|")
        for row in prediction.predictions:
            lines.append(
                f"| {row.month} | ₹{row.price:g} | {row.change:+.2f}% "
                f"| {row.supply_status} | {row.demand_trend} |"
            )
    if prediction.market_factors:
        lines.append("\n## Market factors")
        lines.extend(
            _bullets(f"{item.factor}: {item.description}" for item in prediction.market_factors)
        )
    if prediction.recommendations:
        lines.append("\n## Recommendations")
        lines.extend(
            _bullets(f"{item.type}: {item.suggestion}" for item in prediction.recommendations)
        )
    for label, value in (
        ("Quality premium", prediction.quality_premium),
        ("Market insights", prediction.market_insights),
        ("Regional trends", prediction.regional_trends),
    ):
        if value:
            lines.append(f"**{label}:** {value}")
    return "\n".join(lines)


def format_news_articles(articles: Iterable[NewsArticle], category: Optional[str] = None) -> str:
    lines = [f"# {category.title()} news" if category else "# Agriculture news"]
    for article in articles:
        lines.append(f"\n### [{article.title}]({article.url})")
        meta = " · ".join(part for part in (article.source_name, article.published_label) if part)
        if meta:
            lines.append(f"_{meta}_")
        if article.description:
            lines.append(article.description)
    return "\n".join(lines)
