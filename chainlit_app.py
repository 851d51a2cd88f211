import asyncio
import os
from pathlib import Path

import chainlit as cl
import httpx

from agrihub.application.services.news_service import NEWS_CATEGORIES, NEWS_LOAD_FAILED_MESSAGE
from agrihub.prompts.analysis_prompts import PLANT_LANGUAGE_NAMES
from agrihub.prompts.report_messages import (
    REVEAL_INTERVAL_SECONDS,
    format_forum_thread,
    format_news_articles,
    format_pest_report,
    format_plant_sections,
    iter_reveal_chunks,
)
from agrihub.schemas import ForumThread, NewsArticle, PestReport, ResultSection

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
PEST_KEYWORDS = ("pest", "insect", "bug", "worm", "aphid")
LANGUAGES = PLANT_LANGUAGE_NAMES
REVEAL_CHUNK = 24


def _detail_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        if body.get("error"):
            return body["error"]
        detail = body.get("detail")
        if isinstance(detail, dict):
            return detail.get("error") or str(detail)
    return str(body)


async def _reveal(text: str) -> None:
    msg = cl.Message(content="")
    for chunk in iter_reveal_chunks(text, REVEAL_CHUNK):
        await msg.stream_token(chunk)
        await asyncio.sleep(REVEAL_INTERVAL_SECONDS)
    await msg.send()


async def _analyze_image(element, prompt: str) -> None:
    wants_pest = any(word in prompt.lower() for word in PEST_KEYWORDS)
    kind = "pest" if wants_pest else "plant"
    language = cl.user_session.get("language") or "en"
    data = Path(element.path).read_bytes()
    files = {"image": (element.name, data, element.mime or "application/octet-stream")}
    form = {} if wants_pest else {"language": language}

    await cl.Message(content=f"Analyzing your {kind}... This may take a few moments").send()
    try:
        async with httpx.AsyncClient(base_url=BACKEND_URL, timeout=180) as client:
            response = await client.post(f"/api/v1/analysis/{kind}", files=files, data=form)
    except httpx.HTTPError as exc:
        await cl.Message(content=f"Request failed: {exc}").send()
        return
    if response.is_error:
        await cl.Message(content=_detail_message(response)).send()
        return

    outcome = response.json()
    if kind == "pest":
        text = format_pest_report(PestReport.model_validate(outcome["data"]))
    else:
        sections = [ResultSection.model_validate(item) for item in outcome.get("sections") or []]
        text = format_plant_sections(sections)
    await _reveal(text)
    progress = " → ".join(str(value) for value in outcome.get("progress") or [])
    if progress:
        await cl.Message(content=f"Progress: {progress}", author="debug", indent=1).send()


async def _show_news(category: str) -> None:
    category = category or "agriculture"
    try:
        async with httpx.AsyncClient(base_url=BACKEND_URL, timeout=30) as client:
            response = await client.get("/api/v1/news", params={"category": category})
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPError:
        await cl.Message(content=NEWS_LOAD_FAILED_MESSAGE).send()
        return
    articles = [NewsArticle.model_validate(item) for item in payload.get("articles") or []]
    if not articles:
        await cl.Message(content="No news found for this category.").send()
        return
    await cl.Message(content=format_news_articles(articles, category)).send()


async def _ask_forum(question: str) -> None:
    try:
        async with httpx.AsyncClient(base_url=BACKEND_URL, timeout=60) as client:
            response = await client.post("/api/v1/forum/threads", json={"question": question})
    except httpx.HTTPError as exc:
        await cl.Message(content=f"Request failed: {exc}").send()
        return
    if response.is_error:
        await cl.Message(content=_detail_message(response)).send()
        return
    thread = ForumThread.model_validate(response.json()["thread"])
    await _reveal(format_forum_thread(thread))


@cl.on_chat_start
async def start():
    cl.user_session.set("language", "en")
    categories = ", ".join(NEWS_CATEGORIES)
    await cl.Message(
        content=(
            "🌾 Welcome to AgriHub!\n"
            "- Attach a plant photo for a health analysis (mention pests for a pest report)\n"
            f"- `/news [category]` for the latest headlines ({categories})\n"
            "- `/lang en|hi|te` to change the plant analysis language\n"
            "- Anything else is asked to fellow farmers in the forum"
        )
    ).send()


@cl.on_message
async def on_message(message: cl.Message):
    prompt = (message.content or "").strip()
    images = [element for element in message.elements or [] if getattr(element, "path", None)]
    if images:
        await _analyze_image(images[0], prompt)
        return

    if prompt.startswith("/news"):
        await _show_news(prompt[len("/news"):].strip().lower())
        return

    if prompt.startswith("/lang"):
        language = prompt[len("/lang"):].strip().lower()
        if language not in LANGUAGES:
            await cl.Message(content="Supported languages: en, hi, te").send()
            return
        cl.user_session.set("language", language)
        await cl.Message(content=f"Plant analysis language set to {LANGUAGES[language]}.").send()
        return

    if not prompt:
        await cl.Message(content="Please enter a question").send()
        return
    await _ask_forum(prompt)
