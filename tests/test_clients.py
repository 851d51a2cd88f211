import importlib.util
import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_MISSING_DEPS = any(
    importlib.util.find_spec(name) is None for name in ("httpx", "pydantic_settings")
)

if not _MISSING_DEPS:
    import httpx

    from agrihub.application.services.news_service import format_published_label
    from agrihub.domain.errors import UpstreamRequestError
    from agrihub.infra.config import get_config
    from agrihub.infra.llm import GenerativeClient, extract_reply_text
    from agrihub.infra.news_client import build_news_params, search_news
    from agrihub.schemas import GenerationConfig, ImageUpload

    _REAL_CLIENT = httpx.Client


def _client_factory(handler, seen):
    def _build(*args, **kwargs):
        def _record(request):
            seen.append(request)
            return handler(request)

        kwargs["transport"] = httpx.MockTransport(_record)
        return _REAL_CLIENT(*args, **kwargs)

    return _build


@unittest.skipUnless(not _MISSING_DEPS, "httpx is not installed")
class GenerativeClientTests(unittest.TestCase):
    def _client(self, api_key="test-key"):
        return GenerativeClient("https://genai.example/v1/", api_key, timeout=5)

    def test_generate_posts_body_and_returns_text(self) -> None:
        seen = []

        def handler(request):
            return httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": "hello"}]}}]}
            )

        image = ImageUpload(filename="a.png", mime_type="image/png", data=b"png")
        with patch("agrihub.infra.llm.httpx.Client", _client_factory(handler, seen)):
            text = self._client().generate(
                "Describe", model="vision-x", generation=GenerationConfig(), image=image
            )
        self.assertEqual(text, "hello")
        request = seen[0]
        self.assertEqual(str(request.url), "https://genai.example/v1/models/vision-x:generateContent")
        self.assertEqual(request.headers["x-goog-api-key"], "test-key")
        body = json.loads(request.content)
        self.assertEqual(body["contents"][0]["parts"][1]["inlineData"]["data"], "cG5n")
        self.assertEqual(body["generationConfig"]["maxOutputTokens"], 2048)

    def test_missing_key_fails_without_request(self) -> None:
        seen = []
        with patch("agrihub.infra.llm.httpx.Client", _client_factory(lambda r: httpx.Response(200), seen)):
            with self.assertRaises(UpstreamRequestError):
                self._client(api_key=None).send("m", {"contents": []})
        self.assertEqual(seen, [])

    def test_http_error_carries_status(self) -> None:
        seen = []
        handler = lambda request: httpx.Response(429, text="quota exceeded")
        with patch("agrihub.infra.llm.httpx.Client", _client_factory(handler, seen)):
            with self.assertRaises(UpstreamRequestError) as ctx:
                self._client().send("m", {"contents": []})
        self.assertEqual(ctx.exception.status_code, 429)

    def test_transport_error_is_wrapped(self) -> None:
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with patch("agrihub.infra.llm.httpx.Client", _client_factory(handler, [])):
            with self.assertRaises(UpstreamRequestError):
                self._client().send("m", {"contents": []})

    def test_non_json_body(self) -> None:
        handler = lambda request: httpx.Response(200, text="<html>")
        with patch("agrihub.infra.llm.httpx.Client", _client_factory(handler, [])):
            with self.assertRaises(UpstreamRequestError):
                self._client().send("m", {"contents": []})

    def test_reply_text_tolerates_missing_parts(self) -> None:
        self.assertEqual(extract_reply_text({"candidates": []}), "")
        self.assertEqual(extract_reply_text({"candidates": [{"content": {}}]}), "")
        self.assertEqual(extract_reply_text(None), "")


@unittest.skipUnless(not _MISSING_DEPS, "httpx is not installed")
class NewsClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self._backup = os.environ.get("NEWS_API_KEY")
        os.environ["NEWS_API_KEY"] = "news-key"
        get_config.cache_clear()

    def tearDown(self) -> None:
        if self._backup is None:
            os.environ.pop("NEWS_API_KEY", None)
        else:
            os.environ["NEWS_API_KEY"] = self._backup
        get_config.cache_clear()

    def test_params_include_locale_and_limit(self) -> None:
        params = build_news_params("farming")
        self.assertEqual(params["q"], "farming")
        self.assertEqual(params["max"], 9)
        self.assertEqual(params["apikey"], "news-key")

    def test_articles_returned(self) -> None:
        seen = []
        handler = lambda request: httpx.Response(200, json={"articles": [{"title": "A"}]})
        with patch("agrihub.infra.news_client.httpx.Client", _client_factory(handler, seen)):
            articles = search_news("organic farming")
        self.assertEqual(articles, [{"title": "A"}])
        self.assertEqual(seen[0].url.params["q"], "organic farming")

    def test_missing_articles_is_invalid_data(self) -> None:
        handler = lambda request: httpx.Response(200, json={"errors": ["bad key"]})
        with patch("agrihub.infra.news_client.httpx.Client", _client_factory(handler, [])):
            with self.assertRaises(UpstreamRequestError) as ctx:
                search_news("farming")
        self.assertEqual(ctx.exception.message, "Invalid data received")

    def test_http_error(self) -> None:
        handler = lambda request: httpx.Response(403)
        with patch("agrihub.infra.news_client.httpx.Client", _client_factory(handler, [])):
            with self.assertRaises(UpstreamRequestError) as ctx:
                search_news("farming")
        self.assertEqual(ctx.exception.message, "Failed to fetch news")

    def test_published_label(self) -> None:
        self.assertEqual(format_published_label("2024-05-15T10:30:00Z"), "May 15, 2024")
        self.assertEqual(format_published_label(""), "")
        self.assertEqual(format_published_label("yesterday"), "yesterday")


if __name__ == "__main__":
    unittest.main()
