import importlib.util
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_MISSING_DEPS = any(
    importlib.util.find_spec(name) is None
    for name in ("fastapi", "langgraph", "httpx", "pydantic_settings", "opentelemetry")
)

if not _MISSING_DEPS:
    from fastapi.testclient import TestClient

    from agrihub.api.server import app, get_forum_board
    from agrihub.domain.errors import UpstreamRequestError
    from agrihub.infra.config import get_config
    from agrihub.schemas import ForumMessage, ForumThread

_CLIENT_TARGET = "agrihub.agent.workflows.analysis_graph.get_generative_client"
_NEWS_TARGET = "agrihub.application.services.news_service.search_news"
_FORUM_LOG_TARGET = "agrihub.application.services.forum_service.log_event"


class _FakeClient:
    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.calls = 0

    def send(self, model, body):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return {"candidates": [{"content": {"parts": [{"text": self.text}]}}]}


@unittest.skipUnless(not _MISSING_DEPS, "fastapi stack is not installed")
class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._reset_backup = os.environ.get("PROGRESS_RESET_SECONDS")
        os.environ["PROGRESS_RESET_SECONDS"] = "0"
        get_config.cache_clear()
        get_forum_board.cache_clear()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        if self._reset_backup is None:
            os.environ.pop("PROGRESS_RESET_SECONDS", None)
        else:
            os.environ["PROGRESS_RESET_SECONDS"] = self._reset_backup
        get_config.cache_clear()
        get_forum_board.cache_clear()


class HealthTests(ApiTestCase):
    def test_health_and_trace_header(self) -> None:
        response = self.client.get("/health", headers={"X-Trace-Id": "trace-123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.headers["X-Trace-Id"], "trace-123")


class AnalysisEndpointTests(ApiTestCase):
    def test_plant_without_image_is_bad_request(self) -> None:
        with patch(_CLIENT_TARGET, return_value=_FakeClient("unused")):
            response = self.client.post("/api/v1/analysis/plant", data={"language": "en"})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error_kind"], "invalid_input")
        self.assertEqual(body["error"], "Please select an image file")

    def test_plant_with_image_returns_sections(self) -> None:
        fake = _FakeClient("1. Tomato\n2. Early blight on lower leaves")
        with patch(_CLIENT_TARGET, return_value=fake):
            response = self.client.post(
                "/api/v1/analysis/plant",
                files={"image": ("leaf.jpg", b"\xff\xd8jpeg", "image/jpeg")},
                data={"language": "hi"},
            )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(
            [section["title"] for section in body["sections"]],
            ["Plant Identification", "Health Status"],
        )
        self.assertEqual(body["progress"], [20, 40, 60, 80, 100, 0])

    def test_text_upload_is_rejected(self) -> None:
        fake = _FakeClient("unused")
        with patch(_CLIENT_TARGET, return_value=fake):
            response = self.client.post(
                "/api/v1/analysis/pest",
                files={"image": ("notes.txt", b"hello", "text/plain")},
            )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Please select a valid image file")
        self.assertEqual(fake.calls, 0)

    def test_pest_upstream_failure_is_bad_gateway(self) -> None:
        fake = _FakeClient(error=UpstreamRequestError("timeout"))
        with patch(_CLIENT_TARGET, return_value=fake):
            response = self.client.post(
                "/api/v1/analysis/pest",
                files={"image": ("bug.png", b"\x89PNG", "image/png")},
            )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["error"], "Failed to analyze the image")

    def test_soil_missing_fields(self) -> None:
        response = self.client.post("/api/v1/analysis/soil", json={"pH": "6.8", "texture": "Clay"})
        self.assertEqual(response.status_code, 400)
        missing = response.json()["data"]["missingFields"]
        self.assertNotIn("ph", missing)
        self.assertIn("organic_matter", missing)

    def test_soil_report(self) -> None:
        form = {
            "pH": "7.1",
            "nitrogen": "240",
            "phosphorus": "18",
            "potassium": "150",
            "organicMatter": "1.2",
            "texture": "Clay",
            "moisture": "30",
            "conductivity": "0.6",
        }
        reply = '```json\n{"healthScore": "64", "summary": "Low organic matter", "nutrients": [{"name": "Nitrogen", "level": 240, "status": "Medium"}]}\n```'
        with patch(_CLIENT_TARGET, return_value=_FakeClient(reply)):
            response = self.client.post("/api/v1/analysis/soil", json=form)
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["healthScore"], "64")
        self.assertEqual(data["nutrients"][0]["level"], "240")

    def test_soil_textures(self) -> None:
        textures = self.client.get("/api/v1/analysis/soil/textures").json()["textures"]
        self.assertIn("Sandy Loam", textures)


class ForumEndpointTests(ApiTestCase):
    _REPLY = '{"responses": [{"author": "Arjun Reddy", "village": "Devgarh", "experience": 9, "content": "Rotate crops."}]}'

    def test_ask_then_like(self) -> None:
        with patch(_CLIENT_TARGET, return_value=_FakeClient(self._REPLY)):
            response = self.client.post("/api/v1/forum/threads", json={"question": "Why are my leaves yellow?"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["index"], 0)
        self.assertEqual(body["thread"]["responses"][0]["author"], "Arjun Reddy")

        liked = self.client.post("/api/v1/forum/threads/0/like").json()
        self.assertEqual(liked["likes"], 1)
        self.assertTrue(liked["liked"])
        self.assertEqual(len(self.client.get("/api/v1/forum/threads").json()["threads"]), 1)

    def test_reply_carries_its_own_thread_when_another_lands_first(self) -> None:
        board = get_forum_board()

        def concurrent_append(event, **fields):
            board.threads.append(
                ForumThread(question=ForumMessage(author="You", content="Other question"))
            )

        with patch(_CLIENT_TARGET, return_value=_FakeClient(self._REPLY)), patch(
            _FORUM_LOG_TARGET, side_effect=concurrent_append
        ):
            response = self.client.post("/api/v1/forum/threads", json={"question": "Why are my leaves yellow?"})
        body = response.json()
        self.assertEqual(body["index"], 0)
        self.assertEqual(body["thread"]["question"]["content"], "Why are my leaves yellow?")
        self.assertEqual(len(board.threads), 2)

    def test_like_missing_thread(self) -> None:
        response = self.client.post("/api/v1/forum/threads/3/like")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["kind"], "not_found")

    def test_empty_question(self) -> None:
        response = self.client.post("/api/v1/forum/threads", json={"question": " "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Please enter a question")


class PriceEndpointTests(ApiTestCase):
    def test_options_fall_back_to_empty(self) -> None:
        with patch(_CLIENT_TARGET, return_value=_FakeClient("no json here")):
            response = self.client.get("/api/v1/prices/options")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["qualityGrades"], [])

    def test_unsupported_duration(self) -> None:
        selection = {
            "vegetable": "Potato",
            "state": "Bihar",
            "season": "Rabi",
            "quality": "A",
            "marketType": "Wholesale",
            "duration": 4,
        }
        response = self.client.post("/api/v1/prices/predict", json=selection)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["data"]["missingFields"], ["duration"])


class NewsEndpointTests(ApiTestCase):
    def test_articles_are_shaped(self) -> None:
        raw = [
            {
                "title": "Monsoon arrives early",
                "description": "Sowing begins",
                "url": "https://news.example/monsoon",
                "image": "",
                "publishedAt": "2024-05-15T08:00:00Z",
                "source": {"name": "Agri Daily"},
            },
            "not an article",
        ]
        with patch(_NEWS_TARGET, return_value=raw) as search:
            response = self.client.get("/api/v1/news", params={"category": "Organic Farming"})
        search.assert_called_once_with("organic farming")
        self.assertEqual(response.status_code, 200)
        articles = response.json()["articles"]
        self.assertEqual(len(articles), 1)
        self.assertEqual(articles[0]["publishedLabel"], "May 15, 2024")
        self.assertEqual(articles[0]["sourceName"], "Agri Daily")
        self.assertIsNone(articles[0]["image"])

    def test_unknown_category(self) -> None:
        response = self.client.get("/api/v1/news", params={"category": "cricket"})
        self.assertEqual(response.status_code, 400)

    def test_upstream_failure(self) -> None:
        with patch(_NEWS_TARGET, side_effect=UpstreamRequestError("Failed to fetch news")):
            response = self.client.get("/api/v1/news")
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"]["error"], "Failed to fetch news")


class MarketplaceEndpointTests(ApiTestCase):
    def test_equipment_filters(self) -> None:
        response = self.client.get(
            "/api/v1/equipment", params={"type": "Tractor", "location": "Telangana"}
        )
        body = response.json()
        self.assertEqual([item["id"] for item in body["items"]], [2])
        self.assertIn("pricePerDay", body["items"][0])
        self.assertIn("All Types", body["types"])

    def test_rental_quote(self) -> None:
        quote = self.client.post("/api/v1/equipment/3/quote", json={"days": "5"}).json()
        self.assertEqual(quote["total"], 25000)
        self.assertEqual(quote["equipmentId"], 3)

    def test_unknown_equipment(self) -> None:
        response = self.client.post("/api/v1/equipment/99/quote", json={"days": 2})
        self.assertEqual(response.status_code, 404)

    def test_land_search_and_proposal(self) -> None:
        lands = self.client.get("/api/v1/land", params={"state": "Telangana"}).json()["items"]
        self.assertEqual(len(lands), 3)
        proposal = self.client.post("/api/v1/land/1/proposal", json={"price": 1000}).json()
        self.assertEqual(proposal["value"], 38250)
        self.assertEqual(proposal["minPrice"], 38250)
        share = self.client.get("/api/v1/land/1/share").json()
        self.assertEqual(share["title"], "Lease Fertile Paddy Field")
        self.assertTrue(share["url"].endswith("/land-lease"))

    def test_farmers_and_donation(self) -> None:
        cases = self.client.get("/api/v1/farmers").json()["cases"]
        self.assertEqual(len(cases), 3)
        self.assertIn("progressPercent", cases[0])
        receipt = self.client.post("/api/v1/farmers/1/donations", json={"amount": 750}).json()
        self.assertEqual(receipt["message"], "Thank you for your generous donation of ₹750!")

    def test_zero_donation_rejected(self) -> None:
        response = self.client.post("/api/v1/farmers/2/donations", json={"amount": "0"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["missing_fields"], ["amount"])

    def test_non_finite_donation_rejected(self) -> None:
        for amount in ("nan", "inf", "-inf"):
            with self.subTest(amount=amount):
                response = self.client.post("/api/v1/farmers/1/donations", json={"amount": amount})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["detail"]["kind"], "invalid_input")


class SpeechEndpointTests(ApiTestCase):
    def test_prepare_picks_voice(self) -> None:
        payload = {
            "title": "Care Recommendations",
            "content": "Water: daily",
            "language": "te",
            "voices": [{"id": "a", "lang": "en-US"}, {"id": "b", "lang": "te-IN"}],
        }
        body = self.client.post("/api/v1/speech/prepare", json=payload).json()
        self.assertEqual(body["voice_id"], "b")
        self.assertEqual(body["text"], "Care Recommendations. Water, daily")


if __name__ == "__main__":
    unittest.main()
