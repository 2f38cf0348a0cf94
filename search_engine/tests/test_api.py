"""
Tests for the HTTP endpoints.

The search service is replaced by a mock so these run on any database.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from search_engine.exceptions import RetrievalError
from search_engine.models import Document
from search_engine.modes import SearchMode
from search_engine.search_service import GENERIC_FAILURE_MESSAGE, ResultPage, ScoredDocument


def make_document(pk, title, description=None, page_url=None):
    return Document(
        id=pk,
        title=title,
        description=description,
        page_name="Example",
        page_url=page_url,
        created_at=datetime(2026, 1, pk, tzinfo=timezone.utc),
    )


class ServiceMockMixin:

    def setUp(self):
        super().setUp()
        self.service = MagicMock()
        patcher = patch("search_engine.views.SearchService.from_settings", return_value=self.service)
        patcher.start()
        self.addCleanup(patcher.stop)


class SearchAPITests(ServiceMockMixin, APITestCase):
    """Tests for the /search/ endpoint."""

    def setUp(self):
        super().setUp()
        self.url = reverse("search_engine:search")
        self.service.search.return_value = ResultPage(
            results=[
                ScoredDocument(make_document(1, "Electric Cars 2026", page_url="https://example.com/a"), 42.5),
                ScoredDocument(make_document(2, "Cars", "electric vehicles news"), 23.1),
            ],
            total_matches=12,
            elapsed_time=0.0031,
            page=1,
            per_page=10,
            mode=SearchMode.AND,
        )

    def test_search_success(self):
        response = self.client.get(self.url, {"q": "electric cars"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_matches"], 12)
        self.assertEqual(response.data["total_pages"], 2)
        self.assertEqual(response.data["mode"], "and")
        self.assertEqual(response.data["mode_label"], "All words (AND)")
        self.assertEqual([r["id"] for r in response.data["results"]], [1, 2])
        self.assertEqual(response.data["results"][0]["title"], "Electric Cars 2026")
        self.assertEqual(response.data["results"][0]["score"], 42.5)
        self.assertIsNone(response.data["results"][0]["description"])
        self.service.search.assert_called_once_with("electric cars", page=1, mode=SearchMode.AND)

    def test_mode_and_page_are_forwarded(self):
        self.client.get(self.url, {"q": "electric cars", "mode": "EXACT", "page": "3"})
        self.service.search.assert_called_once_with("electric cars", page=3, mode=SearchMode.EXACT)

    def test_unknown_mode_falls_back_to_and(self):
        self.client.get(self.url, {"q": "cars", "mode": "fuzzy"})
        self.assertIs(self.service.search.call_args.kwargs["mode"], SearchMode.AND)

    def test_page_below_one_is_clamped(self):
        self.client.get(self.url, {"q": "cars", "page": "0"})
        self.assertEqual(self.service.search.call_args.kwargs["page"], 1)

    def test_missing_query(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.service.search.assert_not_called()

    def test_whitespace_query(self):
        response = self.client.get(self.url, {"q": "   "})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_page(self):
        response = self.client.get(self.url, {"q": "cars", "page": "two"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_too_large(self):
        response = self.client.get(self.url, {"q": "cars", "page": "99999999999999999999"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.service.search.assert_not_called()

    def test_retrieval_error(self):
        """Test that store failures map to 503 with the generic message."""
        self.service.search.side_effect = RetrievalError(GENERIC_FAILURE_MESSAGE)

        response = self.client.get(self.url, {"q": "cars"})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"], GENERIC_FAILURE_MESSAGE)

    def test_lucky_redirects_to_top_result(self):
        self.service.feeling_lucky.return_value = "https://example.com/a"

        response = self.client.get(self.url, {"q": "electric cars", "lucky": "true"})

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], "https://example.com/a")
        self.service.feeling_lucky.assert_called_once_with("electric cars", mode=SearchMode.AND)
        self.service.search.assert_not_called()

    def test_lucky_without_hit_lists_results(self):
        self.service.feeling_lucky.return_value = None

        response = self.client.get(self.url, {"q": "electric cars", "lucky": "true"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.service.search.assert_called_once()

    def test_lucky_error_returns_503_without_retry(self):
        """Test that a failing lucky search is reported once and not retried as a listing."""
        self.service.feeling_lucky.side_effect = RetrievalError(GENERIC_FAILURE_MESSAGE)

        response = self.client.get(self.url, {"q": "electric cars", "lucky": "1"})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data, {"error": GENERIC_FAILURE_MESSAGE})
        self.service.search.assert_not_called()


class StatusAPITests(ServiceMockMixin, APITestCase):
    """Tests for the /status/ endpoint."""

    def test_status_endpoint(self):
        self.service.store.count.return_value = 5

        response = self.client.get(reverse("search_engine:status"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["num_of_indexed_items"], 5)

    def test_status_store_failure(self):
        self.service.store.count.side_effect = RuntimeError("no database")

        response = self.client.get(reverse("search_engine:status"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Internal server error")


class HealthCheckTests(APITestCase):
    """Tests for the /health/ endpoint."""

    def test_health_check(self):
        """Test the health check endpoint."""
        url = reverse("search_engine:health")
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "healthy")
