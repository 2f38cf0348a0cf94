import logging

from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import RetrievalError
from .search_service import SearchService
from .serializers import (
    ErrorResponseSerializer,
    SearchRequestSerializer,
    SearchResponseSerializer,
    StatusResponseSerializer,
)

logger = logging.getLogger(__name__)


def _error_response(message, status_code):
    serializer = ErrorResponseSerializer(data={"error": message})
    serializer.is_valid()
    return Response(serializer.validated_data, status=status_code)


class StatusView(APIView):
    """
    GET /status/

    Returns the number of indexed documents.

    Response:
    {
        "num_of_indexed_items": N
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.search_service = SearchService.from_settings()

    def get(self, request):
        try:
            num_indexed = self.search_service.store.count()
        except Exception as e:
            logger.error(f"Error in StatusView: {e}", exc_info=True)
            return _error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

        serializer = StatusResponseSerializer(data={"num_of_indexed_items": num_indexed})
        serializer.is_valid(raise_exception=True)

        logger.info(f"Status check: {num_indexed} documents")

        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class SearchView(APIView):
    """
    GET /search/?q=electric+cars&page=1&mode=and

    Runs a ranked full-text search and returns one page of results.

    Response:
    {
        "results": [{"id": 1, "title": "...", ..., "score": 41.2}, ...],
        "total_matches": 25,
        "elapsed_time": 0.0042,
        "page": 1,
        "per_page": 10,
        "total_pages": 3,
        "mode": "and",
        "mode_label": "All words (AND)"
    }

    With lucky=true the best match's URL is returned as a 302 redirect
    when there is one.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.search_service = SearchService.from_settings()

    def get(self, request):
        input_serializer = SearchRequestSerializer(data=request.query_params)
        if not input_serializer.is_valid():
            return Response(
                {"error": "Invalid input", "details": input_serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        params = input_serializer.validated_data
        query, mode = params["q"], params["mode"]

        if params["lucky"]:
            try:
                url = self.search_service.feeling_lucky(query, mode=mode)
            except RetrievalError as e:
                return _error_response(str(e), status.HTTP_503_SERVICE_UNAVAILABLE)
            if url:
                return HttpResponseRedirect(url)

        logger.info(f"Processing search: mode={mode.value} q={query!r} page={params['page']}")

        try:
            result_page = self.search_service.search(query, page=params["page"], mode=mode)
        except RetrievalError as e:
            return _error_response(str(e), status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(SearchResponseSerializer(result_page).data, status=status.HTTP_200_OK)


class HealthCheckView(APIView):
    """
    GET /health/

    Simple health check endpoint to verify the service is running.
    """

    def get(self, request):
        """Return a simple health status."""
        return Response({"status": "healthy"}, status=status.HTTP_200_OK)
