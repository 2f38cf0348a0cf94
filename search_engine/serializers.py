from rest_framework import serializers

from .modes import SearchMode

MAX_PAGE = 100_000


class StatusResponseSerializer(serializers.Serializer):
    """
    Serializer for the /status/ endpoint response.

    Returns the number of documents in the corpus.
    """
    num_of_indexed_items = serializers.IntegerField(
        help_text="Number of documents indexed in the system"
    )


class SearchRequestSerializer(serializers.Serializer):
    """
    Serializer for the /search/ endpoint query parameters.

    Unknown modes fall back to AND rather than failing validation.
    """
    q = serializers.CharField(
        required=True,
        allow_blank=False,
        trim_whitespace=False,
        help_text="Free-text query (e.g., 'electric cars')"
    )
    page = serializers.IntegerField(
        required=False,
        default=1,
        max_value=MAX_PAGE,
        help_text="1-based page number, values below 1 are treated as 1"
    )
    mode = serializers.CharField(
        required=False,
        default=SearchMode.AND.value,
        help_text="One of 'and', 'or', 'exact'"
    )
    lucky = serializers.BooleanField(
        required=False,
        default=False,
        help_text="Redirect to the URL of the best match instead of listing results"
    )

    def validate_q(self, value):
        """Ensure the query is not empty after stripping whitespace."""
        if not value or not value.strip():
            raise serializers.ValidationError("Query cannot be empty")
        return value

    def validate_page(self, value):
        return max(1, value)

    def validate_mode(self, value):
        return SearchMode.parse(value)


class SearchResultSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="document.id")
    title = serializers.CharField(source="document.title")
    description = serializers.CharField(source="document.description", allow_null=True)
    page_name = serializers.CharField(source="document.page_name")
    page_fav_icon_path = serializers.CharField(source="document.page_fav_icon_path")
    page_url = serializers.CharField(source="document.page_url", allow_null=True)
    created_at = serializers.DateTimeField(source="document.created_at")
    score = serializers.FloatField()


class SearchResponseSerializer(serializers.Serializer):
    """
    Serializer for the /search/ endpoint response.

    Built from a ResultPage.
    """
    results = SearchResultSerializer(many=True)
    total_matches = serializers.IntegerField(
        help_text="Number of documents matching the query across all pages"
    )
    elapsed_time = serializers.FloatField(
        help_text="Seconds spent planning and running the store queries"
    )
    page = serializers.IntegerField()
    per_page = serializers.IntegerField()
    total_pages = serializers.IntegerField()
    mode = serializers.CharField(source="mode.value")
    mode_label = serializers.CharField(source="mode.label")


class ErrorResponseSerializer(serializers.Serializer):
    """
    Serializer for error responses.
    """
    error = serializers.CharField(help_text="Error message")
    details = serializers.DictField(
        required=False,
        help_text="Additional error details"
    )
