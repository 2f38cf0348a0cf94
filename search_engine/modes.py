from django.db import models


class SearchMode(models.TextChoices):
    """How the terms of a query are combined when matching documents."""

    AND = "and", "All words (AND)"
    OR = "or", "Any word (OR)"
    EXACT = "exact", "Exact phrase"

    @classmethod
    def parse(cls, value):
        """
        Map a user supplied mode string to a SearchMode.

        Matching is case-insensitive. Missing or unknown values fall back
        to AND.
        """
        normalized = (value or "").strip().lower()
        if normalized == cls.OR.value:
            return cls.OR
        if normalized == cls.EXACT.value:
            return cls.EXACT
        return cls.AND
