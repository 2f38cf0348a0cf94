import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from django.db import DatabaseError, InterfaceError

from .exceptions import RetrievalError, ValidationError
from .models import Document
from .modes import SearchMode
from .planner import build_plan
from .store import DocumentStore
from .tokenizer import extract_terms, sanitize_query

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Search failed. Please try again later."


@dataclass(frozen=True)
class ScoredDocument:
    document: Document
    score: float


@dataclass
class ResultPage:
    """One page of ranked results plus the size of the whole candidate set."""

    results: List[ScoredDocument] = field(default_factory=list)
    total_matches: int = 0
    elapsed_time: float = 0.0
    page: int = 1
    per_page: int = 10
    mode: SearchMode = SearchMode.AND

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_matches / self.per_page) if self.per_page else 0


class SearchService:
    """Service turning a user query into a ranked, paginated page of documents."""

    def __init__(
        self,
        store: DocumentStore,
        max_query_length: int = 200,
        per_page: int = 10,
        max_terms: int = 32,
        debug: bool = False,
    ):
        self.store = store
        self.max_query_length = max_query_length
        self.per_page = per_page
        self.max_terms = max_terms
        self.debug = debug

    @classmethod
    def from_settings(cls) -> "SearchService":
        """Build a service wired to the default database using project settings."""
        store = DocumentStore(statement_timeout_ms=settings.SEARCH_STATEMENT_TIMEOUT_MS)
        return cls(
            store,
            max_query_length=settings.MAX_QUERY_LENGTH,
            per_page=settings.RESULTS_PER_PAGE,
            max_terms=settings.SEARCH_MAX_TERMS,
            debug=settings.DEBUG,
        )

    def search(
        self,
        query: str,
        page: int = 1,
        per_page: Optional[int] = None,
        mode: SearchMode = SearchMode.AND,
    ) -> ResultPage:
        """
        Search the corpus.

        Args:
            query: Raw user query, trimmed and truncated to max_query_length
            page: 1-based page number, values below 1 are treated as 1
            per_page: Page size, defaults to the service's per_page
            mode: How terms are combined (AND, OR or EXACT phrase)

        Returns:
            ResultPage with the requested window of the ranked candidates

        Raises:
            RetrievalError: if the store fails; no partial page is returned
            ValueError: if per_page is below 1
        """
        page = max(1, page)
        if per_page is None:
            per_page = self.per_page
        if per_page < 1:
            raise ValueError(f"per_page must be a positive integer, got {per_page}")
        empty = ResultPage(page=page, per_page=per_page, mode=mode)

        query = sanitize_query(query, self.max_query_length)
        if not query:
            return empty

        terms = [] if mode == SearchMode.EXACT else extract_terms(query, self.max_terms)

        start_time = time.perf_counter()
        plan = build_plan(mode, terms, phrase=query)
        if plan is None:
            return empty

        try:
            rows, total = self.store.execute(plan, offset=(page - 1) * per_page, limit=per_page)
        except (DatabaseError, InterfaceError) as e:
            logger.error(f"Search failed for mode={mode.value}: {e}", exc_info=True)
            message = GENERIC_FAILURE_MESSAGE
            if self.debug:
                message = f"{message} ({e})"
            raise RetrievalError(message) from e
        elapsed_time = time.perf_counter() - start_time

        logger.info(
            f"Search completed: mode={mode.value}, terms={len(terms)}, "
            f"matches={total}, page={page}, elapsed={elapsed_time:.4f}s"
        )

        return ResultPage(
            results=[ScoredDocument(document=row, score=float(row.final_score)) for row in rows],
            total_matches=total,
            elapsed_time=elapsed_time,
            page=page,
            per_page=per_page,
            mode=mode,
        )

    def feeling_lucky(self, query: str, mode: SearchMode = SearchMode.AND) -> Optional[str]:
        """Return the URL of the single best match, or None if there is no usable hit."""
        if not sanitize_query(query, self.max_query_length):
            raise ValidationError("Query cannot be empty")

        result_page = self.search(query, page=1, per_page=1, mode=mode)
        if not result_page.results:
            return None
        return result_page.results[0].document.page_url or None
