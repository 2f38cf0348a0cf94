class SearchError(Exception):
    """Base class for errors raised by the search engine."""


class ValidationError(SearchError):
    """Raised when a query is empty after trimming."""


class RetrievalError(SearchError):
    """Raised when the document store cannot answer a search."""
