import re
from typing import List

MIN_TERM_LENGTH = 2

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_query(raw: str, max_length: int) -> str:
    """Trim a raw query and silently cut it down to max_length characters."""
    return (raw or "").strip()[:max_length].strip()


def tokenize(raw: str) -> List[str]:
    """
    Split a query into lowercase keyword terms.

    Whitespace runs are collapsed, the text is lowercased and split on
    spaces, and terms shorter than MIN_TERM_LENGTH characters are dropped.
    """
    collapsed = _WHITESPACE_RE.sub(" ", raw or "").strip().lower()
    if not collapsed:
        return []
    return [word for word in collapsed.split(" ") if len(word) >= MIN_TERM_LENGTH]


def extract_terms(raw: str, max_terms: int) -> List[str]:
    """Tokenize, drop repeated terms (first occurrence wins) and keep at most max_terms."""
    terms = []
    seen = set()
    for term in tokenize(raw):
        if term in seen:
            continue
        seen.add(term)
        terms.append(term)
    return terms[:max_terms]
