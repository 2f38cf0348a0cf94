"""
Retrieval and scoring plans, one per search mode.

A plan owns the filter predicate that defines the candidate set and the
score annotations used to order it. The same predicate drives the count
query, so total_matches never depends on the page window.
"""

import operator
from dataclasses import dataclass
from functools import reduce
from typing import Optional, Sequence, Tuple, Union

from django.contrib.postgres.search import SearchQuery, SearchRank
from django.db.models import Case, F, FloatField, Q, QuerySet, Value, When
from django.db.models.expressions import ExpressionWrapper

from .models import TEXT_SEARCH_CONFIG
from .modes import SearchMode

ORDERING = ("-final_score", "-created_at", "-id")


def _in_title(term: str) -> Q:
    return Q(title__icontains=term)


def _in_description(term: str) -> Q:
    return Q(description__icontains=term)


def _in_either_field(term: str) -> Q:
    return _in_title(term) | _in_description(term)


def _all(conditions) -> Q:
    return reduce(operator.and_, conditions)


def _any(conditions) -> Q:
    return reduce(operator.or_, conditions)


def _score(expression) -> ExpressionWrapper:
    return ExpressionWrapper(expression, output_field=FloatField())


@dataclass(frozen=True)
class ConjunctivePlan:
    """Every term must appear in the title or the description."""

    terms: Tuple[str, ...]

    mode = SearchMode.AND

    def predicate(self) -> Q:
        return _all(_in_either_field(term) for term in self.terms)

    def count(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(self.predicate())

    def rank(self, queryset: QuerySet) -> QuerySet:
        query = SearchQuery(" ".join(self.terms), config=TEXT_SEARCH_CONFIG, search_type="plain")
        return (
            queryset.filter(self.predicate())
            .annotate(
                title_score=Case(
                    When(_all(_in_title(term) for term in self.terms), then=Value(10.0)),
                    When(_any(_in_title(term) for term in self.terms), then=Value(5.0)),
                    default=Value(0.0),
                    output_field=FloatField(),
                ),
                text_rank=SearchRank(F("combined_vector"), query),
                match_bonus=Case(
                    When(
                        _any(_in_title(term) & _in_description(term) for term in self.terms),
                        then=Value(3.0),
                    ),
                    default=Value(0.0),
                    output_field=FloatField(),
                ),
            )
            .annotate(
                final_score=_score(F("title_score") * 4.0 + F("text_rank") * 2.0 + F("match_bonus")),
            )
            .order_by(*ORDERING)
        )


@dataclass(frozen=True)
class DisjunctivePlan:
    """At least one term must appear in the title or the description."""

    terms: Tuple[str, ...]

    mode = SearchMode.OR

    def predicate(self) -> Q:
        return _any(_in_either_field(term) for term in self.terms)

    def count(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(self.predicate())

    def rank(self, queryset: QuerySet) -> QuerySet:
        query = reduce(
            operator.or_,
            (SearchQuery(term, config=TEXT_SEARCH_CONFIG, search_type="plain") for term in self.terms),
        )
        return (
            queryset.filter(self.predicate())
            .annotate(
                title_score=Case(
                    When(_any(_in_title(term) for term in self.terms), then=Value(5.0)),
                    default=Value(0.0),
                    output_field=FloatField(),
                ),
                text_rank=SearchRank(F("combined_vector"), query),
            )
            .annotate(final_score=_score(F("title_score") * 3.0 + F("text_rank") * 2.0))
            .order_by(*ORDERING)
        )


@dataclass(frozen=True)
class PhrasePlan:
    """The whole phrase must appear verbatim or as adjacent lexemes."""

    phrase: str

    mode = SearchMode.EXACT

    def _query(self) -> SearchQuery:
        return SearchQuery(self.phrase, config=TEXT_SEARCH_CONFIG, search_type="phrase")

    def predicate(self) -> Q:
        return (
            Q(title__icontains=self.phrase)
            | Q(description__icontains=self.phrase)
            | Q(combined_vector=self._query())
        )

    def count(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(self.predicate())

    def rank(self, queryset: QuerySet) -> QuerySet:
        return (
            queryset.filter(self.predicate())
            .annotate(
                final_score=Case(
                    When(Q(title__icontains=self.phrase), then=Value(15.0)),
                    When(Q(description__icontains=self.phrase), then=Value(8.0)),
                    default=_score(SearchRank(F("combined_vector"), self._query()) * 5.0),
                    output_field=FloatField(),
                ),
            )
            .order_by(*ORDERING)
        )


SearchPlan = Union[ConjunctivePlan, DisjunctivePlan, PhrasePlan]


def build_plan(mode: SearchMode, terms: Sequence[str], phrase: str = "") -> Optional[SearchPlan]:
    """
    Pick the plan for a mode.

    Returns None when there is nothing to match (no terms for AND/OR, a
    blank phrase for EXACT); callers must not hit the store in that case.
    """
    if mode == SearchMode.EXACT:
        phrase = phrase.strip()
        return PhrasePlan(phrase) if phrase else None
    if not terms:
        return None
    if mode == SearchMode.OR:
        return DisjunctivePlan(tuple(terms))
    return ConjunctivePlan(tuple(terms))
