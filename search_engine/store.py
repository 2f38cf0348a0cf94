import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .models import DEFAULT_FAVICON_PATH, Document

logger = logging.getLogger(__name__)

VECTOR_FIELDS = ("title_vector", "description_vector", "combined_vector")


@dataclass
class SeedReport:
    """Outcome of a bulk seeding run."""

    total: int = 0
    inserted: int = 0
    errors: int = 0
    batches: int = 0
    failed_batches: List[int] = field(default_factory=list)
    duration: float = 0.0

    @property
    def rate(self) -> float:
        return self.inserted / self.duration if self.duration > 0 else 0.0


def prepare_document(record: Mapping) -> Optional[Document]:
    """
    Build an unsaved Document from a seed record.

    Returns None when the record lacks a title or a page name, or when its
    created_at is neither empty, an ISO-8601 string nor a datetime.
    """
    title = str(record.get("title") or "").strip()
    page_name = str(record.get("page_name") or "").strip()
    if not title or not page_name:
        return None

    created_at = record.get("created_at")
    if created_at is None or created_at == "":
        created_at = timezone.now()
    elif isinstance(created_at, str):
        try:
            created_at = parse_datetime(created_at.strip())
        except ValueError:
            return None
        if created_at is None:
            return None
    elif not isinstance(created_at, datetime):
        return None

    if timezone.is_naive(created_at):
        created_at = timezone.make_aware(created_at)

    return Document(
        title=title,
        description=record.get("description") or None,
        page_name=page_name,
        page_fav_icon_path=record.get("page_fav_icon_path") or DEFAULT_FAVICON_PATH,
        page_url=record.get("page_url") or None,
        created_at=created_at,
    )


class DocumentStore:
    """
    Read and seed access to the search_items table on one database alias.

    Each search runs its ranked page query and its count query inside a
    single atomic block, which also bounds a per-request statement timeout
    on PostgreSQL.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS, statement_timeout_ms: Optional[int] = None):
        self.using = using
        self.statement_timeout_ms = statement_timeout_ms

    @property
    def connection(self):
        return connections[self.using]

    def documents(self):
        return Document.objects.using(self.using).defer(*VECTOR_FIELDS)

    def execute(self, plan, offset: int, limit: int) -> Tuple[List[Document], int]:
        """Return one ranked page of the plan's candidates and the candidate count."""
        with transaction.atomic(using=self.using):
            self._apply_deadline()
            rows = list(plan.rank(self.documents())[offset : offset + limit])
            total = plan.count(self.documents()).count()
        return rows, total

    def count(self) -> int:
        return Document.objects.using(self.using).count()

    def _apply_deadline(self):
        if not self.statement_timeout_ms or self.connection.vendor != "postgresql":
            return
        with self.connection.cursor() as cursor:
            cursor.execute("SELECT set_config('statement_timeout', %s, true)", [str(self.statement_timeout_ms)])

    def analyze(self):
        """Refresh planner statistics after bulk loads."""
        if self.connection.vendor != "postgresql":
            return
        with self.connection.cursor() as cursor:
            cursor.execute(f"ANALYZE {Document._meta.db_table}")
        logger.info(f"Planner statistics updated for {Document._meta.db_table}")

    def seed(
        self,
        records: Iterable[Mapping],
        batch_size: int = 500,
        progress: Optional[Callable[[int, SeedReport], None]] = None,
    ) -> SeedReport:
        """
        Insert records in sequential batches.

        Every batch commits or rolls back as a whole. Records without a
        title or page name, or with an unusable created_at, are skipped and
        counted as errors; a failing batch is logged and counted, and
        seeding moves on to the next one.
        """
        records = list(records)
        report = SeedReport(total=len(records))
        start_time = time.perf_counter()

        for i in range(0, len(records), batch_size):
            batch = records[i : i + batch_size]
            batch_num = i // batch_size + 1
            report.batches += 1

            documents = []
            skipped = 0
            for offset, record in enumerate(batch):
                document = prepare_document(record)
                if document is None:
                    logger.warning(f"Skipping record {i + offset + 1}: missing required field or invalid created_at")
                    skipped += 1
                    continue
                documents.append(document)

            report.errors += skipped
            try:
                self._insert(documents)
            except DatabaseError as e:
                logger.error(f"Failed to insert batch {batch_num}: {e}", exc_info=True)
                report.failed_batches.append(batch_num)
                report.errors += 1
            else:
                report.inserted += len(documents)

            if progress is not None:
                progress(batch_num, report)

        report.duration = time.perf_counter() - start_time
        self.analyze()
        return report

    def _insert(self, documents: List[Document]):
        with transaction.atomic(using=self.using):
            Document.objects.using(self.using).bulk_create(documents)
