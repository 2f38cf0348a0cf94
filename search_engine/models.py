from django.contrib.postgres.indexes import GinIndex, OpClass
from django.contrib.postgres.search import SearchVector, SearchVectorField
from django.db import models
from django.db.models.functions import Upper
from django.utils import timezone

TEXT_SEARCH_CONFIG = "english"
DEFAULT_FAVICON_PATH = "/images/favicon/default-favicon.ico"


class Document(models.Model):
    """
    Represents a searchable page in the corpus.

    Attributes:
        title (str): Page title, always present (max 255 characters)
        description (str): Optional long description of the page
        page_name (str): Display name of the site the page belongs to
        page_fav_icon_path (str): Path of the favicon shown next to results
        page_url (str): Optional link to the page
        created_at (datetime): Insertion time, newest first on equal scores

    The three vectors are generated columns maintained by PostgreSQL. Title
    lexemes carry weight A and description lexemes weight B in
    combined_vector, so ts_rank favours title hits.
    """

    title = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    page_name = models.CharField(max_length=255)
    page_fav_icon_path = models.CharField(max_length=255, default=DEFAULT_FAVICON_PATH)
    page_url = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    title_vector = models.GeneratedField(
        expression=SearchVector("title", config=TEXT_SEARCH_CONFIG),
        output_field=SearchVectorField(),
        db_persist=True,
    )
    description_vector = models.GeneratedField(
        expression=SearchVector("description", config=TEXT_SEARCH_CONFIG),
        output_field=SearchVectorField(),
        db_persist=True,
    )
    combined_vector = models.GeneratedField(
        expression=(
            SearchVector("title", config=TEXT_SEARCH_CONFIG, weight="A")
            + SearchVector("description", config=TEXT_SEARCH_CONFIG, weight="B")
        ),
        output_field=SearchVectorField(),
        db_persist=True,
    )

    class Meta:
        db_table = "search_items"
        required_db_vendor = "postgresql"
        indexes = [
            GinIndex(fields=["title_vector"], name="idx_title_tsv"),
            GinIndex(fields=["description_vector"], name="idx_description_tsv"),
            GinIndex(fields=["combined_vector"], name="idx_combined_tsv"),
            # icontains compiles to UPPER(col) LIKE UPPER(%s) on PostgreSQL
            GinIndex(OpClass(Upper("title"), name="gin_trgm_ops"), name="idx_title_trgm"),
            GinIndex(OpClass(Upper("description"), name="gin_trgm_ops"), name="idx_description_trgm"),
            models.Index(fields=["-created_at"], name="idx_created_at"),
        ]

    def __str__(self):
        return f"Document({self.pk}: {self.title[:50]})"
