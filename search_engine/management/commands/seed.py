"""
Django management command to seed the search corpus.

Usage:
    python manage.py seed data/pages.json
    python manage.py seed data/pages.jsonl --batch-size 1000
    python manage.py seed data/pages.json --noinput

The input is either a JSON array of records or JSON Lines, one record per
line. Recognised keys: title, description, page_name, page_fav_icon_path,
page_url, created_at. Records without a title or page_name are skipped.

This command:
1. Loads the records from the file
2. Inserts them in batches, each batch in its own transaction
3. Refreshes the planner statistics of the table
"""

import json
import logging
import os
from typing import Dict, List

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from search_engine.store import DocumentStore, SeedReport

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Management command to bulk load documents into the search corpus."""

    help = "Seed the search corpus from a JSON or JSON Lines file"

    def add_arguments(self, parser):
        """Add command-line arguments."""
        parser.add_argument("path", type=str, help="Path to the JSON / JSON Lines records file")
        parser.add_argument(
            "--batch-size",
            type=int,
            default=settings.SEED_BATCH_SIZE,
            help=f"Records per transaction (default: {settings.SEED_BATCH_SIZE})",
        )
        parser.add_argument(
            "--noinput",
            "--no-input",
            action="store_false",
            dest="interactive",
            help="Do not ask for confirmation",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        path = options["path"]
        batch_size = options["batch_size"]

        if batch_size < 1:
            raise CommandError("--batch-size must be a positive integer")

        records = self.load_records(path)
        total_batches = (len(records) + batch_size - 1) // batch_size

        self.stdout.write(f"Total records to insert: {len(records):,}")
        self.stdout.write(f"Batch size: {batch_size}")
        self.stdout.write(f"Database: {settings.DATABASES['default']['NAME']}")

        if options["interactive"]:
            confirm = input("This will insert all records into the database.\nContinue? (yes/no): ")
            if confirm.strip().lower() != "yes":
                self.stdout.write("Operation cancelled.")
                return

        store = DocumentStore()

        def progress(batch_num: int, report: SeedReport):
            percent = (report.inserted / report.total) * 100 if report.total else 100.0
            if batch_num in report.failed_batches:
                self.stdout.write(self.style.ERROR(f"✗ Batch {batch_num}/{total_batches} rolled back"))
            else:
                self.stdout.write(
                    f"Batch {batch_num}/{total_batches}: {report.inserted:,} / {report.total:,} ({percent:.1f}%)"
                )

        self.stdout.write("Starting insertion...")
        report = store.seed(records, batch_size=batch_size, progress=progress)

        self.stdout.write(self.style.SUCCESS("\n=== Seeding Complete ==="))
        self.stdout.write(f"Records inserted: {report.inserted:,}")
        if report.errors:
            self.stdout.write(self.style.WARNING(f"Errors/Skipped: {report.errors}"))
        self.stdout.write(f"Time taken: {report.duration:.2f} seconds")
        self.stdout.write(f"Records per second: {int(report.rate):,}")
        self.stdout.write(f"Total records in database: {store.count():,}")

    def load_records(self, path: str) -> List[Dict]:
        """
        Load seed records from a JSON array or a JSON Lines file.

        Args:
            path: File to read

        Returns:
            List of record dicts
        """
        if not os.path.exists(path):
            raise CommandError(f"Records file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise CommandError(f"Could not read {path}: {e}")

        if content.lstrip().startswith("["):
            try:
                records = json.loads(content)
            except json.JSONDecodeError as e:
                raise CommandError(f"Invalid JSON in {path}: {e}")
        else:
            records = []
            for line_num, line in enumerate(content.splitlines(), 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed line {line_num} in {path}")

        records = [record for record in records if isinstance(record, dict)]
        if not records:
            raise CommandError(f"No records found in {path}")
        return records
