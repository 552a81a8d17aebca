"""
app/services/csv_ingestion_service.py

Service layer for the earnings CSV ingestion workflow.

One call turns the bytes of an exported spreadsheet into a base
``AnalysisResult``:

    1. decode and parse the CSV header and rows
    2. inspect headers for missing required column families (warnings only)
    3. resolve every row into its canonical shape
    4. aggregate per video and per label
    5. build the sorted, summarised snapshot

Only an unreadable file is fatal. Missing columns and unparsable cells are
recovered locally and reported as data.
"""

from __future__ import annotations

import csv
import io
import logging
from functools import lru_cache
from typing import Any, Iterable, Mapping, Sequence

from app.domain.earnings import AnalysisResult
from app.mappers.field_resolver import FieldResolver
from app.services.aggregation_service import RowAggregator
from app.services.summary_builder import SummaryBuilder
from app.validators.cell_parser import is_completely_empty_row

logger = logging.getLogger(__name__)


class CSVReadError(ValueError):
    """
    Raised when the upload cannot be parsed as tabular data at all.
    """


class CSVIngestionService:
    """
    Coordinates CSV parsing, field resolution, aggregation, and summary.
    """

    def __init__(
        self,
        *,
        resolver: FieldResolver | None = None,
        summary_builder: SummaryBuilder | None = None,
    ) -> None:
        self._resolver = resolver or FieldResolver()
        self._summary_builder = summary_builder or SummaryBuilder()

    def analyze_csv(self, *, content: bytes, file_name: str) -> AnalysisResult:
        """
        Parse CSV bytes and build the base analysis result.

        Raises:
            CSVReadError: The bytes are not UTF-8 text, the CSV is malformed,
                or the header row is missing.
        """

        try:
            text = content.decode("utf-8-sig")
            reader = csv.DictReader(io.StringIO(text, newline=""))
            headers = list(reader.fieldnames or [])
            if not any(header and header.strip() for header in headers):
                raise CSVReadError("CSV header row is missing.")
            rows = list(reader)
        except UnicodeDecodeError as exc:
            raise CSVReadError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise CSVReadError(f"Invalid CSV format: {exc}") from exc

        logger.info("Parsed CSV file=%r headers=%d rows=%d", file_name, len(headers), len(rows))
        return self.analyze_rows(headers=headers, rows=rows, file_name=file_name)

    def analyze_rows(
        self,
        *,
        headers: Sequence[str],
        rows: Iterable[Mapping[Any, Any]],
        file_name: str,
    ) -> AnalysisResult:
        """
        Build the base analysis result from already-parsed rows.
        """

        report = self._resolver.inspect_headers(headers)
        aggregator = RowAggregator()
        aggregator.add_all(
            self._resolver.resolve_row(raw_row)
            for raw_row in rows
            if not is_completely_empty_row(raw_row)
        )
        return self._summary_builder.build(
            aggregator,
            file_name=file_name,
            missing_columns=report.missing_columns,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service.
    """
    return CSVIngestionService()
