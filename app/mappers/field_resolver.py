"""
app/mappers/field_resolver.py

Bilingual column resolution for monetization exports.

Exports arrive with either Vietnamese or English headers (sometimes both),
so each canonical field is looked up through an ordered alias list. Header
names are matched exactly; columns outside the alias table are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.domain.earnings import NO_LABEL, NormalizedRow
from app.validators.cell_parser import is_blank, parse_earning, parse_optional_string

logger = logging.getLogger(__name__)

CANONICAL_FIELDS: tuple[str, ...] = (
    "title",
    "label",
    "asset_id",
    "date",
    "description",
)

EARNING_COLUMN_VI = "Thu nhập ước tính khi tham gia chương trình kiếm tiền từ nội dung"
EARNING_COLUMN_EN = "Approximate content monetization earnings"

DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("Title", "Tiêu đề"),
    "label": ("Custom labels", "Nhãn tùy chỉnh"),
    "asset_id": ("Post ID", "Video asset ID", "ID tài sản video"),
    "date": ("Date", "Ngày"),
    "description": ("Description", "Mô tả"),
}

# Summed, never chosen between: a row may fill either, both, or neither.
DEFAULT_EARNING_COLUMNS: tuple[str, ...] = (EARNING_COLUMN_VI, EARNING_COLUMN_EN)

# Families whose total absence is reported back to the caller.
REQUIRED_FAMILIES: dict[str, str] = {
    "asset_id": "Post ID / Video asset ID",
    "description": "Description / Mô tả",
}


@dataclass(frozen=True)
class HeaderReport:
    """
    Result of inspecting one file's header row.
    """

    canonical_to_sources: dict[str, tuple[str, ...]]
    earning_columns: tuple[str, ...]
    missing_columns: tuple[str, ...]


class FieldResolver:
    """
    Maps raw rows with bilingual keys into ``NormalizedRow`` values.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        earning_columns: Sequence[str] | None = None,
        required_families: Mapping[str, str] | None = None,
    ) -> None:
        if aliases is None:
            aliases = DEFAULT_COLUMN_ALIASES
        if earning_columns is None:
            earning_columns = DEFAULT_EARNING_COLUMNS
        if required_families is None:
            required_families = REQUIRED_FAMILIES

        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values) for canonical, values in aliases.items()
        }
        self._earning_columns = tuple(earning_columns)
        self._required_families = dict(required_families)

    def inspect_headers(self, headers: Sequence[str]) -> HeaderReport:
        """
        Report which aliases are present and which required families are absent.
        """

        header_set = {header for header in headers if header}
        present = {
            canonical: tuple(alias for alias in aliases if alias in header_set)
            for canonical, aliases in self._aliases.items()
        }
        missing = tuple(
            display_name
            for canonical, display_name in self._required_families.items()
            if not present.get(canonical)
        )
        if missing:
            logger.warning("Export is missing required column families: %s", ", ".join(missing))
        return HeaderReport(
            canonical_to_sources=present,
            earning_columns=tuple(column for column in self._earning_columns if column in header_set),
            missing_columns=missing,
        )

    def resolve_row(self, raw_row: Mapping[str, Any]) -> NormalizedRow:
        """
        Produce the canonical shape of one raw row.
        """

        label = parse_optional_string(self._lookup(raw_row, "label")) or NO_LABEL
        description = self._lookup(raw_row, "description")
        earning = sum(parse_earning(raw_row.get(column)) for column in self._earning_columns)
        return NormalizedRow(
            title=parse_optional_string(self._lookup(raw_row, "title")),
            label=label,
            asset_id=parse_optional_string(self._lookup(raw_row, "asset_id")),
            date_text=parse_optional_string(self._lookup(raw_row, "date")),
            description="" if description is None else str(description),
            earning=earning,
        )

    def _lookup(self, raw_row: Mapping[str, Any], canonical_field: str) -> Any:
        for alias in self._aliases.get(canonical_field, ()):
            value = raw_row.get(alias)
            if not is_blank(value):
                return value
        return None
