"""Catalog, table and sheet models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """One ``<offer>`` from the feed.

    Attributes:
        fields: Child tag name to value; repeated tags map to a list
        attributes: Attributes of the ``<offer>`` element itself
        pictures: Picture URLs in document order
        params: ``(name, value)`` pairs of ``<param>`` children in document order
    """
    fields: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, str] = field(default_factory=dict)
    pictures: Tuple[str, ...] = ()
    params: Tuple[Tuple[str, Any], ...] = ()


@dataclass
class Table:
    """Header row plus data rows, all of the same width."""
    header: List[str]
    rows: List[List[Any]] = field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.header)

    @property
    def data_row_count(self) -> int:
        return len(self.rows)

    @property
    def values(self) -> List[List[Any]]:
        """Header followed by data rows, as written to the sheet."""
        return [list(self.header)] + [list(row) for row in self.rows]


@dataclass(frozen=True)
class SheetDescriptor:
    """Identity and grid size of a sheet inside a spreadsheet."""
    sheet_id: int
    title: str
    row_count: int = 0
    column_count: int = 0
    conditional_format_count: int = 0

    @classmethod
    def from_metadata(cls, sheet: Dict[str, Any]) -> "SheetDescriptor":
        """Build a descriptor from one entry of the spreadsheet metadata ``sheets`` list."""
        props = sheet.get("properties", {})
        grid = props.get("gridProperties", {})
        return cls(
            sheet_id=props.get("sheetId"),
            title=props.get("title", ""),
            row_count=int(grid.get("rowCount") or 0),
            column_count=int(grid.get("columnCount") or 0),
            conditional_format_count=len(sheet.get("conditionalFormats") or []),
        )


@dataclass(frozen=True)
class MetaRecord:
    """Status of the last successful run."""
    date: str
    time: str
    rows: int

    def to_row(self) -> List[Any]:
        return ["last_update_date", self.date, "last_update_time", self.time, "rows", self.rows]
