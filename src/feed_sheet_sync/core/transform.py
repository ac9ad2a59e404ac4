"""Row transformation: flatten catalog offers into a rectangular table."""

import re
from typing import Any, Iterable, Mapping, Sequence

from ..models.catalog import CatalogEntry, Table
from ..models.column_spec import (
    AttributeColumn,
    ColumnKind,
    ColumnSpec,
    FieldColumn,
    ParamColumn,
    PictureImageColumn,
    PicturesColumn,
    UnknownColumn,
)

LIST_SEPARATOR = "; "

_FIRST_PARENS = re.compile(r"\(([^)]*)\)")
_ALL_PARENS = re.compile(r"\s*\([^)]*\)")


def pick_field(values: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first value among ``keys`` that is present and not None, else ``""``."""
    for key in keys:
        value = values.get(key)
        if value is not None:
            return value
    return ""


def pick_param(entry: CatalogEntry, names: Iterable[str]) -> Any:
    """Return the value of the first ``<param>`` matching ``names`` (in ``names`` order)."""
    for name in names:
        for param_name, value in entry.params:
            if param_name == name:
                return value if value is not None else ""
    return ""


def raw_value(entry: CatalogEntry, column: ColumnKind) -> Any:
    """Compute a column value for one offer before post-processing."""
    if isinstance(column, FieldColumn):
        value = pick_field(entry.fields, column.from_keys)
        if isinstance(value, list):
            return LIST_SEPARATOR.join(str(item) for item in value)
        return value
    if isinstance(column, AttributeColumn):
        value = pick_field(entry.attributes, column.from_keys)
        if value == "" and column.key:
            return entry.attributes.get(column.key, "")
        return value
    if isinstance(column, ParamColumn):
        return pick_param(entry, column.names)
    if isinstance(column, PicturesColumn):
        return LIST_SEPARATOR.join(entry.pictures)
    if isinstance(column, PictureImageColumn):
        return f'=IMAGE("{entry.pictures[0]}")' if entry.pictures else ""
    if isinstance(column, UnknownColumn):
        return ""
    raise TypeError(f"Unsupported column specification: {type(column).__name__}")


def post_process(value: Any, column: ColumnSpec) -> Any:
    """
    Apply the column's text rules in order: inside_parens_only, strip_parens, clean_contains.

    Empty values and values of columns without rules are returned unchanged.
    """
    if value is None or value == "":
        return value
    if not (column.inside_parens_only or column.strip_parens or column.clean_contains):
        return value

    text = str(value)

    if column.inside_parens_only:
        match = _FIRST_PARENS.search(text)
        text = match.group(1).strip() if match else text.strip()

    if column.strip_parens:
        text = _ALL_PARENS.sub("", text).strip()

    if column.clean_contains and any(part in text for part in column.clean_contains):
        text = ""

    return text


def build_row(entry: CatalogEntry, columns: Sequence[ColumnKind]) -> list:
    return [post_process(raw_value(entry, column), column) for column in columns]


def build_rows(entries: Iterable[CatalogEntry], columns: Sequence[ColumnKind]) -> Table:
    """
    Flatten offers into a table.

    Args:
        entries: Parsed offers
        columns: Ordered column specifications

    Returns:
        Table whose header is the column headers and with one row per offer
    """
    header = [column.header for column in columns]
    rows = [build_row(entry, columns) for entry in entries]
    return Table(header=header, rows=rows)
