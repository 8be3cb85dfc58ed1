"""Table extraction from Confluence storage-format markup.

The scan is pattern based and non-nested: a table inside another table's cell
ends the outer match at the inner ``</table>``, so nested tables are not
reconstructed. Ill-formed or unclosed markup simply produces no match.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from confluence_bridge.services.confluence.sanitizer import sanitize_fragment

_FLAGS = re.IGNORECASE | re.DOTALL

_TABLE = re.compile(r"<table\b[^>]*>(.*?)</table>", _FLAGS)
_HEADER_CELL = re.compile(r"<th\b[^>]*>(.*?)</th>", _FLAGS)
_ROW = re.compile(r"<tr\b[^>]*>(.*?)</tr>", _FLAGS)
_DATA_CELL = re.compile(r"<td\b[^>]*>(.*?)</td>", _FLAGS)
_HEADER_MARKER = re.compile(r"<th\b", re.IGNORECASE)

Row = Union[dict[str, str], list[str]]


@dataclass
class Table:
    """One extracted table.

    ``headers`` is None when the source had no (non-empty) header cells; rows
    are then plain lists of cell text instead of label → text mappings.
    """

    rows: list[Row] = field(default_factory=list)
    headers: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.headers:
            data["headers"] = list(self.headers)
        data["rows"] = self.rows
        return data


def _extract_headers(segment: str) -> list[str]:
    headers: list[str] = []
    for match in _HEADER_CELL.finditer(segment):
        label = sanitize_fragment(match.group(1))
        if label:
            headers.append(label)
    return headers


def _label_row(headers: list[str], cells: list[str]) -> dict[str, str]:
    # Extra cells are dropped, missing ones default to ""
    return {
        header: cells[index] if index < len(cells) else ""
        for index, header in enumerate(headers)
    }


def _extract_rows(segment: str, headers: list[str]) -> list[Row]:
    rows: list[Row] = []
    for row_match in _ROW.finditer(segment):
        row_markup = row_match.group(1)
        if _HEADER_MARKER.search(row_markup):
            continue  # header row, already consumed
        cells = [
            sanitize_fragment(cell.group(1))
            for cell in _DATA_CELL.finditer(row_markup)
        ]
        if not cells:
            continue
        rows.append(_label_row(headers, cells) if headers else cells)
    return rows


def iter_tables(markup: str) -> Iterator[Table]:
    """Yield tables found in ``markup`` in document order.

    Tables without any data row are skipped. Never raises on malformed input.
    """
    for table_match in _TABLE.finditer(markup or ""):
        segment = table_match.group(1)
        headers = _extract_headers(segment)
        rows = _extract_rows(segment, headers)
        if rows:
            yield Table(rows=rows, headers=headers or None)


def parse_tables(markup: str) -> list[Table]:
    return list(iter_tables(markup))
