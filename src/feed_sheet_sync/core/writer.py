"""Chunked writing of a table into a worksheet."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List

from gspread.utils import absolute_range_name

from ..models.catalog import Table
from ..utils.retry import with_retry
from .sheets_client import SheetsClient

logger = logging.getLogger(__name__)


def col_letter(n: int) -> str:
    """Convert a 1-based column number to its letter form (1 -> A, 27 -> AA)."""
    if n < 1:
        raise ValueError(f"Column number must be positive, got {n}")
    letters = ""
    while n:
        n, remainder = divmod(n - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of rows and the range it is written to."""
    index: int
    start_row: int
    end_row: int
    a1_range: str
    values: List[List[Any]]


def plan_chunks(sheet_name: str, values: List[List[Any]], chunk_rows: int) -> Iterator[Chunk]:
    """
    Split ``values`` into consecutive chunks of at most ``chunk_rows`` rows.

    Row 1 of the sheet receives ``values[0]``; every chunk continues right after
    the previous one. Ranges span column A to the column of the table width.
    """
    if chunk_rows < 1:
        raise ValueError(f"chunk_rows must be positive, got {chunk_rows}")
    if not values:
        return

    last_col = col_letter(len(values[0]))
    for index, offset in enumerate(range(0, len(values), chunk_rows), start=1):
        part = values[offset:offset + chunk_rows]
        start_row = offset + 1
        end_row = offset + len(part)
        a1_range = absolute_range_name(sheet_name, f"A{start_row}:{last_col}{end_row}")
        yield Chunk(index, start_row, end_row, a1_range, part)


class ChunkedWriter:
    """Clear a worksheet and write a table into it chunk by chunk."""

    def __init__(
        self,
        client: SheetsClient,
        chunk_rows: int,
        attempts: int,
        base_delay: float,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client = client
        self.chunk_rows = chunk_rows
        self.attempts = attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def clear(self, sheet_name: str) -> None:
        """Clear every cell of the worksheet."""
        a1_range = absolute_range_name(sheet_name)
        with_retry(
            "clear sheet",
            lambda: self.client.clear_range(a1_range),
            self.attempts,
            self.base_delay,
            sleep=self.sleep,
        )

    def write(self, sheet_name: str, table: Table) -> int:
        """
        Write header and rows. Chunks that succeeded are kept if a later chunk fails.

        Returns:
            Number of chunks written
        """
        written = 0
        for chunk in plan_chunks(sheet_name, table.values, self.chunk_rows):
            with_retry(
                f"write chunk {chunk.index}",
                lambda chunk=chunk: self.client.update_range(chunk.a1_range, chunk.values),
                self.attempts,
                self.base_delay,
                sleep=self.sleep,
            )
            logger.debug(f"Wrote rows {chunk.start_row}-{chunk.end_row} to '{sheet_name}'")
            written += 1
        return written
