"""Sheet provisioning: make sure a worksheet exists and is large enough."""

import logging
import time
from typing import Callable, Optional

from ..exceptions import RemoteOperationError
from ..models.catalog import SheetDescriptor
from ..utils.retry import with_retry
from .sheets_client import SheetsClient

logger = logging.getLogger(__name__)


class SheetProvisioner:
    """Create and grow worksheets before anything is written to them."""

    def __init__(
        self,
        client: SheetsClient,
        attempts: int,
        base_delay: float,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client = client
        self.attempts = attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def _retry(self, label, operation):
        return with_retry(label, operation, self.attempts, self.base_delay, sleep=self.sleep)

    def find_sheet(self, title: str, label: str = "get spreadsheet") -> Optional[SheetDescriptor]:
        metadata = self._retry(label, self.client.fetch_metadata)
        for sheet in metadata.get("sheets", []):
            if sheet.get("properties", {}).get("title") == title:
                return SheetDescriptor.from_metadata(sheet)
        return None

    def ensure_sheet(self, title: str) -> SheetDescriptor:
        """
        Return the descriptor of ``title``, creating the sheet if needed.

        Raises:
            RemoteOperationError: If the sheet is still missing after creation
        """
        descriptor = self.find_sheet(title)
        if descriptor is not None:
            return descriptor

        logger.info(f"📝 Worksheet '{title}' not found. Creating it.")
        self._retry(
            "add sheet",
            lambda: self.client.batch_update([{"addSheet": {"properties": {"title": title}}}]),
        )

        descriptor = self.find_sheet(title, label="refresh spreadsheet")
        if descriptor is None:
            raise RemoteOperationError(f"Sheet '{title}' not found after creation")
        return descriptor

    def resize_sheet(self, descriptor: SheetDescriptor, needed_rows: int, needed_cols: int) -> bool:
        """
        Grow the sheet grid to at least ``needed_rows`` x ``needed_cols``. Never shrinks.

        Returns:
            True if a resize request was sent
        """
        if needed_rows <= descriptor.row_count and needed_cols <= descriptor.column_count:
            return False

        rows = max(descriptor.row_count, needed_rows)
        cols = max(descriptor.column_count, needed_cols)
        logger.info(f"Resizing '{descriptor.title}' to {rows} rows x {cols} columns")
        self._retry(
            "resize sheet",
            lambda: self.client.batch_update([
                {
                    "updateSheetProperties": {
                        "properties": {
                            "sheetId": descriptor.sheet_id,
                            "gridProperties": {"rowCount": rows, "columnCount": cols},
                        },
                        "fields": "gridProperties(rowCount,columnCount)",
                    }
                }
            ]),
        )
        return True
