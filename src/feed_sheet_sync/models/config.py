"""Sync configuration model."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .column_spec import DEFAULT_COLUMNS, ColumnKind


@dataclass(frozen=True)
class SyncConfig:
    """Validated configuration for one feed.

    Attributes:
        feed_url: URL of the YML feed
        sheet_id: Google Spreadsheet ID
        sheet_name: Worksheet receiving the offers
        meta_sheet_name: Worksheet receiving the status record
        chunk_rows: Maximum rows sent per write request
        write_retries: Attempts per remote operation
        retry_delay_ms: Base backoff delay in milliseconds
        columns: Ordered column specifications
        name: Service name, used to name the execution lock
        fetch_timeout: HTTP timeout for the feed request, in seconds
        timezone: Timezone used for the status record date and time
    """
    feed_url: str
    sheet_id: str
    sheet_name: str
    meta_sheet_name: str = ""
    chunk_rows: int = 1500
    write_retries: int = 3
    retry_delay_ms: int = 2000
    columns: Tuple[ColumnKind, ...] = DEFAULT_COLUMNS
    name: Optional[str] = None
    fetch_timeout: float = 60.0
    timezone: str = "UTC"

    def __post_init__(self):
        if not self.meta_sheet_name:
            object.__setattr__(self, "meta_sheet_name", f"{self.sheet_name}_meta")

    @property
    def service_name(self) -> str:
        return self.name or self.sheet_name

    @property
    def retry_delay(self) -> float:
        """Base backoff delay in seconds."""
        return self.retry_delay_ms / 1000.0
