"""Feed to Google Sheets synchronization pipeline."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pandas as pd

from ..models.catalog import CatalogEntry, Table
from ..models.config import SyncConfig
from ..utils.auth import GoogleCredentials, credentials_from_env, get_google_sheets_client
from ..utils.lock import ExecutionLock
from ..utils.retry import with_retry
from .fetcher import fetch_offers
from .meta import MetaRecorder, make_meta_record
from .provisioner import SheetProvisioner
from .sheets_client import SheetsClient
from .transform import build_rows
from .writer import ChunkedWriter

logger = logging.getLogger(__name__)

# Headroom added to the destination grid on top of the table size.
EXTRA_ROWS = 10
EXTRA_COLS = 5


def preview_table(table: Table, limit: int = 5) -> pd.DataFrame:
    """Log the first rows of the table and return them as a DataFrame."""
    df = pd.DataFrame(table.rows, columns=table.header)
    logger.info(f"📥 Table has {len(df)} rows and {table.width} columns. First {min(limit, len(df))}:")
    for idx, row in df.head(limit).iterrows():
        values = " | ".join(str(value)[:40] for value in row.tolist())
        logger.info(f"  {idx + 1}. {values}")
    return df


class FeedSheetSync:
    """
    One-shot synchronization of a YML feed into a worksheet.

    The run holds an execution lock for ``config.service_name``. While holding it
    the run fetches the feed, builds the table, provisions and clears the
    destination, writes the table in chunks and finally records the run in the
    meta sheet. The meta record is written last, so a missing or stale record
    means the last run did not complete.
    """

    def __init__(
        self,
        config: SyncConfig,
        client_factory: Optional[Callable[[], SheetsClient]] = None,
        fetcher: Callable[[str, float], List[CatalogEntry]] = fetch_offers,
        sleep: Callable[[float], None] = time.sleep,
        lock_dir: Optional[Union[str, Path]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        credentials_loader: Optional[Callable[[], GoogleCredentials]] = None
    ):
        """
        Initialize the sync.

        Args:
            config: Validated configuration
            client_factory: Builds the spreadsheet client; called only after the
                lock is held (default: service account from the environment)
            fetcher: Downloads and parses the feed
            sleep: Function used for retry backoff
            lock_dir: Directory holding the lock file (default: temp directory)
            clock: Returns the current time for the meta record
            credentials_loader: Reads the service account right after the lock
                is taken, before the feed is fetched (default: environment)
        """
        self.config = config
        self.client_factory = client_factory or self._default_client
        self.fetcher = fetcher
        self.sleep = sleep
        self.lock_dir = lock_dir
        self.clock = clock
        self.credentials_loader = credentials_loader
        self._credentials: Optional[GoogleCredentials] = None

    def _load_credentials(self) -> GoogleCredentials:
        loader = self.credentials_loader or credentials_from_env
        return loader()

    def _default_client(self) -> SheetsClient:
        credentials = self._credentials or self._load_credentials()
        return SheetsClient(get_google_sheets_client(credentials), self.config.sheet_id)

    def _retry(self, label: str, operation: Callable[[], Any]) -> Any:
        return with_retry(
            label, operation, self.config.write_retries, self.config.retry_delay, sleep=self.sleep
        )

    def fetch_table(self) -> Table:
        """Fetch the feed (with retries) and flatten it."""
        cfg = self.config
        offers = self._retry("fetch feed", lambda: self.fetcher(cfg.feed_url, cfg.fetch_timeout))
        return build_rows(offers, cfg.columns)

    def publish(self, client: SheetsClient, table: Table) -> Dict[str, Any]:
        """Provision, clear and write the destination sheet, then record the run."""
        cfg = self.config
        provisioner = SheetProvisioner(client, cfg.write_retries, cfg.retry_delay, sleep=self.sleep)
        writer = ChunkedWriter(
            client, cfg.chunk_rows, cfg.write_retries, cfg.retry_delay, sleep=self.sleep
        )
        recorder = MetaRecorder(
            client, provisioner, cfg.write_retries, cfg.retry_delay, sleep=self.sleep
        )

        sheet = provisioner.ensure_sheet(cfg.sheet_name)
        provisioner.resize_sheet(sheet, len(table.values) + EXTRA_ROWS, table.width + EXTRA_COLS)
        writer.clear(cfg.sheet_name)
        chunks = writer.write(cfg.sheet_name, table)

        now = self.clock() if self.clock else None
        record = make_meta_record(table.data_row_count, cfg.timezone, now)
        recorder.record(cfg.meta_sheet_name, record)

        return {
            "success": True,
            "count": table.data_row_count,
            "columns": table.width,
            "chunks": chunks,
            "dry_run": False,
        }

    def run(self, dry_run: bool = False) -> Dict[str, Any]:
        """
        Run the pipeline under the execution lock.

        Args:
            dry_run: If True, fetch and transform only; no spreadsheet calls are made

        Returns:
            Dictionary with results

        Raises:
            LockContentionError: If another run for the same service holds the lock
            ConfigError: If the service account is missing (checked before the fetch)
        """
        cfg = self.config
        with ExecutionLock(cfg.service_name, lock_dir=self.lock_dir):
            if not dry_run:
                self._credentials = self._load_credentials()

            table = self.fetch_table()

            if dry_run:
                preview_table(table)
                logger.info(f"DRY RUN: Would write {table.data_row_count} rows to '{cfg.sheet_name}'")
                return {
                    "success": True,
                    "count": table.data_row_count,
                    "columns": table.width,
                    "chunks": 0,
                    "dry_run": True,
                }

            client = self.client_factory()
            return self.publish(client, table)
