"""End-to-end tests for FeedSheetSync with in-memory collaborators."""

import os
import tempfile
import unittest
from datetime import datetime

import pytz

from feed_sheet_sync.core.sync import FeedSheetSync
from feed_sheet_sync.exceptions import ConfigError, EmptyFeedError, LockContentionError, RemoteOperationError
from feed_sheet_sync.models.catalog import CatalogEntry
from feed_sheet_sync.models.config import SyncConfig
from feed_sheet_sync.utils.auth import GoogleCredentials
from feed_sheet_sync.utils.lock import ExecutionLock
from fakes import FakeSheetsClient, RecordingSleep

WIDGET = CatalogEntry(
    fields={"price": 100, "vendorCode": "X1", "picture": "url", "name": "Widget", "quantity_in_stock": 5},
    attributes={"id": "1"},
    pictures=("url",),
    params=(("Розмір", "M"),),
)


class FakeFetcher:
    def __init__(self, offers=None, error=None):
        self.offers = offers if offers is not None else [WIDGET]
        self.error = error
        self.calls = []

    def __call__(self, url, timeout):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return self.offers


class TestFeedSheetSync(unittest.TestCase):
    """Test cases for the full pipeline."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.config = SyncConfig(
            feed_url="https://example.com/feed.xml",
            sheet_id="sheet-123",
            sheet_name="lispo",
            chunk_rows=2,
            write_retries=2,
            retry_delay_ms=1000,
            timezone="UTC",
        )
        self.client = FakeSheetsClient()
        self.factory_calls = 0
        self.credential_loads = 0
        self.sleep = RecordingSleep()

    def tearDown(self):
        self.tmp.cleanup()

    def _factory(self):
        self.factory_calls += 1
        return self.client

    def _credentials(self):
        self.credential_loads += 1
        return GoogleCredentials(client_email="sync@example.iam.gserviceaccount.com", private_key="key")

    def make_sync(self, fetcher, config=None, credentials_loader=None):
        return FeedSheetSync(
            config or self.config,
            client_factory=self._factory,
            fetcher=fetcher,
            sleep=self.sleep,
            lock_dir=self.tmp.name,
            clock=lambda: pytz.utc.localize(datetime(2024, 5, 1, 8, 0, 0)),
            credentials_loader=credentials_loader or self._credentials,
        )

    def lock_path(self):
        return os.path.join(self.tmp.name, "feed-lock-lispo.lock")

    def test_full_run_writes_table_and_meta(self):
        result = self.make_sync(FakeFetcher()).run()

        self.assertEqual(result, {"success": True, "count": 1, "columns": 7, "chunks": 1, "dry_run": False})
        self.assertEqual(self.client.updates[0], (
            "'lispo'!A1:G2",
            [
                ["price", "vendorCode", "picture", "picture_urls", "name", "size", "quantity"],
                [100, "X1", '=IMAGE("url")', "url", "Widget", "M", 5],
            ],
        ))
        self.assertEqual(self.client.updates[1], (
            "'lispo_meta'!A1:F1",
            [["last_update_date", "2024-05-01", "last_update_time", "08:00:00", "rows", 1]],
        ))
        self.assertFalse(os.path.exists(self.lock_path()))

    def test_provisioning_and_clear_precede_writes(self):
        self.make_sync(FakeFetcher(offers=[WIDGET] * 3)).run()

        calls = self.client.call_names()
        first_clear = calls.index("clear_range")
        first_update = calls.index("update_range")
        self.assertLess(calls.index("fetch_metadata"), first_clear)
        self.assertLess(first_clear, first_update)
        # header + 3 rows in chunks of 2, then the meta row
        self.assertEqual(
            [u[0] for u in self.client.updates],
            ["'lispo'!A1:G2", "'lispo'!A3:G4", "'lispo_meta'!A1:F1"],
        )

    def test_destination_grid_is_grown_with_headroom(self):
        self.client.add_sheet("lispo", rows=5, cols=3)

        self.make_sync(FakeFetcher()).run()

        grid = self.client.sheets[0]["properties"]["gridProperties"]
        self.assertEqual(grid, {"rowCount": 12, "columnCount": 12})

    def test_second_run_while_locked_makes_no_calls(self):
        fetcher = FakeFetcher()
        with ExecutionLock("lispo", lock_dir=self.tmp.name):
            with self.assertRaises(LockContentionError):
                self.make_sync(fetcher).run()

        self.assertEqual(fetcher.calls, [])
        self.assertEqual(self.factory_calls, 0)
        self.assertEqual(self.client.calls, [])

        # Lock released by the first holder: the next run proceeds.
        self.assertTrue(self.make_sync(fetcher).run()["success"])

    def test_service_name_keys_the_lock(self):
        config = SyncConfig(feed_url="u", sheet_id="s", sheet_name="lispo", name="lispo-ua")
        with ExecutionLock("lispo", lock_dir=self.tmp.name):
            result = self.make_sync(FakeFetcher(), config=config).run()
        self.assertTrue(result["success"])

    def test_fetch_is_retried_then_fails_and_releases_lock(self):
        fetcher = FakeFetcher(error=EmptyFeedError("No offers found in feed"))

        with self.assertRaises(EmptyFeedError):
            self.make_sync(fetcher).run()

        self.assertEqual(len(fetcher.calls), 2)
        self.assertEqual(self.sleep.delays, [1.0])
        self.assertEqual(self.client.calls, [])
        self.assertFalse(os.path.exists(self.lock_path()))

    def test_write_failure_skips_meta_and_releases_lock(self):
        self.client.fail("update_range", times=10)

        with self.assertRaises(RemoteOperationError):
            self.make_sync(FakeFetcher()).run()

        self.assertNotIn("lispo_meta", [s["properties"]["title"] for s in self.client.sheets])
        self.assertFalse(os.path.exists(self.lock_path()))

    def test_rerun_is_idempotent(self):
        self.make_sync(FakeFetcher()).run()
        first = list(self.client.updates)
        self.client.updates.clear()

        self.make_sync(FakeFetcher()).run()

        self.assertEqual(self.client.updates, first)
        self.assertEqual(len(self.client.sheets), 2)
        self.assertEqual(len(self.client.sheets[1]["conditionalFormats"]), 2)

    def test_dry_run_makes_no_spreadsheet_calls(self):
        result = self.make_sync(FakeFetcher()).run(dry_run=True)

        self.assertTrue(result["dry_run"])
        self.assertEqual(result["count"], 1)
        self.assertEqual(self.factory_calls, 0)
        self.assertEqual(self.credential_loads, 0)
        self.assertFalse(os.path.exists(self.lock_path()))

    def test_missing_credentials_stop_run_before_fetch(self):
        def no_credentials():
            raise ConfigError("GOOGLE_SERVICE_ACCOUNT_EMAIL is not set")

        fetcher = FakeFetcher()
        with self.assertRaises(ConfigError):
            self.make_sync(fetcher, credentials_loader=no_credentials).run()

        self.assertEqual(fetcher.calls, [])
        self.assertEqual(self.factory_calls, 0)
        self.assertEqual(self.client.calls, [])
        self.assertFalse(os.path.exists(self.lock_path()))

    def test_credentials_are_read_before_fetch(self):
        order = []

        def credentials():
            order.append("credentials")
            return self._credentials()

        def fetcher(url, timeout):
            order.append("fetch")
            return [WIDGET]

        self.make_sync(fetcher, credentials_loader=credentials).run()

        self.assertEqual(order, ["credentials", "fetch"])
        self.assertEqual(self.credential_loads, 1)


if __name__ == "__main__":
    unittest.main()
