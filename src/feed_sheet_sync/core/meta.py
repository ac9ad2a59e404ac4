"""Status record written to the companion meta sheet after a successful run."""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import pytz
from gspread.utils import absolute_range_name

from ..models.catalog import MetaRecord, SheetDescriptor
from ..utils.retry import with_retry
from .provisioner import SheetProvisioner
from .sheets_client import SheetsClient

logger = logging.getLogger(__name__)

META_ROWS = 2
META_COLS = 6

FRESH_COLOR = {"red": 0.8, "green": 1, "blue": 0.8}
STALE_COLOR = {"red": 1, "green": 0.8, "blue": 0.8}


def make_meta_record(rows: int, timezone: str = "UTC", now: Optional[datetime] = None) -> MetaRecord:
    """Build the status record for ``now`` (default: current time) in ``timezone``."""
    tz = pytz.timezone(timezone)
    if now is None:
        local = datetime.now(pytz.utc).astimezone(tz)
    elif now.tzinfo is None:
        local = pytz.utc.localize(now).astimezone(tz)
    else:
        local = now.astimezone(tz)
    return MetaRecord(date=local.strftime("%Y-%m-%d"), time=local.strftime("%H:%M:%S"), rows=rows)


def _date_rule(sheet_id: int, formula: str, color: Dict[str, float]) -> Dict[str, Any]:
    return {
        "addConditionalFormatRule": {
            "index": 0,
            "rule": {
                "ranges": [{
                    "sheetId": sheet_id,
                    "startRowIndex": 0,
                    "endRowIndex": 1,
                    "startColumnIndex": 1,
                    "endColumnIndex": 2,
                }],
                "booleanRule": {
                    "condition": {
                        "type": "CUSTOM_FORMULA",
                        "values": [{"userEnteredValue": formula}],
                    },
                    "format": {"backgroundColor": color},
                },
            },
        }
    }


def formatting_requests(descriptor: SheetDescriptor) -> List[Dict[str, Any]]:
    """Delete existing conditional format rules (highest index first) and add the fresh/stale pair on B1."""
    requests_ = [
        {"deleteConditionalFormatRule": {"sheetId": descriptor.sheet_id, "index": index}}
        for index in range(descriptor.conditional_format_count - 1, -1, -1)
    ]
    requests_.append(_date_rule(descriptor.sheet_id, "=INT($B$1)=TODAY()", FRESH_COLOR))
    requests_.append(_date_rule(descriptor.sheet_id, "=INT($B$1)<>TODAY()", STALE_COLOR))
    return requests_


class MetaRecorder:
    """Write the last-update record and keep its freshness highlighting."""

    def __init__(
        self,
        client: SheetsClient,
        provisioner: SheetProvisioner,
        attempts: int,
        base_delay: float,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client = client
        self.provisioner = provisioner
        self.attempts = attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def record(self, meta_sheet_name: str, record: MetaRecord) -> SheetDescriptor:
        descriptor = self.provisioner.ensure_sheet(meta_sheet_name)
        self.provisioner.resize_sheet(descriptor, META_ROWS, META_COLS)

        a1_range = absolute_range_name(meta_sheet_name, "A1:F1")
        with_retry(
            "write meta",
            lambda: self.client.update_range(a1_range, [record.to_row()]),
            self.attempts,
            self.base_delay,
            sleep=self.sleep,
        )

        requests_ = formatting_requests(descriptor)
        with_retry(
            "meta formatting",
            lambda: self.client.batch_update(requests_),
            self.attempts,
            self.base_delay,
            sleep=self.sleep,
        )

        logger.info(
            f"Meta sheet '{meta_sheet_name}' updated: {record.date} {record.time}, {record.rows} rows"
        )
        return descriptor
