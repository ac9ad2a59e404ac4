"""Primitive Google Sheets operations used by the pipeline."""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import google.auth.exceptions
import gspread
import requests

from ..exceptions import RemoteOperationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SheetsClient:
    """
    Thin wrapper around a gspread spreadsheet.

    Each method performs exactly one remote call (plus opening the spreadsheet
    on first use) and turns gspread, auth and transport failures into RemoteOperationError.
    Retrying is left to the caller.
    """

    def __init__(self, client: gspread.Client, spreadsheet_id: str):
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self._spreadsheet: Optional[gspread.Spreadsheet] = None

    def _call(self, action: str, func: Callable[[gspread.Spreadsheet], T]) -> T:
        try:
            if self._spreadsheet is None:
                self._spreadsheet = self.client.open_by_key(self.spreadsheet_id)
            return func(self._spreadsheet)
        except gspread.exceptions.APIError as e:
            response = getattr(e, "response", None)
            raise RemoteOperationError(
                f"{action} failed: {e}",
                status_code=getattr(response, "status_code", None),
                body=getattr(response, "text", None),
            ) from e
        except (gspread.exceptions.GSpreadException, google.auth.exceptions.GoogleAuthError) as e:
            raise RemoteOperationError(f"{action} failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RemoteOperationError(f"{action} failed: {e}") from e

    def fetch_metadata(self) -> Dict[str, Any]:
        """Return spreadsheet metadata including ``sheets[].properties`` and ``conditionalFormats``."""
        return self._call("get spreadsheet", lambda sh: sh.fetch_sheet_metadata())

    def batch_update(self, requests_: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._call(
            "batch update", lambda sh: sh.batch_update({"requests": requests_})
        )

    def clear_range(self, a1_range: str) -> Dict[str, Any]:
        return self._call("clear range", lambda sh: sh.values_clear(a1_range))

    def update_range(self, a1_range: str, values: List[List[Any]]) -> Dict[str, Any]:
        return self._call(
            "update range",
            lambda sh: sh.values_update(
                a1_range,
                params={"valueInputOption": "USER_ENTERED"},
                body={"values": values},
            ),
        )
