"""Authentication utilities for Google Sheets."""

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

import gspread
from oauth2client.service_account import ServiceAccountCredentials

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


@dataclass(frozen=True)
class GoogleCredentials:
    """Service account identity used to call the Sheets API."""
    client_email: Optional[str] = None
    private_key: Optional[str] = None
    private_key_id: Optional[str] = None
    keyfile_path: Optional[str] = None


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> GoogleCredentials:
    """
    Read service account credentials from the environment.

    ``GOOGLE_CLIENT_EMAIL`` and ``GOOGLE_PRIVATE_KEY`` win; otherwise the JSON key
    file at ``GOOGLE_CREDS_FILE_PATH`` is used.

    Raises:
        ConfigError: If neither form of credentials is available
    """
    env = os.environ if environ is None else environ

    client_email = env.get("GOOGLE_CLIENT_EMAIL")
    private_key = env.get("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
    if client_email and private_key:
        return GoogleCredentials(
            client_email=client_email,
            private_key=private_key,
            private_key_id=env.get("GOOGLE_PRIVATE_KEY_ID") or None,
        )

    creds_file = env.get("GOOGLE_CREDS_FILE_PATH")
    if creds_file and os.path.exists(creds_file):
        return GoogleCredentials(keyfile_path=creds_file)

    raise ConfigError(
        "Missing GOOGLE_CLIENT_EMAIL or GOOGLE_PRIVATE_KEY in env "
        "(and no GOOGLE_CREDS_FILE_PATH key file found)"
    )


def get_google_sheets_client(credentials: GoogleCredentials, scopes: List[str] = None) -> gspread.Client:
    """Authenticate with Google Sheets API and return a client.

    Args:
        credentials: Service account identity
        scopes: OAuth scopes to request (default: spreadsheets)

    Returns:
        An authenticated gspread client
    """
    if scopes is None:
        scopes = SCOPES

    if credentials.keyfile_path:
        creds = ServiceAccountCredentials.from_json_keyfile_name(credentials.keyfile_path, scopes)
    else:
        creds = ServiceAccountCredentials.from_json_keyfile_dict(
            {
                "type": "service_account",
                "client_email": credentials.client_email,
                "private_key": credentials.private_key,
                "private_key_id": credentials.private_key_id,
                "client_id": None,
            },
            scopes,
        )

    client = gspread.authorize(creds)
    logger.info("Successfully authenticated with Google Sheets.")
    return client
