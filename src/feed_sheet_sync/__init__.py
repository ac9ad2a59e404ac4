"""
Feed Sheet Sync - copy a YML product feed into Google Sheets.

This package provides functionality to:
1. Fetch and parse a YML catalog feed
2. Flatten every offer into a row using a declarative column mapping
3. Write the rows into a Google Sheets tab in retried chunks
4. Record the last successful run in a companion meta sheet
"""

__version__ = "1.0.0"

from .core.sync import FeedSheetSync
from .core.config_loader import load_config
from .core.transform import build_rows
from .models.config import SyncConfig

__all__ = ["FeedSheetSync", "SyncConfig", "build_rows", "load_config"]
