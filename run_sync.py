#!/usr/bin/env python
"""
Run the feed to Google Sheets synchronization.

This script fetches a YML product feed, flattens its offers and writes them
into a Google Sheets worksheet. Schedule it with cron, one invocation per feed:

    python run_sync.py config/lispo.json
"""

import sys

from feed_sheet_sync.cli import main


if __name__ == "__main__":
    sys.exit(main())
