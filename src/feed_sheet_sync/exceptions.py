"""Exceptions raised by the feed synchronization pipeline."""

from typing import Optional


class FeedSyncError(Exception):
    """Base class for all errors raised by feed_sheet_sync."""


class ConfigError(FeedSyncError):
    """Raised when configuration or credentials are missing or invalid."""


class LockContentionError(FeedSyncError):
    """Raised when another run already holds the execution lock."""


class EmptyFeedError(FeedSyncError):
    """Raised when the feed was parsed but contained no offers."""


class RemoteOperationError(FeedSyncError):
    """
    A spreadsheet API or feed HTTP call failed.

    Attributes:
        status_code: HTTP status code returned by the remote side, if any
        body: Raw response body returned by the remote side, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
