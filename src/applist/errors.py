"""Error codes and the single exception type raised across applist.

Components raise ``AppListError`` with a stable ``code`` so callers can
decide whether to retry (``recoverable``) or surface the message to the user.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    DIRECTORY_INVALID = "DIRECTORY_INVALID"
    LOOKUP_FAILED = "LOOKUP_FAILED"
    LOOKUP_TIMEOUT = "LOOKUP_TIMEOUT"
    LOOKUP_PARSE_FAILED = "LOOKUP_PARSE_FAILED"
    SEARCH_FAILED = "SEARCH_FAILED"
    SNAPSHOT_READ_FAILED = "SNAPSHOT_READ_FAILED"
    SNAPSHOT_INVALID = "SNAPSHOT_INVALID"
    SNAPSHOT_WRITE_FAILED = "SNAPSHOT_WRITE_FAILED"
    MARKER_WRITE_FAILED = "MARKER_WRITE_FAILED"


class AppListError(Exception):
    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
