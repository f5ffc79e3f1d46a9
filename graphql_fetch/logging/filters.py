"""
Logging filters for graphql_fetch.

Request headers end up in debug logs; credentials carried in them are masked
before any handler sees the record.
"""

import logging
import re
from typing import List, Pattern, Tuple


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in log messages."""

    def __init__(self) -> None:
        """Initialize sensitive data filter."""
        super().__init__()

        self.rules: List[Tuple[Pattern[str], str]] = [
            # Authorization / Cookie header values, in dict reprs or plain text
            (
                re.compile(
                    r"""(['"]?(?:authorization|proxy-authorization|cookie|x-api-key)['"]?\s*[:=]\s*['"]?)([^'",}\n]+)""",
                    re.IGNORECASE,
                ),
                r"\1***MASKED***",
            ),
            (re.compile(r"(bearer\s+)([A-Za-z0-9\-._~+/]+=*)", re.IGNORECASE), r"\1***MASKED***"),
            # URLs with credentials
            (re.compile(r"(https?://[^:/\s]+):([^@/\s]+)@", re.IGNORECASE), r"\1:***MASKED***@"),
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data in the record's rendered message."""
        message = record.getMessage()
        for pattern, replacement in self.rules:
            message = pattern.sub(replacement, message)

        record.msg = message
        record.args = ()
        return True
