"""
=============================================================================
CONDITIONAL-REQUEST EVALUATOR (RFC 7232)
=============================================================================

Decides whether a GET can be answered with 304 Not Modified.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    304 DECISION (all must hold)                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. No If-None-Match header at all                                 │
    │   2. If-Modified-Since present and a valid HTTP-date                │
    │   3. The file has a modification time                               │
    │   4. modified_at < if_modified_since + 1 second                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

HTTP-dates have one-second resolution while file times do not. The one
second of slack means a file modified at 12:00:00.400 is still "not
modified since" the date the client got for it, 12:00:00.

If-None-Match is recognized but never compared: the server does not
generate entity tags. Its mere presence (even empty) disables the
If-Modified-Since shortcut, as RFC 7232 section 3.3 requires.

=============================================================================
"""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


# HTTP-date resolution
DATE_TOLERANCE = timedelta(seconds=1)


def parse_http_date(value: str) -> Optional[datetime]:
    """
    Parse an HTTP-date into an aware UTC datetime.

    Accepts the formats email.utils understands (IMF-fixdate and the
    obsolete RFC 850 / asctime forms). Returns None if unparseable.
    Dates without a zone are taken as UTC.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_not_modified(
    if_none_match: Optional[str],
    if_modified_since: Optional[str],
    modified_at: Optional[datetime],
) -> bool:
    """
    True if the client's cached copy is current and 304 should be sent.

    Args:
        if_none_match: If-None-Match header value, None when absent.
        if_modified_since: If-Modified-Since header value, None when absent.
        modified_at: File modification time (aware), None when unknown.
    """
    if if_none_match is not None:
        return False

    if not if_modified_since or modified_at is None:
        return False

    since = parse_http_date(if_modified_since)
    if since is None:
        return False

    return modified_at < since + DATE_TOLERANCE
