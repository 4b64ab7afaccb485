"""
Normalization of systemd timestamp strings.

systemctl prints timestamps differently depending on version and locale, so
each known encoding is tried in turn.
"""

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..errors import ParseError

_UTC_NAMES = {"UTC", "GMT", "Z", "UT"}

# %Z output of zones without a letter abbreviation, e.g. "+07" or "+0530"
_SIGNED_ZONE = re.compile(r"[+-]\d{2}(\d{2})?")


def _zone_for(name: str) -> timezone:
    """
    Resolve a zone abbreviation.

    Local names take the local offset and signed tokens such as "+07" their
    own fixed offset. Any other abbreviation reads as UTC.
    """
    if name.upper() in _UTC_NAMES:
        return timezone.utc
    if name in time.tzname:
        is_dst = bool(time.daylight) and name == time.tzname[1]
        offset = -(time.altzone if is_dst else time.timezone)
        return timezone(timedelta(seconds=offset), name)
    if _SIGNED_ZONE.fullmatch(name):
        minutes = int(name[1:3]) * 60 + int(name[3:5] or 0)
        sign = -1 if name[0] == "-" else 1
        return timezone(sign * timedelta(minutes=minutes), name)
    return timezone.utc


def _parse_with_zone_name(text: str, layout: str) -> Optional[datetime]:
    head, sep, zone = text.rpartition(" ")
    if not sep or not (zone.isalpha() or _SIGNED_ZONE.fullmatch(zone)):
        return None
    try:
        parsed = datetime.strptime(head, layout)
    except ValueError:
        return None
    return parsed.replace(tzinfo=_zone_for(zone))


def _parse_named_zone(text: str) -> Optional[datetime]:
    # Mon 2024-01-15 10:30:45 WIB, or "+07" where the zone has no letters
    return _parse_with_zone_name(text, "%a %Y-%m-%d %H:%M:%S")


def _parse_numeric_offset(text: str) -> Optional[datetime]:
    # Mon 2024-01-15 10:30:45 +0700
    try:
        return datetime.strptime(text, "%a %Y-%m-%d %H:%M:%S %z")
    except ValueError:
        return None


def _parse_rfc3339(text: str) -> Optional[datetime]:
    if "T" not in text:
        return None
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _parse_rfc1123(text: str) -> Optional[datetime]:
    # Mon, 15 Jan 2024 10:30:45 UTC
    return _parse_with_zone_name(text, "%a, %d %b %Y %H:%M:%S")


_LAYOUTS: List[Callable[[str], Optional[datetime]]] = [
    _parse_named_zone,
    _parse_numeric_offset,
    _parse_rfc3339,
    _parse_rfc1123,
]


def normalize_timestamp(text: str) -> datetime:
    """
    Parse a systemd timestamp into a timezone-aware datetime.

    Calendar encodings are tried first, in a fixed order; failing those the
    value is read as microseconds since the Unix epoch.

    Args:
        text: Timestamp as printed by systemctl

    Returns:
        datetime: Aware datetime

    Raises:
        ParseError: If no encoding matches
    """
    value = text.strip()
    for layout in _LAYOUTS:
        parsed = layout(value)
        if parsed is not None:
            return parsed

    try:
        usec = int(value)
    except ValueError:
        raise ParseError(f"failed to parse timestamp {text!r}") from None

    try:
        return datetime.fromtimestamp(usec // 1_000_000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ParseError(f"timestamp {text!r} out of range: {e}") from e
