"""Named reporting periods such as "today" and "week".

Boundaries are computed in a configurable time zone and handed to the
queries as naive UTC datetimes, matching what is stored in the database.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timetrack.errors import InvalidState

PERIOD_NAMES = ("today", "yesterday", "week", "month")


@dataclass(frozen=True)
class Period:
    """Half-open interval ``[start, end)`` in naive UTC."""
    start: datetime
    end: datetime
    name: str = "custom"

    def __contains__(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def get_zone(name: Union[str, ZoneInfo]) -> ZoneInfo:
    """Look up an IANA zone, raising ``InvalidState`` for unknown names."""
    if isinstance(name, ZoneInfo):
        return name
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidState(f"unknown time zone: {name}") from e


def resolve_period(
    token: str,
    tz: Union[str, ZoneInfo] = "UTC",
    now: Optional[datetime] = None,
) -> Period:
    """Turn a period token into UTC bounds.

    ``now`` may be naive (taken as UTC) or aware. Weeks start on Monday.
    """
    zone = get_zone(tz)
    token = (token or "today").strip().lower()
    if token not in PERIOD_NAMES:
        raise InvalidState(f"unknown period: {token}")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_today = now.astimezone(zone).date()

    if token == "today":
        first, last = local_today, local_today + timedelta(days=1)
    elif token == "yesterday":
        first, last = local_today - timedelta(days=1), local_today
    elif token == "week":
        first = local_today - timedelta(days=local_today.weekday())
        last = first + timedelta(days=7)
    else:
        first = local_today.replace(day=1)
        last = (first + timedelta(days=32)).replace(day=1)

    return Period(
        start=_local_midnight_as_utc(first, zone),
        end=_local_midnight_as_utc(last, zone),
        name=token,
    )


def _local_midnight_as_utc(day, zone: ZoneInfo) -> datetime:
    # Across a DST change a local day is 23 or 25 hours long
    local = datetime.combine(day, time.min, tzinfo=zone)
    return local.astimezone(timezone.utc).replace(tzinfo=None)
