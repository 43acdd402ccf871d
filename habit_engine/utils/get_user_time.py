from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from ..config import settings


def _zone(tz_name: Optional[str]):
    name = tz_name or settings.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        # Unknown zone: fall back to UTC
        logger.warning("Unknown timezone '{}', falling back to UTC", name)
        return timezone.utc


def today_in_zone(tz_name: Optional[str] = None) -> date:
    """
    Current calendar date in the given zone (DEFAULT_TIMEZONE when None).
    """
    return datetime.now(timezone.utc).astimezone(_zone(tz_name)).date()


def local_date(moment: datetime, tz_name: Optional[str] = None) -> date:
    """
    Calendar date of a stored timestamp. Naive values are treated as UTC,
    which is what SQLite hands back for timezone-aware columns.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(_zone(tz_name)).date()
