# cardapio/utils/hours.py

# Business-hours evaluation on the store's wall clock (ZoneInfo).
# A day holds several open periods; times are "HH:MM" or "HH:MM:SS" strings and
# only the first five characters are compared. Zero-padded "HH:MM" compares
# lexicographically the same as numerically, so plain string comparison is used.
# Periods never cross midnight; a day marked open with no periods counts as closed.

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from cardapio.config import settings

# indexed by day_of_week, 0=Sunday
WEEKDAYS = (
    "Domingo",
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
)


class PeriodLike(Protocol):
    open_time: str
    close_time: str


class DayLike(Protocol):
    day_of_week: int
    is_open: bool
    periods: Sequence[PeriodLike]


@dataclass(frozen=True)
class HourPeriod:
    open_time: str
    close_time: str
    sort_order: int = 0


@dataclass(frozen=True)
class DayHours:
    day_of_week: int
    is_open: bool
    periods: tuple[HourPeriod, ...] = field(default_factory=tuple)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hhmm(value: str) -> str:
    return value[:5]


def local_clock(now: Optional[datetime] = None, tzname: Optional[str] = None) -> tuple[int, str]:
    """Return (day_of_week 0=Sunday, "HH:MM") for `now` on the store clock.

    Naive datetimes are taken as UTC.
    """
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tzname or settings.STORE_TIMEZONE))
    # Python weekday() is 0=Monday
    day = (local.weekday() + 1) % 7
    return day, f"{local.hour:02d}:{local.minute:02d}"


def _day_config(hours: Iterable[DayLike], day: int) -> Optional[DayLike]:
    for bh in hours or ():
        if bh.day_of_week == day:
            return bh
    return None


def is_open_at(hours: Iterable[DayLike], day: int, current_time: str) -> bool:
    today = _day_config(hours, day)
    if today is None or not today.is_open:
        return False

    periods = list(today.periods or ())
    if not periods:
        return False

    # inclusive on both ends: an order at exactly closing time is accepted
    return any(
        hhmm(p.open_time) <= current_time <= hhmm(p.close_time)
        for p in periods
    )


def is_open_now(
    hours: Iterable[DayLike],
    now: Optional[datetime] = None,
    tzname: Optional[str] = None,
) -> bool:
    day, current_time = local_clock(now, tzname)
    return is_open_at(hours, day, current_time)


def _day_label(offset: int, day: int) -> str:
    if offset == 0:
        return "Hoje"
    if offset == 1:
        return "Amanhã"
    return WEEKDAYS[day]


def next_opening_at(hours: Sequence[DayLike], day: int, current_time: str) -> Optional[str]:
    if not hours:
        return None

    for offset in range(7):
        check_day = (day + offset) % 7
        config = _day_config(hours, check_day)
        if config is None or not config.is_open or not config.periods:
            continue

        starts = sorted(hhmm(p.open_time) for p in config.periods)
        if offset == 0:
            # periods already started today do not count, even when the
            # store shows closed because of the manual override
            upcoming = [s for s in starts if s > current_time]
            if upcoming:
                return f"Hoje às {upcoming[0]}"
            continue

        return f"{_day_label(offset, check_day)} às {starts[0]}"

    return None


def next_opening_time(
    hours: Sequence[DayLike],
    now: Optional[datetime] = None,
    tzname: Optional[str] = None,
) -> Optional[str]:
    """Label of the next opening within a week ("Hoje às 14:00", "Amanhã às 08:00",
    "Sábado às 10:00"), or None when nothing opens in the next 7 days."""
    day, current_time = local_clock(now, tzname)
    return next_opening_at(hours, day, current_time)
