# cardapio/services/availability.py

# Effective open/closed state of a store.
# With the automatic schedule off, the manual toggle wins unconditionally;
# otherwise the business hours decide. Pure: callers recompute whenever the
# store config or the clock changes.

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from cardapio.logger import setup_logger
from cardapio.utils.hours import DayLike, local_clock, is_open_at, next_opening_at

logger = setup_logger(__name__)

CLOSED_BANNER = "Estamos fechados no momento"


@dataclass(frozen=True)
class Availability:
    is_open: bool
    next_opening: Optional[str]

    @property
    def status_label(self) -> str:
        return "Aberto" if self.is_open else "Fechado"

    @property
    def banner(self) -> Optional[str]:
        if self.is_open:
            return None
        if self.next_opening:
            return f"Fechado • Abrimos {self.next_opening.lower()}"
        return CLOSED_BANNER


def effective_open(
    auto_schedule_enabled: bool,
    manual_is_open: bool,
    hours: Sequence[DayLike],
    now: Optional[datetime] = None,
    tzname: Optional[str] = None,
) -> bool:
    if not auto_schedule_enabled:
        return manual_is_open
    day, current_time = local_clock(now, tzname)
    return is_open_at(hours, day, current_time)


def store_availability(store, now: Optional[datetime] = None, tzname: Optional[str] = None) -> Availability:
    """Availability block for a store record (ORM row or StoreConfigOut)."""
    hours = list(store.business_hours or [])
    is_open = effective_open(store.auto_schedule_enabled, store.is_open, hours, now, tzname)

    next_opening = None
    if not is_open:
        day, current_time = local_clock(now, tzname)
        next_opening = next_opening_at(hours, day, current_time)

    logger.debug(
        f"Store {store.subdomain}: auto={store.auto_schedule_enabled} "
        f"manual={store.is_open} -> open={is_open}"
    )
    return Availability(is_open=is_open, next_opening=next_opening)
