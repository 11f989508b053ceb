# Tests for the effective open state: manual toggle vs automatic schedule,
# and the status label / banner texts shown on the storefront.

from datetime import datetime, timezone

from cardapio.schemas import BusinessHourOut, PeriodOut
from cardapio.services.availability import CLOSED_BANNER, Availability, effective_open, store_availability
from cardapio.utils.hours import DayHours, HourPeriod

from conftest import make_store

SP = "America/Sao_Paulo"
WED_13H = datetime(2024, 1, 17, 16, 0, tzinfo=timezone.utc)

HOURS = [DayHours(3, True, (HourPeriod("08:00", "12:00"), HourPeriod("14:00", "18:00")))]


def test_manual_toggle_wins_when_schedule_is_off():
    assert effective_open(False, True, [], WED_13H, SP)
    assert not effective_open(False, False, HOURS, datetime(2024, 1, 17, 13, 0, tzinfo=timezone.utc), SP)


def test_schedule_decides_when_auto_is_on():
    # manual flag is ignored
    assert not effective_open(True, True, HOURS, WED_13H, SP)
    assert effective_open(True, False, HOURS, datetime(2024, 1, 17, 18, 0, tzinfo=timezone.utc), SP)


def test_banner_texts():
    assert Availability(True, None).status_label == "Aberto"
    assert Availability(True, None).banner is None

    closed = Availability(False, "Hoje às 14:00")
    assert closed.status_label == "Fechado"
    assert closed.banner == "Fechado • Abrimos hoje às 14:00"

    assert Availability(False, None).banner == CLOSED_BANNER


def test_store_availability_reports_next_opening():
    store = make_store(business_hours=[BusinessHourOut(
        day_of_week=3,
        is_open=True,
        periods=[
            PeriodOut(open_time="08:00", close_time="12:00"),
            PeriodOut(open_time="14:00", close_time="18:00", sort_order=1),
        ],
    )])
    a = store_availability(store, WED_13H, SP)
    assert a.is_open is False
    assert a.next_opening == "Hoje às 14:00"


def test_store_availability_manual_closed_still_shows_next_opening():
    store = make_store(auto_schedule_enabled=False, is_open=False)
    # 10:00 local
    a = store_availability(store, datetime(2024, 1, 17, 13, 0, tzinfo=timezone.utc), SP)
    assert a.is_open is False
    assert a.next_opening == "Hoje às 11:00"


def test_store_availability_open_has_no_next_opening():
    store = make_store(auto_schedule_enabled=False, is_open=True)
    a = store_availability(store, WED_13H, SP)
    assert a.is_open is True
    assert a.next_opening is None
    assert a.banner is None
