# Shared fixtures: an in-memory record store per test, a seeded demo tenant and
# a TestClient wired to both. DATABASE_URL is forced to memory before any
# cardapio module reads the settings.

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from decimal import Decimal

import pandas as pd
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardapio.db import build_engine, get_session, init_models
from cardapio.ingest import build_stores
from cardapio.schemas import (
    BusinessHourOut, OptionGroupOut, OptionOut, PeriodOut, ProductOut, StoreConfigOut,
)

MEMORY_URL = "sqlite+aiosqlite:///:memory:"

# 2024-01-17 is a Wednesday (day 3); Sao Paulo is UTC-3
OPEN_AT = datetime(2024, 1, 17, 15, 0, tzinfo=timezone.utc)     # 12:00 local
CLOSED_AT = datetime(2024, 1, 17, 17, 30, tzinfo=timezone.utc)  # 14:30 local


def seed_frames() -> dict:
    stores = pd.DataFrame([{
        "subdomain": "pizzaria",
        "name": "Pizzaria do Zé",
        "admin_email": "ze@example.com",
        "whatsapp": "(11) 98765-4321",
        "is_open": "false",
        "auto_schedule_enabled": "true",
        "minimum_order": "50.00",
        "pix_key": "pix@pizzaria.com",
        "pix_key_type": "email",
        "table_mode_enabled": "true",
        "table_count": "10",
    }])
    hours = pd.DataFrame([
        {"subdomain": "pizzaria", "day_of_week": "3", "is_open": "true", "open_time": "11:00", "close_time": "14:00"},
        {"subdomain": "pizzaria", "day_of_week": "3", "is_open": "true", "open_time": "18:00", "close_time": "23:00"},
        {"subdomain": "pizzaria", "day_of_week": "4", "is_open": "true", "open_time": "18:00", "close_time": "23:00"},
        {"subdomain": "pizzaria", "day_of_week": "1", "is_open": "false", "open_time": "", "close_time": ""},
    ])
    products = pd.DataFrame([
        {"subdomain": "pizzaria", "category": "Pizzas", "name": "Calabresa", "price": "30.00",
         "allows_half_half": "true", "sort_order": "1"},
        {"subdomain": "pizzaria", "category": "Pizzas", "name": "Portuguesa", "price": "35.00",
         "allows_half_half": "true", "sort_order": "2"},
        {"subdomain": "pizzaria", "category": "Pizzas", "name": "Marguerita", "price": "32.00",
         "allows_half_half": "true", "sort_order": "3"},
        {"subdomain": "pizzaria", "category": "Bebidas", "name": "Refrigerante", "price": "8.00",
         "allows_half_half": "false", "sort_order": "4"},
        {"subdomain": "pizzaria", "category": "Bebidas", "name": "Suco", "price": "9.00",
         "is_available": "false", "sort_order": "5"},
    ])
    options = pd.DataFrame([
        {"subdomain": "pizzaria", "product": "Refrigerante", "group": "Tamanho", "is_required": "true",
         "max_select": "1", "option": "Lata", "price": "0"},
        {"subdomain": "pizzaria", "product": "Refrigerante", "group": "Tamanho", "is_required": "true",
         "max_select": "1", "option": "2L", "price": "6.00"},
    ])
    zones = pd.DataFrame([
        {"subdomain": "pizzaria", "name": "Centro", "price": "5.00", "is_active": "true"},
        {"subdomain": "pizzaria", "name": "Vila Nova", "price": "8.00", "is_active": "false"},
    ])
    return {"stores": stores, "hours": hours, "products": products, "options": options, "zones": zones}


# ---------- record store ----------

@pytest_asyncio.fixture
async def engine():
    eng = build_engine(MEMORY_URL)
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with maker() as s:
        yield s


@pytest_asyncio.fixture
async def seeded_session(session):
    session.add_all(build_stores(seed_frames()))
    await session.commit()
    return session


# ---------- HTTP ----------

@pytest.fixture
def clock():
    return {"now": OPEN_AT}


@pytest.fixture
def client(clock, monkeypatch):
    import cardapio.main as main
    from cardapio.api.deps import get_clock

    test_engine = build_engine(MEMORY_URL)
    maker = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)
    monkeypatch.setattr(main, "engine", test_engine)

    async def _session():
        async with maker() as s:
            yield s

    async def _seed():
        async with maker() as s:
            s.add_all(build_stores(seed_frames()))
            await s.commit()

    main.app.dependency_overrides[get_session] = _session
    main.app.dependency_overrides[get_clock] = lambda: (lambda: clock["now"])
    try:
        with TestClient(main.app) as c:
            c.portal.call(_seed)
            yield c
            c.portal.call(test_engine.dispose)
    finally:
        main.app.dependency_overrides.clear()


# ---------- plain read models ----------

def make_product(id, name, price, category_id=1, allows_half_half=False, is_available=True, option_groups=()):
    return ProductOut(
        id=id,
        name=name,
        price=Decimal(price),
        category_id=category_id,
        allows_half_half=allows_half_half,
        is_available=is_available,
        option_groups=list(option_groups),
    )


def make_group(id, title, options, is_required=False, max_select=1):
    return OptionGroupOut(
        id=id,
        title=title,
        is_required=is_required,
        max_select=max_select,
        options=[OptionOut(id=oid, name=name, price=Decimal(price)) for oid, name, price in options],
    )


def make_store(**overrides) -> StoreConfigOut:
    data = dict(
        id=1,
        subdomain="pizzaria",
        name="Pizzaria do Zé",
        whatsapp="11987654321",
        minimum_order=Decimal("0"),
        pix_key="pix@pizzaria.com",
        table_mode_enabled=True,
        table_count=10,
        auto_schedule_enabled=True,
        business_hours=[BusinessHourOut(
            day_of_week=3,
            is_open=True,
            periods=[PeriodOut(open_time="11:00", close_time="14:00")],
        )],
    )
    data.update(overrides)
    return StoreConfigOut(**data)
