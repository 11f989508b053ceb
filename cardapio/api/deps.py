# cardapio/api/deps.py

# Shared FastAPI dependencies: the wall clock (overridable in tests) and the
# tenant lookup by subdomain with its effective availability.

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.db import get_session
from cardapio.schemas import StoreConfigOut
from cardapio.services.availability import Availability, store_availability
from cardapio.services.catalog import get_store_config
from cardapio.utils.hours import utcnow


def get_clock() -> Callable[[], datetime]:
    return utcnow


@dataclass
class Tenant:
    store: StoreConfigOut
    availability: Availability


async def get_tenant(
    subdomain: str,
    session: AsyncSession = Depends(get_session),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Tenant:
    store = await get_store_config(session, subdomain)
    return Tenant(store=store, availability=store_availability(store, now=clock()))
