# cardapio/api/health.py

# Liveness endpoint.
# /healthz → pings the record store and reports how many tenants it serves.

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.db import get_session
from cardapio.models import StoreConfig

router = APIRouter()


@router.get("/healthz")
async def healthz(session: AsyncSession = Depends(get_session)):
    stores = (await session.execute(select(func.count()).select_from(StoreConfig))).scalar_one()
    return {"ok": True, "stores": stores}
