# cardapio/services/catalog.py

# Read side of the record store for the public storefront.
# Loads a tenant's config with its hours and periods, its catalog with option
# groups and options, and its delivery zones. Every query is scoped to one
# store_id; children are eager-loaded and returned as Pydantic read models so
# nothing lazy-loads outside the session.


from __future__ import annotations
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardapio.errors import ItemNotFound, StoreNotFound
from cardapio.models import BusinessHour, DeliveryZone, Product, ProductOptionGroup, StoreConfig
from cardapio.schemas import DeliveryZoneOut, ProductOut, StoreConfigOut


async def get_store_config(session: AsyncSession, subdomain: str) -> StoreConfigOut:
    row = (await session.execute(
        select(StoreConfig)
        .where(StoreConfig.subdomain == subdomain)
        .options(selectinload(StoreConfig.business_hours).selectinload(BusinessHour.periods))
    )).scalar_one_or_none()
    if row is None:
        raise StoreNotFound(subdomain)
    return StoreConfigOut.model_validate(row)


async def get_products(session: AsyncSession, store_id: int, only_available: bool = True) -> List[ProductOut]:
    stmt = (
        select(Product)
        .where(Product.store_id == store_id)
        .options(selectinload(Product.option_groups).selectinload(ProductOptionGroup.options))
        .order_by(Product.sort_order, Product.name)
    )
    if only_available:
        stmt = stmt.where(Product.is_available.is_(True))
    rows = (await session.execute(stmt)).scalars().all()
    return [ProductOut.model_validate(r) for r in rows]


async def get_product(session: AsyncSession, store_id: int, product_id: int) -> ProductOut:
    row = (await session.execute(
        select(Product)
        .where(Product.store_id == store_id, Product.id == product_id)
        .options(selectinload(Product.option_groups).selectinload(ProductOptionGroup.options))
    )).scalar_one_or_none()
    if row is None:
        raise ItemNotFound(f"Produto {product_id} não encontrado")
    return ProductOut.model_validate(row)


async def get_delivery_zones(session: AsyncSession, store_id: int, only_active: bool = True) -> List[DeliveryZoneOut]:
    stmt = select(DeliveryZone).where(DeliveryZone.store_id == store_id).order_by(DeliveryZone.name)
    if only_active:
        stmt = stmt.where(DeliveryZone.is_active.is_(True))
    rows = (await session.execute(stmt)).scalars().all()
    return [DeliveryZoneOut.model_validate(r) for r in rows]


async def get_delivery_zone(session: AsyncSession, store_id: int, zone_id: Optional[int]) -> Optional[DeliveryZoneOut]:
    if zone_id is None:
        return None
    zones = await get_delivery_zones(session, store_id)
    return next((z for z in zones if z.id == zone_id), None)
