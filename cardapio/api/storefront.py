# cardapio/api/storefront.py

# Public storefront endpoints, scoped by subdomain.
# /stores/{subdomain}            → store config, hours and effective open state
# /stores/{subdomain}/products   → available products with option groups
# /stores/{subdomain}/zones      → active delivery zones
# /stores/{subdomain}/products/{id}/half-half → eligible flavors for half-and-half

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.api.deps import Tenant, get_tenant
from cardapio.db import get_session
from cardapio.schemas import AvailabilityOut, DeliveryZoneOut, HalfHalfOptionsOut, ProductOut, StorefrontOut
from cardapio.services.catalog import get_delivery_zones, get_product, get_products
from cardapio.services.pricing import half_half_candidates, half_half_offered

router = APIRouter(prefix="/stores/{subdomain}")


@router.get("", response_model=StorefrontOut)
async def storefront(tenant: Tenant = Depends(get_tenant)):
    a = tenant.availability
    return StorefrontOut(
        store=tenant.store,
        availability=AvailabilityOut(
            is_open=a.is_open,
            status_label=a.status_label,
            next_opening=a.next_opening,
            banner=a.banner,
        ),
    )


@router.get("/products", response_model=list[ProductOut])
async def products(tenant: Tenant = Depends(get_tenant), session: AsyncSession = Depends(get_session)):
    return await get_products(session, tenant.store.id)


@router.get("/zones", response_model=list[DeliveryZoneOut])
async def zones(tenant: Tenant = Depends(get_tenant), session: AsyncSession = Depends(get_session)):
    return await get_delivery_zones(session, tenant.store.id)


@router.get("/products/{product_id}/half-half", response_model=HalfHalfOptionsOut)
async def half_half(product_id: int, tenant: Tenant = Depends(get_tenant),
                    session: AsyncSession = Depends(get_session)):
    product = await get_product(session, tenant.store.id, product_id)
    catalog = await get_products(session, tenant.store.id)
    offered = half_half_offered(catalog, product)
    return HalfHalfOptionsOut(
        offered=offered,
        candidates=half_half_candidates(catalog, product) if offered else [],
    )
