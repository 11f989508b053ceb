# cardapio/api/cart.py

# Cart endpoints for one client session (cart_id chosen by the client).
# Each request rebuilds the CartStore from its snapshot, runs one command
# through CartSession (snapshot → apply → save → keep or roll back) and answers
# with the priced cart. Checkout composes the WhatsApp message, clears the cart
# and remembers the customer for the next order.

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.api.deps import Tenant, get_tenant
from cardapio.db import get_session
from cardapio.errors import ItemNotFound
from cardapio.logger import setup_logger
from cardapio.schemas import (
    AddItemRequest, CartView, CheckoutOut, CustomerUpdate, DeliverySelection, DeliveryUpdate,
    PaymentSelection, PaymentUpdate, QuantityUpdate,
)
from cardapio.services.cart_session import (
    CartSession, SqlCartStorage, load_customer, prefill_customer, remember_customer,
)
from cardapio.services.catalog import get_delivery_zone, get_delivery_zones, get_product, get_products
from cardapio.services.checkout import can_advance, checkout
from cardapio.services.pricing import build_cart_item, minimum_order_gap
from cardapio.utils.money import format_brl

logger = setup_logger(__name__)

router = APIRouter(prefix="/stores/{subdomain}/cart/{cart_id}")


def _storage_key(tenant: Tenant, cart_id: str) -> str:
    return f"{tenant.store.subdomain}:{cart_id}"


async def _open_cart(session: AsyncSession, tenant: Tenant, cart_id: str) -> CartSession:
    storage = SqlCartStorage(session)
    key = _storage_key(tenant, cart_id)
    cart = await CartSession.open(storage, key)
    cached = await load_customer(storage, key)
    if cached:
        zones = await get_delivery_zones(session, tenant.store.id)
        prefill_customer(cart.store, cached, zones)
    return cart


def _view(cart_id: str, tenant: Tenant, cart: CartSession, notice: str | None = None) -> CartView:
    store = cart.store
    subtotal = store.subtotal()
    fee = store.delivery_fee()
    total = store.total()
    return CartView(
        cart_id=cart_id,
        items=store.items,
        customer=store.customer,
        delivery=store.delivery,
        payment=store.payment,
        subtotal=subtotal,
        delivery_fee=fee,
        total=total,
        minimum_order_gap=minimum_order_gap(subtotal, tenant.store.minimum_order),
        subtotal_display=format_brl(subtotal),
        delivery_fee_display=format_brl(fee),
        total_display=format_brl(total),
        can_checkout=can_advance(tenant.store, store, tenant.availability.is_open),
        notice=notice,
    )


@router.get("", response_model=CartView)
async def get_cart(cart_id: str, tenant: Tenant = Depends(get_tenant),
                   session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    return _view(cart_id, tenant, cart)


@router.post("/items", response_model=CartView, status_code=201)
async def add_item(cart_id: str, body: AddItemRequest, tenant: Tenant = Depends(get_tenant),
                   session: AsyncSession = Depends(get_session)):
    product = await get_product(session, tenant.store.id, body.product_id)
    catalog = await get_products(session, tenant.store.id)
    item = build_cart_item(
        product,
        catalog,
        quantity=body.quantity,
        selections=body.options,
        observation=body.observation,
        half_half=body.half_half,
    )

    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.add_item(item))
    return _view(cart_id, tenant, cart, result.notice)


@router.patch("/items/{item_id}", response_model=CartView)
async def update_item(cart_id: str, item_id: str, body: QuantityUpdate, tenant: Tenant = Depends(get_tenant),
                      session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    if cart.store.get_item(item_id) is None:
        raise ItemNotFound(f"Item {item_id} não está no carrinho")
    result = await cart.run(lambda s: s.update_quantity(item_id, body.quantity))
    return _view(cart_id, tenant, cart, result.notice)


@router.delete("/items/{item_id}", response_model=CartView)
async def remove_item(cart_id: str, item_id: str, tenant: Tenant = Depends(get_tenant),
                      session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.remove_item(item_id))
    return _view(cart_id, tenant, cart, result.notice)


@router.put("/customer", response_model=CartView)
async def set_customer(cart_id: str, body: CustomerUpdate, tenant: Tenant = Depends(get_tenant),
                       session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.set_customer(**body.model_dump()))
    return _view(cart_id, tenant, cart, result.notice)


@router.put("/delivery", response_model=CartView)
async def set_delivery(cart_id: str, body: DeliveryUpdate, tenant: Tenant = Depends(get_tenant),
                       session: AsyncSession = Depends(get_session)):
    selection = DeliverySelection(type=body.type, table_number=body.table_number)
    if body.type == "delivery" and body.zone_id is not None:
        zone = await get_delivery_zone(session, tenant.store.id, body.zone_id)
        if zone is None:
            raise ItemNotFound(f"Bairro {body.zone_id} não atendido")
        selection = DeliverySelection(type="delivery", zone_id=zone.id, zone_name=zone.name, zone_price=zone.price)

    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.set_delivery(selection))
    return _view(cart_id, tenant, cart, result.notice)


@router.put("/payment", response_model=CartView)
async def set_payment(cart_id: str, body: PaymentUpdate, tenant: Tenant = Depends(get_tenant),
                      session: AsyncSession = Depends(get_session)):
    payment = PaymentSelection(
        method=body.method,
        cash_change=body.cash_change if body.method == "cash" else None,
    )
    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.set_payment(payment))
    return _view(cart_id, tenant, cart, result.notice)


@router.delete("", response_model=CartView)
async def clear_cart(cart_id: str, tenant: Tenant = Depends(get_tenant),
                     session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    result = await cart.run(lambda s: s.clear_cart())
    return _view(cart_id, tenant, cart, result.notice)


@router.post("/checkout", response_model=CheckoutOut)
async def submit_order(cart_id: str, tenant: Tenant = Depends(get_tenant),
                       session: AsyncSession = Depends(get_session)):
    cart = await _open_cart(session, tenant, cart_id)
    order = checkout(tenant.store, cart.store, tenant.availability.is_open)

    await remember_customer(cart.storage, cart.key, cart.store.customer, cart.store.delivery)
    result = await cart.run(lambda s: s.clear_cart())
    if not result.confirmed:
        logger.warning(f"Order for cart {cart.key} sent but the cart could not be cleared")

    return CheckoutOut(
        message=order.message,
        whatsapp_url=order.whatsapp_url,
        confirmation=order.confirmation,
    )
