# Tests for the cart command runner and its storage: rollback on failed saves,
# best-effort loads, the SQL-backed key/value store and the remembered customer.

from decimal import Decimal

import pytest

from cardapio.config import settings
from cardapio.schemas import CartItem, DeliverySelection, DeliveryZoneOut
from cardapio.services.cart import CartStore
from cardapio.services.cart_session import (
    SAVE_FAILED_NOTICE, CartSession, SqlCartStorage, load_customer, prefill_customer, remember_customer,
)


class MemoryStorage:
    def __init__(self, fail_saves=False):
        self.data = {}
        self.fail_saves = fail_saves

    async def load(self, namespace, key):
        return self.data.get((namespace, key))

    async def save(self, namespace, key, payload):
        if self.fail_saves:
            raise OSError("quota exceeded")
        self.data[(namespace, key)] = payload


def _item(total="30.00"):
    return CartItem(product_id=1, product_name="Calabresa", quantity=1, item_total=Decimal(total))


@pytest.mark.asyncio
async def test_successful_command_is_persisted_and_reloaded():
    storage = MemoryStorage()
    cart = await CartSession.open(storage, "pizzaria:abc")
    result = await cart.run(lambda s: s.add_item(_item()))

    assert result.confirmed
    assert result.value.id

    reopened = await CartSession.open(storage, "pizzaria:abc")
    assert len(reopened.store.items) == 1
    assert reopened.store.subtotal() == Decimal("30.00")


@pytest.mark.asyncio
async def test_failed_save_rolls_back_and_leaves_a_notice():
    storage = MemoryStorage(fail_saves=True)
    cart = CartSession(CartStore(), storage, "pizzaria:abc")
    cart.store.add_item(_item())

    result = await cart.run(lambda s: s.clear_cart())

    assert not result.confirmed
    assert result.notice == SAVE_FAILED_NOTICE
    assert len(cart.store.items) == 1


@pytest.mark.asyncio
async def test_unreadable_snapshot_starts_empty():
    storage = MemoryStorage()
    storage.data[(settings.CART_NAMESPACE, "k")] = {"items": [{"product_id": "not-a-number"}]}
    cart = await CartSession.open(storage, "k")
    assert cart.store.is_empty


@pytest.mark.asyncio
async def test_sql_storage_round_trip(session):
    storage = SqlCartStorage(session)
    cart = await CartSession.open(storage, "pizzaria:xyz")
    await cart.run(lambda s: s.add_item(_item("35.00")))
    await cart.run(lambda s: s.set_customer(name="Maria"))

    payload = await storage.load(settings.CART_NAMESPACE, "pizzaria:xyz")
    assert payload["customer"]["name"] == "Maria"
    assert payload["items"][0]["item_total"] == "35.00"

    reopened = await CartSession.open(SqlCartStorage(session), "pizzaria:xyz")
    assert reopened.store.items[0].item_total == Decimal("35.00")


@pytest.mark.asyncio
async def test_remember_and_prefill_customer():
    storage = MemoryStorage()
    cart = CartStore()
    cart.set_customer(name="Maria", phone="11987654321", address="Rua das Flores, 100", complement="apto 2")
    await remember_customer(storage, "k", cart.customer, DeliverySelection(zone_id=7))

    cached = await load_customer(storage, "k")
    assert cached["delivery_zone_id"] == 7

    zones = [DeliveryZoneOut(id=7, name="Centro", price=Decimal("5.00"))]
    fresh = CartStore()
    assert prefill_customer(fresh, cached, zones)
    assert fresh.customer.name == "Maria"
    assert fresh.customer.complement == "apto 2"
    assert fresh.delivery.zone_name == "Centro"
    assert fresh.delivery_fee() == Decimal("5.00")


def test_prefill_skips_carts_in_use_and_retired_zones():
    cached = {"name": "Maria", "delivery_zone_id": 9}

    busy = CartStore()
    busy.add_item(_item())
    assert not prefill_customer(busy, cached)
    assert busy.customer.name == ""

    fresh = CartStore()
    assert prefill_customer(fresh, cached, [DeliveryZoneOut(id=7, name="Centro", price=Decimal("5"))])
    assert fresh.customer.name == "Maria"
    assert fresh.delivery.zone_id is None
