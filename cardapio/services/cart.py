# cardapio/services/cart.py

# In-session cart: ordered line items plus the checkout context (customer,
# delivery, payment). One CartStore per client session, built from a snapshot
# and handed to whoever mutates it; there is no module-level cart.
#
# Invariant: a line's unit price is frozen when it is added. update_quantity
# rescales the cached item_total (old_total / old_qty * new_qty) instead of
# repricing, which is exact only because nothing edits options after the add.

from __future__ import annotations
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from cardapio.schemas import CartItem, CartState, CustomerInfo, DeliverySelection, PaymentSelection
from cardapio.services.pricing import cart_subtotal, cart_total
from cardapio.utils.money import ZERO, to_money


class CartStore:
    def __init__(self, state: Optional[CartState] = None):
        state = state.model_copy(deep=True) if state is not None else CartState()
        self.items: list[CartItem] = list(state.items)
        self.customer: CustomerInfo = state.customer
        self.delivery: DeliverySelection = state.delivery
        self.payment: PaymentSelection = state.payment

    # ---------- items ----------

    def add_item(self, item: CartItem) -> CartItem:
        # identical lines are kept apart on purpose (printed separately)
        line = item.model_copy(update={"id": uuid4().hex}, deep=True)
        self.items.append(line)
        return line

    def get_item(self, item_id: str) -> Optional[CartItem]:
        return next((i for i in self.items if i.id == item_id), None)

    def remove_item(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> Optional[CartItem]:
        quantity = max(1, int(quantity))
        for index, item in enumerate(self.items):
            if item.id != item_id:
                continue
            total = (to_money(item.item_total) / item.quantity) * quantity
            self.items[index] = item.model_copy(update={"quantity": quantity, "item_total": total})
            return self.items[index]
        return None

    def clear_cart(self) -> None:
        self.items = []
        self.customer = CustomerInfo()
        self.delivery = DeliverySelection()
        self.payment = PaymentSelection()

    # ---------- checkout context ----------

    def set_customer(self, **fields) -> CustomerInfo:
        changes = {k: v for k, v in fields.items() if v is not None}
        self.customer = self.customer.model_copy(update=changes)
        return self.customer

    def set_delivery(self, delivery: DeliverySelection) -> None:
        self.delivery = delivery

    def set_payment(self, payment: PaymentSelection) -> None:
        self.payment = payment

    # ---------- derived ----------

    @property
    def is_empty(self) -> bool:
        return not self.items

    def subtotal(self) -> Decimal:
        return cart_subtotal(self.items)

    def delivery_fee(self) -> Decimal:
        # pickup and table orders never pay the zone fee
        if self.delivery.type != "delivery":
            return ZERO
        return to_money(self.delivery.zone_price)

    def total(self) -> Decimal:
        return cart_total(self.subtotal(), self.delivery_fee())

    # ---------- snapshots ----------

    def snapshot(self) -> CartState:
        return CartState(
            items=[i.model_copy(deep=True) for i in self.items],
            customer=self.customer.model_copy(),
            delivery=self.delivery.model_copy(),
            payment=self.payment.model_copy(),
        )

    def restore(self, state: CartState) -> None:
        state = state.model_copy(deep=True)
        self.items = list(state.items)
        self.customer = state.customer
        self.delivery = state.delivery
        self.payment = state.payment
