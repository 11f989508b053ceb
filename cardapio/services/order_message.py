# cardapio/services/order_message.py

# Plain-text order message sent to the store over WhatsApp.
# Uses WhatsApp's light markup (*bold*, _italic_) and a fixed section order:
# header, customer, items, fulfillment, payment, totals, footer, with a dashed
# separator before every section after the customer block. The delivery-fee
# line only exists for delivery orders. Runs of blank lines collapse to one.
# Building the text is all this module does; sending it is whatsapp.dispatch.

from __future__ import annotations
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from cardapio.schemas import CartItem, DeliveryType, PaymentMethod
from cardapio.utils.money import ZERO, format_brl

HEADER = "*NOVO PEDIDO - CARDÁPIO DIGITAL*"
FOOTER = "_Pedido gerado via Cardápio Digital_"
SEPARATOR = "-" * 32

PAYMENT_LABELS = {
    "pix": "PIX",
    "card": "Cartão na Entrega",
    "cash": "Dinheiro",
    "counter": "Pagar no Balcão",
}

_BLANK_RUNS = re.compile(r"\n{3,}")


@dataclass
class OrderContext:
    customer_name: str
    customer_phone: str
    delivery_type: DeliveryType
    payment_method: PaymentMethod
    items: Sequence[CartItem]
    subtotal: Decimal
    total: Decimal
    delivery_fee: Decimal = ZERO
    zone_name: Optional[str] = None
    address: Optional[str] = None
    complement: Optional[str] = None
    table_number: Optional[int] = None
    pix_key: Optional[str] = None
    change_for: Optional[Decimal] = None


def _item_block(item: CartItem) -> str:
    lines = [f"*{item.quantity}x {item.product_name or 'Item'}*"]
    if item.half_half is not None:
        lines.append(f"   ½ {item.half_half.first_half_name} + ½ {item.half_half.second_half_name}")
    for option in item.selected_options:
        lines.append(f"   + {option.option_name}")
    if item.observation:
        lines.append(f"   _Obs: {item.observation}_")
    lines.append(f"   {format_brl(item.item_total)}")
    return "\n".join(lines)


def _fulfillment_block(order: OrderContext) -> str:
    if order.delivery_type == "delivery":
        lines = [
            SEPARATOR,
            "*ENTREGA:*",
            f"*Bairro:* {order.zone_name or ''}",
            f"*Endereço:* {order.address or ''}",
        ]
        if order.complement:
            lines.append(f"*Complemento:* {order.complement}")
        return "\n".join(lines)

    if order.delivery_type == "table":
        return "\n".join([
            SEPARATOR,
            "*CONSUMO NO LOCAL*",
            f"*Mesa:* {order.table_number}",
        ])

    return "\n".join([SEPARATOR, "*RETIRADA NO LOCAL*"])


def _payment_block(order: OrderContext) -> str:
    lines = [
        SEPARATOR,
        "*PAGAMENTO:*",
        f"*Forma:* {PAYMENT_LABELS[order.payment_method]}",
    ]
    if order.payment_method == "pix" and order.pix_key:
        lines.append(f"*Chave PIX:* {order.pix_key}")
    if order.payment_method == "cash" and order.change_for is not None:
        lines.append(f"*Troco para:* {format_brl(order.change_for)}")
    return "\n".join(lines)


def _totals_block(order: OrderContext) -> str:
    lines = [
        SEPARATOR,
        "*RESUMO:*",
        f"Subtotal: {format_brl(order.subtotal)}",
    ]
    if order.delivery_type == "delivery":
        lines.append(f"Taxa de Entrega: {format_brl(order.delivery_fee)}")
    lines.append(f"*TOTAL: {format_brl(order.total)}*")
    return "\n".join(lines)


def normalize_blank_lines(text: str) -> str:
    return _BLANK_RUNS.sub("\n\n", text)


def compose(order: OrderContext) -> str:
    customer = "\n".join([
        f"*Cliente:* {order.customer_name}",
        f"*Telefone:* {order.customer_phone}",
        SEPARATOR,
    ])
    items = "\n\n".join(_item_block(item) for item in order.items)

    text = (
        f"{HEADER}\n\n"
        f"{customer}\n"
        f"{items}\n\n"
        f"{_fulfillment_block(order)}\n\n"
        f"{_payment_block(order)}\n\n"
        f"{_totals_block(order)}\n"
        f"{FOOTER}"
    )
    return normalize_blank_lines(text)
