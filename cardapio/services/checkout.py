# cardapio/services/checkout.py

# Checkout gating and order submission.
# Configuration problems (a store WhatsApp with no digits, PIX chosen without a
# PIX key, table orders while table mode is off) raise ConfigurationError.
# Customer input problems are collected by checkout_errors so the client can
# show all of them at once. An empty cart at this point is a client bug and
# raises EmptyCartError.

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from cardapio.errors import CheckoutValidationError, ConfigurationError, EmptyCartError
from cardapio.logger import setup_logger
from cardapio.schemas import OrderConfirmationOut, StoreConfigOut
from cardapio.services.cart import CartStore
from cardapio.services.order_message import OrderContext, compose
from cardapio.services.pricing import minimum_order_gap
from cardapio.services.whatsapp import Opener, build_whatsapp_url, dispatch
from cardapio.utils.money import format_brl
from cardapio.utils.validators import clean_phone, format_phone, validate_name, validate_phone

logger = setup_logger(__name__)

CONTACT_GREETING = "Olá! Acabei de fazer um pedido pelo cardápio digital."
STORE_CLOSED = "A loja está fechada no momento. Não é possível realizar pedidos."


@dataclass
class CheckoutResult:
    message: str
    whatsapp_url: str
    confirmation: OrderConfirmationOut


def cart_step_errors(store: StoreConfigOut, cart: CartStore, is_open: bool) -> list[str]:
    """Errors that keep the customer on the cart step."""
    errors = []
    if not is_open:
        errors.append(STORE_CLOSED)
    gap = minimum_order_gap(cart.subtotal(), store.minimum_order)
    if gap > 0:
        errors.append(f"Faltam {format_brl(gap)} para o pedido mínimo de {format_brl(store.minimum_order)}")
    return errors


def can_advance(store: StoreConfigOut, cart: CartStore, is_open: bool) -> bool:
    return not cart.is_empty and not cart_step_errors(store, cart, is_open)


def ensure_configured(store: StoreConfigOut, cart: CartStore) -> None:
    if not clean_phone(store.whatsapp):
        raise ConfigurationError("Erro: Telefone da loja não configurado.")
    if cart.payment.method == "pix" and not store.pix_key:
        raise ConfigurationError("Chave PIX da loja não configurada.")
    if cart.delivery.type == "table" and not store.table_mode_enabled:
        raise ConfigurationError("Pedidos na mesa não estão habilitados.")


def checkout_errors(store: StoreConfigOut, cart: CartStore, is_open: bool) -> list[str]:
    errors = cart_step_errors(store, cart, is_open)

    for message in (validate_name(cart.customer.name), validate_phone(cart.customer.phone)):
        if message:
            errors.append(message)

    delivery = cart.delivery
    if delivery.type == "delivery":
        if delivery.zone_id is None:
            errors.append("Selecione o bairro de entrega")
        if len(cart.customer.address.strip()) <= 5:
            errors.append("Informe o endereço de entrega")
    elif delivery.type == "table":
        if delivery.table_number is None or not 1 <= delivery.table_number <= store.table_count:
            errors.append("Informe o número da mesa")

    payment = cart.payment
    if payment.method == "cash" and payment.cash_change is None:
        errors.append("Informe o troco para quanto")
    if payment.method == "counter" and delivery.type == "delivery":
        errors.append("Pagamento no balcão indisponível para entrega")

    return errors


def build_order_context(store: StoreConfigOut, cart: CartStore) -> OrderContext:
    delivery = cart.delivery
    customer = cart.customer
    is_delivery = delivery.type == "delivery"
    return OrderContext(
        customer_name=customer.name.strip(),
        customer_phone=customer.phone,
        delivery_type=delivery.type,
        payment_method=cart.payment.method,
        items=list(cart.items),
        subtotal=cart.subtotal(),
        delivery_fee=cart.delivery_fee(),
        total=cart.total(),
        zone_name=delivery.zone_name if is_delivery else None,
        address=customer.address.strip() if is_delivery else None,
        complement=(customer.complement.strip() or None) if is_delivery else None,
        table_number=delivery.table_number if delivery.type == "table" else None,
        pix_key=store.pix_key if cart.payment.method == "pix" else None,
        change_for=cart.payment.cash_change if cart.payment.method == "cash" else None,
    )


def order_confirmation(store: StoreConfigOut, cart: CartStore) -> OrderConfirmationOut:
    phone = format_phone(store.whatsapp)
    pix_notice = None
    if cart.payment.method == "pix":
        pix_notice = f"Envie o comprovante do pagamento para o WhatsApp: {phone}"
    return OrderConfirmationOut(
        payment_method=cart.payment.method,
        whatsapp_number=phone,
        pix_notice=pix_notice,
        contact_url=build_whatsapp_url(store.whatsapp, CONTACT_GREETING),
    )


def checkout(store: StoreConfigOut, cart: CartStore, is_open: bool, opener: Optional[Opener] = None) -> CheckoutResult:
    """Validate, compose and dispatch the order. The cart is left untouched;
    clearing it after a successful dispatch is the caller's job."""
    if cart.is_empty:
        raise EmptyCartError()
    ensure_configured(store, cart)

    errors = checkout_errors(store, cart, is_open)
    if errors:
        raise CheckoutValidationError(errors)

    message = compose(build_order_context(store, cart))
    url = dispatch(store.whatsapp, message, opener)
    logger.info(f"Order for {store.subdomain} composed: {len(cart.items)} line(s), total {cart.total()}")
    return CheckoutResult(message=message, whatsapp_url=url, confirmation=order_confirmation(store, cart))
