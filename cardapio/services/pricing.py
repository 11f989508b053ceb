# cardapio/services/pricing.py

# Line and cart pricing.
# A half-and-half line costs the dearer of its two flavors and never carries
# option add-ons; a regular line is product price plus the flat per-unit price
# of every selected option. Totals are Decimal throughout.

from __future__ import annotations
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from cardapio.errors import CheckoutValidationError, ItemNotFound
from cardapio.schemas import CartItem, HalfHalf, HalfHalfChoice, ProductOut, SelectedOption
from cardapio.utils.money import ZERO, to_money


def half_half_unit_price(first_half: Optional[ProductOut], second_half: Optional[ProductOut]) -> Decimal:
    prices = [to_money(p.price) for p in (first_half, second_half) if p is not None]
    return max(prices) if prices else ZERO


def unit_price(
    product: ProductOut,
    selected_options: Iterable[SelectedOption] = (),
    half_half: Optional[tuple[Optional[ProductOut], Optional[ProductOut]]] = None,
) -> Decimal:
    if half_half is not None:
        return half_half_unit_price(*half_half)
    return to_money(product.price) + sum((to_money(o.price) for o in selected_options), ZERO)


def line_total(
    product: ProductOut,
    quantity: int,
    selected_options: Iterable[SelectedOption] = (),
    half_half: Optional[tuple[Optional[ProductOut], Optional[ProductOut]]] = None,
) -> Decimal:
    """item_total for a new cart line.

    `half_half` is the (first, second) flavor pair when the half-and-half mode is
    on; a missing half is allowed and the line then costs the other half, or 0
    when neither is chosen.
    """
    return unit_price(product, selected_options, half_half) * quantity


def cart_subtotal(items: Iterable[CartItem]) -> Decimal:
    return sum((to_money(item.item_total) for item in items), ZERO)


def cart_total(subtotal: Decimal, delivery_fee: Decimal) -> Decimal:
    return to_money(subtotal) + to_money(delivery_fee)


def minimum_order_gap(subtotal: Decimal, minimum_order: Decimal) -> Decimal:
    return max(ZERO, to_money(minimum_order) - to_money(subtotal))


# ---------- half-and-half ----------

def half_half_candidates(products: Iterable[ProductOut], current: ProductOut) -> list[ProductOut]:
    return [
        p for p in products
        if p.category_id == current.category_id and p.allows_half_half and p.is_available
    ]


def half_half_offered(products: Iterable[ProductOut], current: ProductOut) -> bool:
    return current.allows_half_half and len(half_half_candidates(products, current)) >= 2


# ---------- option groups ----------

def resolve_options(product: ProductOut, selections: Mapping[int, Sequence[int]]) -> list[SelectedOption]:
    """Validate the chosen option ids against the product's groups.

    Raises CheckoutValidationError for a missing required group or a group
    over its max_select, ItemNotFound for ids that are not on the product.
    """
    groups = {g.id: g for g in product.option_groups}
    unknown = [gid for gid in selections if gid not in groups]
    if unknown:
        raise ItemNotFound(f"Grupo de opções inexistente: {unknown[0]}")

    errors: list[str] = []
    resolved: list[SelectedOption] = []
    for group in product.option_groups:
        chosen = list(dict.fromkeys(selections.get(group.id, ())))
        if group.is_required and not chosen:
            errors.append(f"Escolha uma opção em '{group.title}'")
            continue
        if len(chosen) > group.max_select:
            errors.append(f"Escolha no máximo {group.max_select} em '{group.title}'")
            continue

        options = {o.id: o for o in group.options}
        for option_id in chosen:
            option = options.get(option_id)
            if option is None:
                raise ItemNotFound(f"Opção inexistente: {option_id}")
            resolved.append(SelectedOption(
                group_name=group.title,
                option_name=option.name,
                price=to_money(option.price),
            ))

    if errors:
        raise CheckoutValidationError(errors, "Por favor, preencha as opções obrigatórias.")
    return resolved


# ---------- add to cart ----------

def build_cart_item(
    product: ProductOut,
    catalog: Sequence[ProductOut],
    quantity: int = 1,
    selections: Optional[Mapping[int, Sequence[int]]] = None,
    observation: Optional[str] = None,
    half_half: Optional[HalfHalfChoice] = None,
) -> CartItem:
    """Compose a priced cart line from a product and the customer's choices.

    Half-and-half mode skips the option groups entirely. Both halves must be
    eligible flavors; the first half defaults to the product itself.
    """
    if not product.is_available:
        raise CheckoutValidationError(["Produto indisponível"], "Produto indisponível")

    quantity = max(1, quantity)
    observation = (observation or "").strip() or None

    if half_half is not None and half_half.enabled:
        if not half_half_offered(catalog, product):
            raise CheckoutValidationError(["Meio a meio indisponível para este produto"])

        eligible = {p.id: p for p in half_half_candidates(catalog, product)}
        first = eligible.get(half_half.first_half_id or product.id)
        second = eligible.get(half_half.second_half_id) if half_half.second_half_id else None
        if first is None or second is None:
            raise CheckoutValidationError(
                ["Selecione os dois sabores para meio a meio"],
                "Selecione os dois sabores para meio a meio",
            )

        final_price = half_half_unit_price(first, second)
        return CartItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            selected_options=[],
            observation=observation,
            half_half=HalfHalf(
                first_half_name=first.name,
                second_half_name=second.name,
                final_price=final_price,
            ),
            item_total=line_total(product, quantity, half_half=(first, second)),
        )

    options = resolve_options(product, selections or {})
    return CartItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        selected_options=options,
        observation=observation,
        item_total=line_total(product, quantity, options),
    )
