# End-to-end tests through the FastAPI app against an in-memory record store
# seeded with one pizzeria (see conftest.seed_frames) and a fixed clock.

from decimal import Decimal

from conftest import CLOSED_AT

NBSP = "\u00a0"

BASE = "/stores/pizzaria"
CART = f"{BASE}/cart/c1"


def _product_ids(client):
    return {p["name"]: p for p in client.get(f"{BASE}/products").json()}


def _zone_id(client, name="Centro"):
    return next(z["id"] for z in client.get(f"{BASE}/zones").json() if z["name"] == name)


def test_healthz_and_root(client):
    assert client.get("/healthz").json() == {"ok": True, "stores": 1}
    assert "/healthz" in client.get("/").json()["see"]


def test_storefront_open_during_lunch(client):
    body = client.get(BASE).json()
    assert body["store"]["name"] == "Pizzaria do Zé"
    assert body["availability"] == {
        "is_open": True,
        "status_label": "Aberto",
        "next_opening": None,
        "banner": None,
    }
    assert [d["day_of_week"] for d in body["store"]["business_hours"]] == [1, 3, 4]


def test_storefront_closed_between_periods(client, clock):
    clock["now"] = CLOSED_AT
    availability = client.get(BASE).json()["availability"]
    assert availability["is_open"] is False
    assert availability["next_opening"] == "Hoje às 18:00"
    assert availability["banner"] == "Fechado • Abrimos hoje às 18:00"


def test_unknown_store_is_404(client):
    res = client.get("/stores/nope")
    assert res.status_code == 404
    assert res.json()["detail"] == "Restaurante não encontrado"


def test_catalog_hides_unavailable_products_and_inactive_zones(client):
    assert list(_product_ids(client)) == ["Calabresa", "Portuguesa", "Marguerita", "Refrigerante"]
    assert [z["name"] for z in client.get(f"{BASE}/zones").json()] == ["Centro"]


def test_half_half_options(client):
    products = _product_ids(client)
    body = client.get(f"{BASE}/products/{products['Calabresa']['id']}/half-half").json()
    assert body["offered"] is True
    assert [c["name"] for c in body["candidates"]] == ["Calabresa", "Portuguesa", "Marguerita"]

    body = client.get(f"{BASE}/products/{products['Refrigerante']['id']}/half-half").json()
    assert body == {"offered": False, "candidates": []}


def test_add_half_half_item(client):
    products = _product_ids(client)
    res = client.post(f"{CART}/items", json={
        "product_id": products["Calabresa"]["id"],
        "half_half": {"enabled": True, "second_half_id": products["Portuguesa"]["id"]},
    })
    assert res.status_code == 201
    [item] = res.json()["items"]
    assert item["half_half"]["second_half_name"] == "Portuguesa"
    assert Decimal(item["item_total"]) == Decimal("35")


def test_required_option_group(client):
    refri = _product_ids(client)["Refrigerante"]
    res = client.post(f"{CART}/items", json={"product_id": refri["id"]})
    assert res.status_code == 422
    assert res.json()["errors"] == ["Escolha uma opção em 'Tamanho'"]

    [group] = refri["option_groups"]
    two_liters = next(o["id"] for o in group["options"] if o["name"] == "2L")
    res = client.post(f"{CART}/items", json={"product_id": refri["id"], "options": {str(group["id"]): [two_liters]}})
    assert res.status_code == 201
    assert Decimal(res.json()["subtotal"]) == Decimal("14")


def test_quantity_update_and_removal(client):
    calabresa = _product_ids(client)["Calabresa"]
    item_id = client.post(f"{CART}/items", json={"product_id": calabresa["id"]}).json()["items"][0]["id"]

    body = client.patch(f"{CART}/items/{item_id}", json={"quantity": 3}).json()
    assert Decimal(body["items"][0]["item_total"]) == Decimal("90")

    body = client.patch(f"{CART}/items/{item_id}", json={"quantity": 0}).json()
    assert body["items"][0]["quantity"] == 1

    assert client.patch(f"{CART}/items/missing", json={"quantity": 2}).status_code == 404

    body = client.delete(f"{CART}/items/{item_id}").json()
    assert body["items"] == []


def test_minimum_order_and_delivery_fee(client):
    calabresa = _product_ids(client)["Calabresa"]
    body = client.post(f"{CART}/items", json={"product_id": calabresa["id"]}).json()
    assert Decimal(body["minimum_order_gap"]) == Decimal("20")
    assert body["can_checkout"] is False

    client.post(f"{CART}/items", json={"product_id": calabresa["id"]})
    body = client.put(f"{CART}/delivery", json={"type": "delivery", "zone_id": _zone_id(client)}).json()
    assert body["delivery"]["zone_name"] == "Centro"
    assert body["subtotal_display"] == f"R${NBSP}60,00"
    assert body["delivery_fee_display"] == f"R${NBSP}5,00"
    assert body["total_display"] == f"R${NBSP}65,00"
    assert body["can_checkout"] is True

    body = client.put(f"{CART}/delivery", json={"type": "pickup"}).json()
    assert Decimal(body["delivery_fee"]) == 0
    assert Decimal(body["total"]) == Decimal("60")


def test_inactive_zone_is_rejected(client):
    res = client.put(f"{CART}/delivery", json={"type": "delivery", "zone_id": 9999})
    assert res.status_code == 404


def test_carts_are_isolated(client):
    calabresa = _product_ids(client)["Calabresa"]
    client.post(f"{CART}/items", json={"product_id": calabresa["id"]})
    assert client.get(f"{BASE}/cart/other").json()["items"] == []
    assert len(client.get(CART).json()["items"]) == 1


def test_checkout_empty_cart(client):
    res = client.post(f"{CART}/checkout")
    assert res.status_code == 409
    assert res.json()["detail"] == "Carrinho vazio"


def test_checkout_reports_missing_fields(client, clock):
    calabresa = _product_ids(client)["Calabresa"]
    client.post(f"{CART}/items", json={"product_id": calabresa["id"], "quantity": 2})
    clock["now"] = CLOSED_AT

    res = client.post(f"{CART}/checkout")
    assert res.status_code == 422
    errors = res.json()["errors"]
    assert "A loja está fechada no momento. Não é possível realizar pedidos." in errors
    assert "Informe seu nome" in errors
    assert "Selecione o bairro de entrega" in errors


def test_full_checkout_clears_cart_and_remembers_customer(client):
    calabresa = _product_ids(client)["Calabresa"]
    client.post(f"{CART}/items", json={"product_id": calabresa["id"], "quantity": 2, "observation": "sem cebola"})
    client.put(f"{CART}/customer", json={
        "name": "Maria Silva",
        "phone": "(11) 98765-4321",
        "address": "Rua das Flores, 100",
    })
    client.put(f"{CART}/delivery", json={"type": "delivery", "zone_id": _zone_id(client)})
    client.put(f"{CART}/payment", json={"method": "pix"})

    res = client.post(f"{CART}/checkout")
    assert res.status_code == 200
    body = res.json()
    assert body["whatsapp_url"].startswith("https://wa.me/5511987654321?text=")
    assert "*2x Calabresa*" in body["message"]
    assert "_Obs: sem cebola_" in body["message"]
    assert f"*TOTAL: R${NBSP}65,00*" in body["message"]
    assert body["confirmation"]["pix_notice"].endswith("(11) 98765-4321")

    cart = client.get(CART).json()
    assert cart["items"] == []
    assert cart["customer"]["name"] == "Maria Silva"
    assert cart["delivery"]["zone_name"] == "Centro"


def test_cash_payment_keeps_change_only_for_cash(client):
    body = client.put(f"{CART}/payment", json={"method": "cash", "cash_change": "100"}).json()
    assert Decimal(body["payment"]["cash_change"]) == Decimal("100")

    body = client.put(f"{CART}/payment", json={"method": "card", "cash_change": "100"}).json()
    assert body["payment"]["cash_change"] is None


def test_clear_cart(client):
    calabresa = _product_ids(client)["Calabresa"]
    client.post(f"{CART}/items", json={"product_id": calabresa["id"]})
    body = client.delete(CART).json()
    assert body["items"] == []
    assert body["notice"] is None
