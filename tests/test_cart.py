"""Cart store: per-session carts, line merging, quantity updates and ownership."""
from modules.cart.models import Cart, CartItem


def test_first_contact_issues_session_cookie_and_empty_cart(client):
    resp = client.get("/cart")

    assert resp.status_code == 200
    assert "session_id" in resp.cookies
    body = resp.json()
    assert body["items"] == []
    assert body["itemCount"] == 0
    assert body["subtotalCents"] == 0


def test_cart_is_stable_across_requests_in_one_session(client):
    first = client.get("/cart").json()
    second = client.get("/cart").json()
    assert first["id"] == second["id"]


def test_duplicate_add_accumulates_into_one_line(client, db, make_product):
    product_id = make_product(price_cents=10000)

    first = client.post("/cart/items", json={"productId": product_id, "quantity": 1})
    second = client.post("/cart/items", json={"productId": product_id, "quantity": 2})

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]

    cart = client.get("/cart").json()
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["items"][0]["lineTotalCents"] == 30000
    assert cart["subtotalCents"] == 30000
    assert db.query(CartItem).count() == 1


def test_add_unknown_product_is_not_found(client):
    resp = client.post("/cart/items", json={"productId": 999, "quantity": 1})

    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"


def test_add_inactive_product_is_not_found(client, db, make_product):
    from modules.catalog.models import Product

    product_id = make_product()
    db.query(Product).filter(Product.id == product_id).update({"is_active": False})
    db.commit()

    resp = client.post("/cart/items", json={"productId": product_id, "quantity": 1})
    assert resp.status_code == 404


def test_add_with_non_positive_quantity_is_rejected(client, make_product):
    product_id = make_product()

    resp = client.post("/cart/items", json={"productId": product_id, "quantity": 0})

    assert resp.status_code == 400
    body = resp.json()
    assert body["kind"] == "validation"
    assert any(err["field"] == "quantity" for err in body["errors"])


def test_update_quantity(client, make_product):
    product_id = make_product(price_cents=2500)
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 1}).json()

    resp = client.patch(f"/cart/items/{item['id']}", json={"quantity": 4})

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 4
    assert client.get("/cart").json()["subtotalCents"] == 10000


def test_set_to_zero_deletes_then_not_found(client, make_product):
    product_id = make_product()
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 2}).json()

    first = client.patch(f"/cart/items/{item['id']}", json={"quantity": 0})
    second = client.patch(f"/cart/items/{item['id']}", json={"quantity": 0})

    assert first.status_code == 204
    assert second.status_code == 404
    assert client.get("/cart").json()["items"] == []


def test_negative_quantity_update_is_rejected(client, make_product):
    product_id = make_product()
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 1}).json()

    resp = client.patch(f"/cart/items/{item['id']}", json={"quantity": -1})
    assert resp.status_code == 400


def test_remove_item_then_not_found(client, make_product):
    product_id = make_product()
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 1}).json()

    assert client.delete(f"/cart/items/{item['id']}").status_code == 204
    assert client.delete(f"/cart/items/{item['id']}").status_code == 404


def test_item_of_another_session_is_not_found(client, make_product):
    product_id = make_product()
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 1}).json()

    client.cookies.clear()

    assert client.patch(f"/cart/items/{item['id']}", json={"quantity": 5}).status_code == 404
    assert client.delete(f"/cart/items/{item['id']}").status_code == 404


def test_price_is_captured_when_added(client, db, make_product):
    from modules.catalog.models import Product

    product_id = make_product(price_cents=10000)
    client.post("/cart/items", json={"productId": product_id, "quantity": 1})

    db.query(Product).filter(Product.id == product_id).update({"price_cents": 99900})
    db.commit()

    cart = client.get("/cart").json()
    assert cart["items"][0]["priceCents"] == 10000


def test_logged_in_user_gets_their_cart_back_in_a_new_session(client, db, login, make_product):
    product_id = make_product()
    login()
    client.post("/cart/items", json={"productId": product_id, "quantity": 2})
    original_cart = client.get("/cart").json()["id"]

    client.cookies.clear()
    login()
    cart = client.get("/cart").json()

    assert cart["id"] == original_cart
    assert cart["items"][0]["quantity"] == 2
    assert db.query(Cart).count() == 1


def test_zero_quantity_keeps_new_session_cookie(client, login, make_product):
    product_id = make_product()
    login()
    item = client.post("/cart/items", json={"productId": product_id, "quantity": 1}).json()

    # Same user, fresh browser session: the cart is rebound and a cookie issued
    client.cookies.delete("session_id")
    resp = client.patch(f"/cart/items/{item['id']}", json={"quantity": 0})

    assert resp.status_code == 204
    assert resp.content == b""
    assert "session_id" in resp.cookies
