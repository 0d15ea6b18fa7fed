"""Product listing, search policy and admin-only creation."""


def test_search_by_text_is_case_insensitive(client, make_product):
    make_product(name="Neon Katana", description="Filo de plasma")
    make_product(name="Holo Visor", description="Realidad aumentada")

    names = [p["name"] for p in client.get("/products", params={"q": "KATANA"}).json()]
    assert names == ["Neon Katana"]

    names = [p["name"] for p in client.get("/products", params={"q": "plasma"}).json()]
    assert names == ["Neon Katana"]


def test_filter_by_tag(client, make_product):
    make_product(name="Neon Katana", tags=["Weapons", "neon"])
    make_product(name="Holo Visor", tags=["wearables"])

    names = [p["name"] for p in client.get("/products", params={"tag": "weapons"}).json()]
    assert names == ["Neon Katana"]

    names = [p["name"] for p in client.get("/products", params={"q": "visor", "tag": "neon"}).json()]
    assert names == []


def test_list_without_filters(client, make_product):
    make_product(name="A")
    make_product(name="B")
    assert len(client.get("/products").json()) == 2


def test_get_product(client, make_product):
    product_id = make_product(name="Neon Katana", price_cents=10000)

    body = client.get(f"/products/{product_id}").json()
    assert body["priceCents"] == 10000
    assert client.get("/products/999").status_code == 404


def test_create_product_requires_admin(client, login):
    payload = {"name": "Cyber Deck", "priceCents": 45000, "tags": ["tech"]}

    assert client.post("/products", json=payload).status_code == 401

    login()
    assert client.post("/products", json=payload).status_code == 403

    client.cookies.clear()
    login(email="admin@neon.mx", name="Admin", role="admin")
    resp = client.post("/products", json=payload)
    assert resp.status_code == 201
    assert resp.json()["tags"] == ["tech"]


def test_negative_price_is_rejected(client, login):
    login(email="admin@neon.mx", name="Admin", role="admin")
    resp = client.post("/products", json={"name": "Glitch", "priceCents": -1})
    assert resp.status_code == 400
