from decimal import Decimal

from conftest import login, make_product
from storefront.data.models import CartModel


def test_cart_requires_login(client):
    response = client.get("/cart")
    assert response.status_code == 401
    assert response.json()["detail"] == "Please log in to view this resource"


def test_add_to_cart_caps_at_stock(user_client, db):
    product = make_product(db, quantity=3)

    response = user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 5})

    assert response.status_code == 200
    body = response.json()
    assert body["items"][0]["quantity"] == 3
    assert any(m.startswith("Not enough stock.") for m in body["messages"])
    assert "Available: 3, in cart: 0." in body["messages"][0]


def test_add_to_cart_merges_existing_line(user_client, db):
    product = make_product(db, quantity=10, price="2.50")

    user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 2})
    response = user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 3})

    body = response.json()
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 5
    assert Decimal(body["total"]) == Decimal("12.50")


def test_add_to_cart_defaults_to_one(user_client, db):
    product = make_product(db)

    response = user_client.post(f"/add-to-cart/{product.id}")

    assert response.json()["items"][0]["quantity"] == 1


def test_add_missing_product_returns_404(user_client):
    response = user_client.post("/add-to-cart/999", json={"quantity": 1})
    assert response.status_code == 404


def test_cart_is_persisted_per_user(user_client, db, user):
    product = make_product(db)

    user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 2})

    row = db.get(CartModel, user.id)
    assert row is not None
    assert row.items[0]["product_id"] == product.id
    assert row.items[0]["quantity"] == 2


def test_update_cart_caps_and_reports(user_client, db):
    product = make_product(db, quantity=4)
    user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 1})

    response = user_client.post(f"/update-cart/{product.id}", json={"quantity": 9})

    body = response.json()
    assert body["items"][0]["quantity"] == 4
    assert body["messages"] == ["Not enough stock. Max available: 4."]


def test_update_item_not_in_cart(user_client, db):
    product = make_product(db)
    other = make_product(db, name="Pear")
    user_client.post(f"/add-to-cart/{product.id}", json={"quantity": 1})

    response = user_client.post(f"/update-cart/{other.id}", json={"quantity": 2})

    assert response.json()["messages"] == ["Item not found in cart."]


def test_remove_and_clear(user_client, db, user):
    apple = make_product(db)
    pear = make_product(db, name="Pear", price="1.00")
    user_client.post(f"/add-to-cart/{apple.id}", json={"quantity": 1})
    user_client.post(f"/add-to-cart/{pear.id}", json={"quantity": 1})

    response = user_client.post(f"/cart/remove/{apple.id}")
    assert [i["product_id"] for i in response.json()["items"]] == [pear.id]

    response = user_client.post("/cart/clear")
    assert response.json()["items"] == []
    db.expire_all()
    assert db.get(CartModel, user.id) is None


def test_login_restores_persisted_cart(client, db, user):
    product = make_product(db)
    login(client)
    client.post(f"/add-to-cart/{product.id}", json={"quantity": 2})
    client.get("/logout")

    login(client)
    response = client.get("/cart")

    assert response.json()["items"][0]["quantity"] == 2
