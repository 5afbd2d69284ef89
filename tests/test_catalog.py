from conftest import make_product
from storefront.data.models import ProductModel


def test_shopping_lists_products(user_client, db):
    make_product(db, name="Apple")
    make_product(db, name="Pear")

    response = user_client.get("/shopping")

    assert [p["name"] for p in response.json()] == ["Apple", "Pear"]


def test_product_not_found(user_client):
    response = user_client.get("/product/42")

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


def test_inventory_admin_only(user_client):
    assert user_client.get("/inventory").status_code == 403


def test_add_product_with_image(admin_client, db):
    response = admin_client.post(
        "/addProduct",
        data={"name": "Milk", "quantity": "12", "price": "3.2"},
        files={"image": ("milk.jpg", b"fake-jpeg", "image/jpeg")},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["quantity"] == 12
    assert body["image"].startswith("images/")


def test_add_product_rejects_negative_values(admin_client):
    response = admin_client.post("/addProduct", data={"name": "Milk", "quantity": "-1", "price": "3"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Quantity cannot be negative"

    response = admin_client.post("/addProduct", data={"name": "Milk", "quantity": "1", "price": "-3"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Price cannot be negative"


def test_update_product_keeps_image(admin_client, db):
    product = make_product(db)
    product.image = "images/apple.png"
    db.commit()

    response = admin_client.post(
        f"/updateProduct/{product.id}", data={"name": "Green Apple", "quantity": "7", "price": "1.10"}
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Green Apple"
    assert response.json()["image"] == "images/apple.png"


def test_delete_product(admin_client, db):
    product_id = make_product(db).id

    response = admin_client.get(f"/deleteProduct/{product_id}")

    assert response.status_code == 200
    db.expire_all()
    assert db.get(ProductModel, product_id) is None
