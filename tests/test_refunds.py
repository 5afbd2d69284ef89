from decimal import Decimal

import pytest

from conftest import login, make_paid_order, make_product, make_user
from storefront.data.models import OrderModel, PaymentModel, ProductModel, RefundModel, RefundRequestModel
from storefront.domain.errors import PaymentProviderError
from storefront.domain.payment_methods import RefundResult


@pytest.fixture
def notify(mocker):
    return mocker.patch(
        "storefront.services.refund_service.NotificationService.send_refund_approved",
        return_value=True,
    )


def _request_refund(client, order_id, reason="Item arrived damaged"):
    return client.post("/refund-requests", json={"order_id": order_id, "reason": reason})


def _switch_to_admin(client, admin):
    client.get("/logout")
    login(client, email="admin@example.com")


def test_customer_can_request_refund_for_paid_order(user_client, db, user):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)

    response = _request_refund(user_client, order.id)

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    listing = user_client.get("/customer-service").json()
    assert [r["order_id"] for r in listing["requests"]] == [order.id]
    assert [o["id"] for o in listing["orders"]] == [order.id]


def test_duplicate_refund_request_rejected(user_client, db, user):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)
    _request_refund(user_client, order.id)

    response = _request_refund(user_client, order.id)

    assert response.status_code == 400
    assert response.json()["detail"] == "Refund request already exists for this order."


def test_refund_request_needs_reason(user_client, db, user):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)

    response = _request_refund(user_client, order.id, reason="   ")

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select an order and provide a reason."


def test_refund_request_for_foreign_order(user_client, db):
    other = make_user(db, email="bob@example.com", username="bob")
    product = make_product(db)
    order = make_paid_order(db, other.id, product)

    response = _request_refund(user_client, order.id)

    assert response.status_code == 404


def test_refund_reason_truncated(user_client, db, user):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)

    response = _request_refund(user_client, order.id, reason="x" * 400)

    assert len(response.json()["reason"]) == 255


def test_approve_refunds_and_restocks(user_client, db, user, admin, gateways, notify):
    product = make_product(db, quantity=8)
    order = make_paid_order(db, user.id, product, quantity=2, payment_id="pi_123")
    request_id = _request_refund(user_client, order.id).json()["id"]
    gateways.stripe.refund.return_value = RefundResult(refund_id="re_1", status="succeeded")
    _switch_to_admin(user_client, admin)

    response = user_client.post(f"/admin/refunds/{request_id}/approve")

    assert response.status_code == 200, response.text
    assert response.json()["messages"] == ["Refund approved: payment refunded, stock restored, email sent."]
    gateways.stripe.refund.assert_called_once()
    assert gateways.stripe.refund.call_args.args == ("pi_123",)
    assert gateways.stripe.refund.call_args.kwargs["amount"] == Decimal("20.00")

    db.expire_all()
    assert db.get(ProductModel, product.id).quantity == 10
    assert db.get(OrderModel, order.id).status == "refunded"
    rr = db.get(RefundRequestModel, request_id)
    assert rr.status == "refunded"
    assert rr.admin_note == "Approved by boss"
    assert rr.decided_at is not None
    refund = db.query(RefundModel).one()
    assert refund.provider_refund_id == "re_1"
    notify.assert_called_once_with(user.email, user.username, order.id, request_id)


def test_refund_cannot_be_approved_twice(user_client, db, user, admin, gateways, notify):
    product = make_product(db, quantity=8)
    order = make_paid_order(db, user.id, product, quantity=2)
    request_id = _request_refund(user_client, order.id).json()["id"]
    gateways.stripe.refund.return_value = RefundResult(refund_id="re_1", status="succeeded")
    _switch_to_admin(user_client, admin)

    user_client.post(f"/admin/refunds/{request_id}/approve")
    response = user_client.post(f"/admin/refunds/{request_id}/approve")

    assert response.status_code == 400
    assert response.json()["detail"] == "Refund request is not pending."
    assert gateways.stripe.refund.call_count == 1
    db.expire_all()
    assert db.get(ProductModel, product.id).quantity == 10


def test_provider_error_leaves_state_untouched(user_client, db, user, admin, gateways, notify):
    product = make_product(db, quantity=8)
    order = make_paid_order(db, user.id, product, quantity=2)
    request_id = _request_refund(user_client, order.id).json()["id"]
    gateways.stripe.refund.side_effect = PaymentProviderError("Charge already refunded")
    _switch_to_admin(user_client, admin)

    response = user_client.post(f"/admin/refunds/{request_id}/approve")

    assert response.status_code == 502
    assert response.json()["detail"] == "Charge already refunded"
    db.expire_all()
    assert db.get(RefundRequestModel, request_id).status == "pending"
    assert db.get(OrderModel, order.id).status == "paid"
    assert db.get(ProductModel, product.id).quantity == 8
    notify.assert_not_called()


def test_approve_bank_transfer_without_payment_row(user_client, db, user, admin, notify):
    product = make_product(db)
    order = make_paid_order(db, user.id, product, provider=None)
    request_id = _request_refund(user_client, order.id).json()["id"]
    _switch_to_admin(user_client, admin)

    response = user_client.post(f"/admin/refunds/{request_id}/approve")

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Cannot approve: missing payment info")


def test_hitpay_refund_resolves_charge_just_in_time(user_client, db, user, admin, gateways, notify, mocker):
    product = make_product(db, quantity=5)
    order = make_paid_order(db, user.id, product, quantity=1, provider="HITPAY", payment_id=None, reference="pr_7")
    request_id = _request_refund(user_client, order.id).json()["id"]
    _switch_to_admin(user_client, admin)

    lookup = mocker.Mock(ok=True, status_code=200)
    lookup.json.return_value = {"id": "pr_7", "status": "completed", "payments": [{"id": "ch_7", "status": "succeeded"}]}
    refund = mocker.Mock(ok=True, status_code=200)
    refund.json.return_value = {"id": "rf_7", "status": "succeeded"}
    http = mocker.patch("storefront.services.payments.base.requests.request", side_effect=[lookup, refund])

    response = user_client.post(f"/admin/refunds/{request_id}/approve")

    assert response.status_code == 200, response.text
    assert http.call_args_list[1].kwargs["data"] == {"payment_id": "ch_7", "amount": "10.00"}
    db.expire_all()
    assert db.query(PaymentModel).filter_by(order_id=order.id).one().provider_payment_id == "ch_7"


def test_reject_refund(user_client, db, user, admin):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)
    request_id = _request_refund(user_client, order.id).json()["id"]
    _switch_to_admin(user_client, admin)

    response = user_client.post(f"/admin/refunds/{request_id}/reject", json={"admin_note": "Outside window"})

    assert response.json()["messages"] == ["Refund rejected."]
    db.expire_all()
    rr = db.get(RefundRequestModel, request_id)
    assert rr.status == "rejected"
    assert rr.admin_note == "Outside window"

    again = user_client.post(f"/admin/refunds/{request_id}/reject")
    assert again.status_code == 400
    assert again.json()["detail"] == "Refund request not pending / not found."


def test_reject_uses_default_note(user_client, db, user, admin):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)
    request_id = _request_refund(user_client, order.id).json()["id"]
    _switch_to_admin(user_client, admin)

    user_client.post(f"/admin/refunds/{request_id}/reject")

    db.expire_all()
    assert db.get(RefundRequestModel, request_id).admin_note == "Rejected by admin"


def test_admin_refund_listing(user_client, db, user, admin):
    product = make_product(db)
    order = make_paid_order(db, user.id, product)
    _request_refund(user_client, order.id)
    _switch_to_admin(user_client, admin)

    rows = user_client.get("/admin/refunds").json()

    assert len(rows) == 1
    assert rows[0]["username"] == "alice"
    assert rows[0]["provider"] == "STRIPE"
    assert rows[0]["order_id"] == order.id


def test_admin_routes_forbidden_for_customers(user_client):
    assert user_client.get("/admin/refunds").status_code == 403
    assert user_client.post("/admin/refunds/1/approve").status_code == 403


def test_admin_dashboard_and_orders(admin_client, db, user):
    product = make_product(db)
    make_paid_order(db, user.id, product)

    dashboard = admin_client.get("/admin/dashboard").json()
    orders = admin_client.get("/admin/orders").json()

    assert [p["name"] for p in dashboard["products"]] == ["Apple"]
    assert orders[0]["username"] == "alice"
    assert len(dashboard["orders"]) == 1
