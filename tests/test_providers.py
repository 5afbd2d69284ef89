from decimal import Decimal

import fakeredis
import pytest
import stripe

from storefront.domain.errors import PaymentProviderError
from storefront.domain.session import CartLine, SessionContext, SessionUser
from storefront.services.payments import PaymentGateways
from storefront.services.payments.paypal_provider import PayPalProvider, first_capture
from storefront.services.payments.stripe_provider import StripeProvider, to_minor_units
from storefront.services.session_store import SessionStore
from storefront.utils.retry import status_poll


def _resp(mocker, data, status=200):
    resp = mocker.Mock(ok=200 <= status < 300, status_code=status, text=str(data))
    resp.json.return_value = data
    return resp


@pytest.fixture
def paypal(mocker):
    mocker.patch(
        "storefront.services.payments.paypal_provider.requests.post",
        return_value=_resp(mocker, {"access_token": "tok"}),
    )
    return PayPalProvider(client_id="id", client_secret="secret", base_url="https://paypal.test")


def test_paypal_capture_extracts_capture_id(paypal, mocker):
    capture = {
        "id": "CAP-9",
        "status": "COMPLETED",
        "amount": {"value": "25.50", "currency_code": "SGD"},
    }
    request = mocker.patch(
        "storefront.services.payments.base.requests.request",
        return_value=_resp(
            mocker,
            {"status": "COMPLETED", "purchase_units": [{"payments": {"captures": [capture]}}]},
        ),
    )

    result = paypal.capture_order("PP-9")

    assert result.completed
    assert result.charge_id == "CAP-9"
    assert result.amount == Decimal("25.50")
    assert result.currency == "SGD"
    assert request.call_args.args == ("POST", "https://paypal.test/v2/checkout/orders/PP-9/capture")
    assert request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"


def test_paypal_refund_uses_capture_endpoint(paypal, mocker):
    request = mocker.patch(
        "storefront.services.payments.base.requests.request",
        return_value=_resp(mocker, {"id": "RF-1", "status": "COMPLETED"}),
    )

    result = paypal.refund("CAP-9", amount=Decimal("20"), currency="SGD", note="Refund approved by boss")

    assert result.refund_id == "RF-1"
    assert request.call_args.args[1] == "https://paypal.test/v2/payments/captures/CAP-9/refund"
    assert request.call_args.kwargs["json"] == {
        "amount": {"value": "20.00", "currency_code": "SGD"},
        "note_to_payer": "Refund approved by boss",
    }


def test_paypal_error_response_raises(paypal, mocker):
    mocker.patch(
        "storefront.services.payments.base.requests.request",
        return_value=_resp(mocker, {"name": "UNPROCESSABLE_ENTITY"}, status=422),
    )

    with pytest.raises(PaymentProviderError) as exc:
        paypal.capture_order("PP-9")

    assert exc.value.status_code == 422
    assert exc.value.details == {"name": "UNPROCESSABLE_ENTITY"}


def test_paypal_missing_credentials():
    provider = PayPalProvider(client_id="", client_secret="", base_url="https://paypal.test")

    with pytest.raises(PaymentProviderError, match="Missing PAYPAL_CLIENT_ID"):
        provider.create_order(Decimal("5"), "SGD")


def test_first_capture_missing():
    assert first_capture({"purchase_units": [{}]}) == {}


def test_stripe_capture_reads_payment_intent(mocker):
    mocker.patch.object(stripe, "api_key", "sk_test")
    session = mocker.Mock(payment_status="paid", payment_intent="pi_5", amount_total=2550, currency="sgd")
    mocker.patch("stripe.checkout.Session.retrieve", return_value=session)

    result = StripeProvider().capture_order("cs_5")

    assert result.completed
    assert result.charge_id == "pi_5"
    assert result.amount == Decimal("25.50")
    assert result.currency == "sgd"


def test_stripe_refund_in_minor_units(mocker):
    mocker.patch.object(stripe, "api_key", "sk_test")
    create = mocker.patch("stripe.Refund.create", return_value=mocker.Mock(id="re_5", status="succeeded"))

    result = StripeProvider().refund("pi_5", amount=Decimal("25.50"))

    assert result.refund_id == "re_5"
    create.assert_called_once_with(payment_intent="pi_5", reason="requested_by_customer", amount=2550)


def test_stripe_missing_key(mocker):
    mocker.patch.object(stripe, "api_key", "")

    with pytest.raises(PaymentProviderError, match="Missing STRIPE_SECRET_KEY"):
        StripeProvider().capture_order("cs_5")


def test_to_minor_units():
    assert to_minor_units(Decimal("10.00")) == 1000
    assert to_minor_units("5.5") == 550


def test_gateways_lookup_by_provider_name(mocker):
    stripe_provider, paypal_provider, hitpay_provider = mocker.Mock(), mocker.Mock(), mocker.Mock()
    gateways = PaymentGateways(stripe=stripe_provider, paypal=paypal_provider, hitpay=hitpay_provider)

    assert gateways.get("STRIPE") is stripe_provider
    assert gateways.get("paypal") is paypal_provider
    with pytest.raises(PaymentProviderError):
        gateways.get("BITCOIN")


def test_status_poll_returns_last_result_when_exhausted():
    calls = []

    def lookup():
        calls.append(1)
        return {"status": "pending"}

    poll = status_poll(attempts=3, delay=0, is_pending=lambda data: data["status"] == "pending")

    assert poll(lookup)() == {"status": "pending"}
    assert len(calls) == 3


def test_session_store_round_trip():
    store = SessionStore(client=fakeredis.FakeRedis(decode_responses=True), ttl=60)
    ctx = SessionContext(
        session_id=store.new_session_id(),
        user=SessionUser(id=1, username="alice", email="alice@example.com"),
        cart=[CartLine(product_id=3, product_name="Apple", price=Decimal("1.20"), quantity=2)],
    )

    store.save(ctx)
    loaded = store.load(ctx.session_id)

    assert loaded.user.username == "alice"
    assert loaded.cart_total == Decimal("2.40")
    assert store.redis.ttl(f"session:{ctx.session_id}") <= 60

    store.destroy(ctx.session_id)
    assert store.load(ctx.session_id).user is None
