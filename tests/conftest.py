import os
import shutil
import tempfile
from decimal import Decimal

# srodowisko testowe ustawione zanim storefront.utils.settings zostanie zaimportowane
_TMP = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test_storefront.db"
os.environ["STATIC_DIR"] = os.path.join(_TMP, "static")
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["CURRENCY"] = "SGD"

import fakeredis
import pytest
from fastapi.testclient import TestClient

import storefront.data.models  # noqa: F401
from storefront.api import create_app
from storefront.api.deps import get_gateways, get_session_store
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import OrderModel, PaymentModel, ProductModel
from storefront.domain.schemas import UserCreate
from storefront.services.payments import PaymentGateways
from storefront.services.payments.hitpay_provider import HitPayProvider
from storefront.services.session_store import SessionStore
from storefront.services.user_service import UserService
from storefront.utils.settings import RECEIPTS_DIR

HITPAY_SALT = "test-salt"
PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    shutil.rmtree(RECEIPTS_DIR, ignore_errors=True)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store():
    return SessionStore(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def gateways(mocker):
    hitpay = HitPayProvider(
        api_key="hitpay-key",
        salt=HITPAY_SALT,
        base_url="https://hitpay.test",
        poll_attempts=5,
        poll_delay=0,
    )
    return PaymentGateways(stripe=mocker.Mock(), paypal=mocker.Mock(), hitpay=hitpay)


@pytest.fixture
def app(store, gateways):
    application = create_app()
    application.dependency_overrides[get_session_store] = lambda: store
    application.dependency_overrides[get_gateways] = lambda: gateways
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def make_user(db, email="alice@example.com", username="alice", role="user"):
    return UserService(db).register(
        UserCreate(username=username, email=email, password=PASSWORD, address="1 Main St", contact="123"),
        role=role,
    )


def make_product(db, name="Apple", quantity=10, price="10.00"):
    product = ProductModel(name=name, quantity=quantity, price=Decimal(price))
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_paid_order(db, user_id, product, quantity=2, provider="STRIPE", payment_id="pi_123", reference=None):
    """Zamowienie oplacone z wierszem platnosci, bez przechodzenia przez checkout."""
    line_total = Decimal(product.price) * quantity
    order = OrderModel(
        user_id=user_id,
        items=[
            {
                "product_id": product.id,
                "product_name": product.name,
                "price": str(product.price),
                "quantity": quantity,
                "image": None,
            }
        ],
        total=line_total,
        payment_method="Stripe Card",
        status="paid",
    )
    db.add(order)
    db.flush()
    if provider:
        db.add(
            PaymentModel(
                order_id=order.id,
                provider=provider,
                provider_order_id=reference or f"{provider.lower()}-order-{order.id}",
                provider_reference=reference or payment_id,
                provider_payment_id=payment_id,
                amount=line_total,
                currency="SGD",
                payment_status="COMPLETED",
            )
        )
    db.commit()
    db.refresh(order)
    return order


def login(client, email="alice@example.com", password=PASSWORD):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@example.com", username="boss", role="admin")


@pytest.fixture
def user_client(client, user):
    login(client)
    return client


@pytest.fixture
def admin_client(client, admin):
    login(client, email="admin@example.com")
    return client
