from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from products.product import Product
from products.product_service import ProductCatalog
from src.config import TestConfig
from src.extensions import backend, drafts, snapshots
from src.main import create_app
from tests.fakes import FakeBackend, make_token


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def app(fake_backend):
    app = create_app(TestConfig)
    original_session = backend.session
    session = MagicMock()
    session.request.side_effect = fake_backend
    backend.session = session
    yield app
    backend.session = original_session
    snapshots.clear()
    drafts.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def admin_headers():
    return {"x-admin-key": "super-secret"}


@pytest.fixture
def widget():
    return Product(id="p1", name="Widget", sku="W-1", hsn_code="8471",
                   price=Decimal("100"), mrp=Decimal("120"), tax_rate=Decimal("18"), stock=3)


@pytest.fixture
def gadget():
    return Product(id="p2", name="Gadget", sku="G-1", hsn_code="8517",
                   price=Decimal("50"), mrp=Decimal("50"), tax_rate=Decimal("5"), stock=10)


@pytest.fixture
def sold_out():
    return Product(id="p3", name="Sold Out", sku="S-1", price=Decimal("10"), stock=0)


@pytest.fixture
def catalog(widget, gadget, sold_out):
    return ProductCatalog(products=[widget, gadget, sold_out])


PRODUCTS_BODY = {
    "products": [
        {"_id": "p1", "name": "Widget", "sku": "W-1", "hsnCode": "8471", "price": 100, "mrp": 120,
         "taxRate": 18, "stock": 3},
        {"_id": "p2", "name": "Gadget", "sku": "G-1", "hsnCode": "8517", "price": 50, "taxRate": 5, "stock": 10},
        {"_id": "p3", "name": "Sold Out", "sku": "S-1", "price": 10, "stock": 0},
    ],
    "totalPages": 1,
}

SETTINGS_BODY = {"company": {"name": "Acme Stores", "currency": "INR"}, "payment": {"upiId": "acme@upi"}}


@pytest.fixture
def tenant_backend(fake_backend):
    """Backend with a product catalog and company settings for tenant t1."""
    fake_backend.on("GET", "/products", PRODUCTS_BODY)
    fake_backend.on("GET", "/settings", SETTINGS_BODY)
    return fake_backend
