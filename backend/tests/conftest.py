"""
Pytest fixtures for the cafe POS backend tests.

Provides the test database, cashier/product/stock factories and the
X-User-Id auth header.
"""

from decimal import Decimal

import pytest
from cafe_pos import create_app
from cafe_pos.extensions import db
from cafe_pos.models import User, Product, InventoryRecord, Order, OrderItem
from cafe_pos.services.auth_service import hash_password
from cafe_pos.time_utils import utcnow


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def cashier(db_session):
    """Cashier who rings up every order in the tests."""
    user = User(
        full_name="Test Cashier",
        email="cashier@test.local",
        password_hash=hash_password("Password123!"),
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def auth_headers(cashier):
    return {'X-User-Id': str(cashier.id)}


@pytest.fixture(scope='function')
def make_product(db_session):
    """
    Factory: make_product(name, category, price, stock=None, is_active=True).

    stock creates an InventoryRecord with that quantity; None leaves the
    product without one.
    """
    def _make(name="Item", category="coffee", price="1.000", stock=None, is_active=True):
        product = Product(
            name=name,
            category=category,
            price_omr=Decimal(price),
            is_active=is_active,
        )
        db_session.add(product)
        db_session.flush()
        if stock is not None:
            db_session.add(InventoryRecord(product_id=product.id, quantity=stock, updated_at=utcnow()))
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def stock_of(db_session):
    """Fresh read of a product's stock; None when it has no record."""
    def _stock(product_id):
        db_session.expire_all()
        record = db_session.get(InventoryRecord, product_id)
        return record.quantity if record else None

    return _stock


@pytest.fixture(scope='function')
def order_count(db_session):
    def _count():
        return db_session.query(Order).count(), db_session.query(OrderItem).count()

    return _count


@pytest.fixture(scope='function')
def make_order(db_session, cashier):
    """
    Factory for historical orders with a fixed created_at (reports tests).

    lines: [(product, quantity)], priced at the product's current price.
    """
    def _make(created_at, lines, payment_method="Cash"):
        total = sum((Decimal(product.price_omr) * qty for product, qty in lines), Decimal("0.000"))
        order = Order(
            cashier_id=cashier.id,
            payment_method=payment_method,
            total_amount_omr=total,
            created_at=created_at,
        )
        db_session.add(order)
        db_session.flush()
        for product, qty in lines:
            db_session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=qty,
                price_at_sale_omr=product.price_omr,
                note="",
            ))
        db_session.commit()
        return order

    return _make
