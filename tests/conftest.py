"""Pytest fixtures for backoffice tests."""

import os

# Settings are read at import time; give them test values first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from backoffice.core.auth import RequestContext
from backoffice.core.config import get_settings
from backoffice.models.cart import CartItem
from backoffice.models.enums import DeliveryMethod, OrderStatus, ProductStatus, UserRole
from backoffice.models.order import Order, OrderItem
from backoffice.models.product import Product
from backoffice.models.user import User
from backoffice.repositories.cart_repo import CartRepository
from backoffice.repositories.order_repo import OrderRepository
from backoffice.repositories.product_repo import ProductRepository
from backoffice.repositories.user_repo import UserRepository
from backoffice.services.order_service import OrderService


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def service():
    return OrderService(
        OrderRepository(),
        UserRepository(),
        CartRepository(),
        ProductRepository(),
        max_page_size=100,
    )


@pytest.fixture
def make_user(session):
    def _make(email="client@example.com", role=UserRole.CLIENT):
        user = User(email=email, first_name="Jane", last_name="Doe", role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(session):
    def _make(price="40.00", name="Garden Hose", status=ProductStatus.AVAILABLE):
        product = Product(
            product_name=name,
            list_price=Decimal(price),
            current_price=Decimal(price),
            product_status=status,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def add_to_cart(session):
    def _add(user, product, quantity=1):
        item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _add


@pytest.fixture
def make_order(session, make_product):
    """Insert an order with one item directly, in any status."""

    def _make(user, status=OrderStatus.CREATED, product=None, quantity=1):
        product = product or make_product()
        stamp = datetime.now(timezone.utc) - timedelta(minutes=5)
        order = Order(
            user_id=user.id,
            first_name="Jane",
            last_name="Doe",
            address="1 Garden Lane",
            zip_code="12345",
            city="Springfield",
            phone="+123456789012",
            delivery_method=DeliveryMethod.COURIER_DELIVERY,
            order_status=status,
            created_at=stamp,
            updated_at=stamp,
        )
        session.add(order)
        session.flush()
        session.add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                price_at_purchase=product.current_price,
            )
        )
        session.commit()
        session.refresh(order)
        return order

    return _make


def _context_for(user) -> RequestContext:
    return RequestContext(user_id=user.id, email=user.email, role=user.role)


def _token_for(user_id, email, role=UserRole.CLIENT) -> str:
    settings = get_settings()
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def _auth_header(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token_for(user.id, user.email, user.role)}"}


@pytest.fixture
def client(session):
    """TestClient whose requests share the test session."""
    from backoffice.database import get_session
    from backoffice.main import app

    def _get_session():
        return session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def random_id():
    return str(uuid.uuid4())


@pytest.fixture
def context_for():
    return _context_for


@pytest.fixture
def token_for():
    return _token_for


@pytest.fixture
def auth_header():
    return _auth_header
