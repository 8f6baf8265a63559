# backoffice/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Enum as SAEnum
from sqlmodel import SQLModel, Field

from backoffice.models.enums import DeliveryMethod, OrderStatus


class Order(SQLModel, table=True):
    """
    Customer order.

    - user_id is set at creation and never changes.
    - Shipping fields and delivery_method are editable only while the
      order is CREATED.
    - Orders are never deleted; CANCELED and RETURNED are kept as history.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    first_name: str = Field(description="First name of order recipient")
    last_name: str = Field(description="Last name of order recipient")
    address: str = Field(description="Shipping address")
    zip_code: str = Field(description="Shipping address ZIP code")
    city: str = Field(description="Delivery city")
    phone: str = Field(description="Recipient phone number")

    # VARCHAR names on every backend, so ORDER BY is alphabetical.
    delivery_method: DeliveryMethod = Field(
        sa_type=SAEnum(DeliveryMethod, native_enum=False, length=20),
        description="Courier delivery or customer pickup",
    )

    order_status: OrderStatus = Field(
        default=OrderStatus.CREATED,
        sa_type=SAEnum(OrderStatus, native_enum=False, length=20),
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        description="Last mutation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    quantity and price_at_purchase are copied from the cart and the
    product at checkout and are never written again.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Display lookup only; product edits never touch the item.
    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price_at_purchase: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Product price at the moment the order was placed",
    )
