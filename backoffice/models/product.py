# backoffice/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from backoffice.models.enums import ProductStatus


class Product(SQLModel, table=True):
    """
    Catalog entry.

    Pricing administration lives outside the order workflow. Orders copy
    `current_price` into their items at checkout and never read it again.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(default=None)

    list_price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Regular (undiscounted) price",
    )

    current_price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Price a customer pays right now",
    )

    product_status: ProductStatus = Field(
        default=ProductStatus.AVAILABLE,
        index=True,
    )

    image_url: str | None = Field(default=None)

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
