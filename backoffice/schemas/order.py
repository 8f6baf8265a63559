# backoffice/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field, field_validator

from backoffice.models.enums import DeliveryMethod, OrderStatus
from backoffice.schemas.common import CamelModel
from backoffice.schemas.product import ProductSummary

ZIP_CODE_PATTERN = r"^[0-9]{5}$"
PHONE_PATTERN = r"^\+\d{9,15}$"


class OrderCreateRequest(CamelModel):
    """
    Payload for placing an order from the current cart.

    User provides:
      - recipient first/last name
      - shipping address, zip code, city
      - phone number
      - delivery method

    Backend derives:
      - user from the bearer token
      - status = CREATED
      - items from the cart, priced at the products' current price
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(min_length=2, max_length=30)
    last_name: str = Field(min_length=2, max_length=30)
    address: str = Field(max_length=255)
    zip_code: str = Field(pattern=ZIP_CODE_PATTERN)
    city: str = Field(min_length=2, max_length=100)
    phone: str = Field(pattern=PHONE_PATTERN)
    delivery_method: DeliveryMethod

    @field_validator("first_name", "last_name", "address", "city", mode="before")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("field cannot be empty")
        return v


class OrderUpdateRequest(CamelModel):
    """
    Partial update payload. Omitted (null) fields keep their value.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(default=None, min_length=2, max_length=30)
    last_name: str | None = Field(default=None, min_length=2, max_length=30)
    address: str | None = Field(default=None, max_length=255)
    zip_code: str | None = Field(default=None, pattern=ZIP_CODE_PATTERN)
    city: str | None = Field(default=None, min_length=2, max_length=100)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    delivery_method: DeliveryMethod | None = None

    @field_validator("first_name", "last_name", "address", "city", mode="before")
    @classmethod
    def not_blank_if_given(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("field cannot be empty")
        return v


class OrderResponse(CamelModel):
    """
    Order detail (without items).
    """

    order_id: uuid.UUID
    first_name: str
    last_name: str
    address: str
    zip_code: str
    city: str
    phone: str
    delivery_method: DeliveryMethod
    order_status: OrderStatus
    created_at: datetime
    updated_at: datetime


class OrderItemResponse(CamelModel):
    """
    A purchased line with its frozen price and the product it came from.
    """

    order_item_id: uuid.UUID
    quantity: int
    price_at_purchase: Decimal
    product: ProductSummary | None = None
