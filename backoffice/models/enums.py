import enum


class OrderStatus(str, enum.Enum):
    """
    Order lifecycle stage. Stored by name.

    Legal transitions live in backoffice.services.order_state.
    """

    CREATED = "CREATED"
    PAID = "PAID"
    ON_THE_WAY = "ON_THE_WAY"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"
    RETURNED = "RETURNED"


class DeliveryMethod(str, enum.Enum):
    COURIER_DELIVERY = "COURIER_DELIVERY"
    CUSTOMER_PICKUP = "CUSTOMER_PICKUP"


class ProductStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    SOLD_OUT = "SOLD_OUT"


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    ADMINISTRATOR = "ADMINISTRATOR"
