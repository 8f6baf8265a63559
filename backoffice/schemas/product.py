# backoffice/schemas/product.py
import uuid
from decimal import Decimal

from backoffice.models.enums import ProductStatus
from backoffice.schemas.common import CamelModel


class ProductSummary(CamelModel):
    """
    Product as currently listed in the catalog.

    Shown next to an order item for display only; its price may differ
    from the item's price_at_purchase.
    """

    product_id: uuid.UUID
    product_name: str
    current_price: Decimal
    product_status: ProductStatus
