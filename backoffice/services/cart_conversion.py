# backoffice/services/cart_conversion.py
import uuid
from dataclasses import dataclass
from decimal import Decimal

from sqlmodel import Session

from backoffice.core.errors import DataNotFoundError, InvalidArgumentError
from backoffice.models.cart import CartItem
from backoffice.models.order import OrderItem
from backoffice.models.user import User
from backoffice.repositories.cart_repo import CartRepository
from backoffice.repositories.product_repo import ProductRepository


@dataclass(frozen=True)
class SnapshotLine:
    product_id: uuid.UUID
    quantity: int
    price_at_purchase: Decimal


@dataclass(frozen=True)
class CartSnapshot:
    """
    A user's cart with every line priced at the product's current price.

    Taken before anything is written so that an empty cart or a missing
    product fails the checkout with zero writes.
    """

    user_id: uuid.UUID
    cart_items: list[CartItem]
    lines: list[SnapshotLine]


class CartSnapshotConverter:
    """
    Turns a cart into order items with frozen pricing.

    Steps (driven by the order service inside one transaction):
      1. snapshot()       - load cart + current prices, fail if empty
      2. to_order_items() - build OrderItem rows for the new order
      3. consume()        - delete the converted cart items
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    def snapshot(self, session: Session, user: User) -> CartSnapshot:
        cart_items = self.cart_repo.list_for_user(session, user.id)
        if not cart_items:
            raise InvalidArgumentError(
                f"Cannot place order: user with email {user.email} has an empty cart."
            )

        products = self.product_repo.get_many(
            session, [ci.product_id for ci in cart_items]
        )

        lines: list[SnapshotLine] = []
        for ci in cart_items:
            product = products.get(ci.product_id)
            if product is None:
                raise DataNotFoundError(
                    f"Product with id: {ci.product_id}, was not found."
                )
            lines.append(
                SnapshotLine(
                    product_id=product.id,
                    quantity=ci.quantity,
                    price_at_purchase=Decimal(product.current_price),
                )
            )

        return CartSnapshot(user_id=user.id, cart_items=cart_items, lines=lines)

    @staticmethod
    def to_order_items(snapshot: CartSnapshot, order_id: uuid.UUID) -> list[OrderItem]:
        return [
            OrderItem(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_purchase=line.price_at_purchase,
            )
            for line in snapshot.lines
        ]

    def consume(self, session: Session, snapshot: CartSnapshot) -> None:
        self.cart_repo.delete_items(session, snapshot.cart_items)
