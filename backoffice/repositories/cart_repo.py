# backoffice/repositories/cart_repo.py
import uuid

from sqlmodel import Session, select

from backoffice.models.cart import CartItem


class CartRepository:
    """
    Cart storage as seen by checkout.

    NOTE:
      - No commits here; cart consumption is part of the order
        creation transaction owned by the service.
    """

    # Get items for a user
    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.added_at)
        )
        return list(session.exec(stmt).all())

    def delete_items(self, session: Session, items: list[CartItem]) -> None:
        for item in items:
            session.delete(item)
        session.flush()
