# backoffice/services/ownership.py
from sqlmodel import Session

from backoffice.core.errors import AccessDeniedError
from backoffice.models.order import Order
from backoffice.repositories.user_repo import UserRepository


class OwnershipGuard:
    """
    Self-service check: the requester must be the order's owner.

    Ownership is decided by email alone; the requester's role does not
    matter. Administrative operations never call this.
    """

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def ensure_owner(self, session: Session, email: str, order: Order) -> None:
        owner = self.user_repo.get_by_id(session, order.user_id)
        if owner is None or owner.email != email:
            raise AccessDeniedError(
                f"Order with id: {order.id}, does not belong to the user "
                f"with email: {email}."
            )
