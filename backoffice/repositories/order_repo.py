# backoffice/repositories/order_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from backoffice.models.order import Order, OrderItem
from backoffice.services.pagination import PageRequest


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_orders(
        self,
        session: Session,
        user_id: uuid.UUID | None,
        page_request: PageRequest,
    ) -> tuple[list[Order], int]:
        """
        One sorted page of orders, optionally limited to one owner,
        plus the total number of matching rows.
        """
        stmt = select(Order)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        return self._fetch_page(session, stmt, page_request)

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def exists_by_id(self, session: Session, order_id: uuid.UUID) -> bool:
        stmt = select(func.count()).select_from(Order).where(Order.id == order_id)
        return session.exec(stmt).one() > 0

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Order items ----

    def list_items(
        self,
        session: Session,
        order_id: uuid.UUID,
        page_request: PageRequest,
    ) -> tuple[list[OrderItem], int]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return self._fetch_page(session, stmt, page_request)

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items

    # ---- helpers ----

    def _fetch_page(self, session: Session, stmt, page_request: PageRequest):
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = session.exec(count_stmt).one()
        rows = session.exec(page_request.apply(stmt)).all()
        return list(rows), int(total)
