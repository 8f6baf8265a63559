# backoffice/services/order_service.py
import logging
import re
import uuid

from sqlmodel import Session

from backoffice.core.auth import RequestContext
from backoffice.core.errors import DataNotFoundError, InvalidArgumentError
from backoffice.database import atomic
from backoffice.models.order import Order, OrderItem
from backoffice.models.product import Product
from backoffice.models.user import User
from backoffice.repositories.cart_repo import CartRepository
from backoffice.repositories.order_repo import OrderRepository
from backoffice.repositories.product_repo import ProductRepository
from backoffice.repositories.user_repo import UserRepository
from backoffice.schemas.common import MessageResponse, Page
from backoffice.schemas.order import (
    OrderCreateRequest,
    OrderItemResponse,
    OrderResponse,
    OrderUpdateRequest,
)
from backoffice.schemas.product import ProductSummary
from backoffice.services.cart_conversion import CartSnapshotConverter
from backoffice.services.order_state import OrderStateMachine, touch
from backoffice.services.ownership import OwnershipGuard
from backoffice.services.pagination import PaginationGateway

logger = logging.getLogger(__name__)

ORDER_SORT_FIELDS = {
    "createdAt": Order.created_at,
    "updatedAt": Order.updated_at,
    "orderStatus": Order.order_status,
}

ORDER_ITEM_SORT_FIELDS = {
    "priceAtPurchase": OrderItem.price_at_purchase,
    "quantity": OrderItem.quantity,
}

# Fields a customer may change while the order is still CREATED.
UPDATABLE_FIELDS = (
    "first_name",
    "last_name",
    "address",
    "zip_code",
    "city",
    "phone",
    "delivery_method",
)


# Canonical lowercase form only: no braces, urn prefix, bare hex or uppercase.
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def parse_id(value: str | uuid.UUID) -> uuid.UUID:
    """
    Parse an id coming from the outside world.

    Only the canonical text form is accepted, so str(parse_id(v)) == v
    and messages built from either side show the same id.

    Raises:
        InvalidArgumentError: if the value is not a canonical UUID.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not UUID_PATTERN.fullmatch(value):
        raise InvalidArgumentError(f"Invalid UUID string: {value}")
    return uuid.UUID(value)


class OrderService:
    """
    Business logic for the order lifecycle.

    Responsibilities:
      - Create an order from the requester's cart (frozen prices)
      - Read orders, their status and their items
      - Partial updates of shipping details while CREATED
      - Cancellation while CREATED or PAID
      - Advancing the status along the forward chain (admin)

    Two surfaces:
      - self-service methods take a RequestContext and check ownership
      - admin methods take ids only and skip the ownership check

    Every mutating method reads, validates and writes inside one
    transaction; any failure rolls the whole operation back.

    Known gap: orders carry no version column, so two concurrent advances
    or cancels of the same order can overwrite each other.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        user_repo: UserRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        max_page_size: int | None = None,
    ):
        self.order_repo = order_repo
        self.user_repo = user_repo
        self.product_repo = product_repo
        self.converter = CartSnapshotConverter(cart_repo, product_repo)
        self.state_machine = OrderStateMachine()
        self.guard = OwnershipGuard(user_repo)
        self.order_pages = PaginationGateway(
            ORDER_SORT_FIELDS, tie_breaker=Order.id, max_size=max_page_size
        )
        self.item_pages = PaginationGateway(
            ORDER_ITEM_SORT_FIELDS, tie_breaker=OrderItem.id, max_size=max_page_size
        )

    # -------- Listing --------

    def list_orders(
        self,
        session: Session,
        user_id: str | None,
        page: int,
        size: int,
        direction: str,
        sort_by: str,
    ) -> Page[OrderResponse]:
        """
        Sorted page of orders, all of them or only one user's (admin).

        - NotFound if filtering by a user id that does not exist.
        """
        owner_id = None
        if user_id is not None:
            owner_id = parse_id(user_id)
        page_request = self.order_pages.page_request(page, size, direction, sort_by)

        if owner_id is not None and not self.user_repo.exists_by_id(session, owner_id):
            raise DataNotFoundError(f"User with id: {user_id}, was not found.")

        rows, total = self.order_repo.list_orders(session, owner_id, page_request)
        return self.order_pages.to_page(rows, total, page_request, self._to_response)

    def get_my_orders(
        self,
        session: Session,
        ctx: RequestContext,
        page: int,
        size: int,
        direction: str,
        sort_by: str,
    ) -> Page[OrderResponse]:
        """Sorted page of the requester's own orders."""
        page_request = self.order_pages.page_request(page, size, direction, sort_by)
        user = self._get_user_by_email(session, ctx.email)
        rows, total = self.order_repo.list_orders(session, user.id, page_request)
        return self.order_pages.to_page(rows, total, page_request, self._to_response)

    # -------- Reads --------

    def get_order_by_id(self, session: Session, order_id: str) -> OrderResponse:
        order = self._get_order(session, order_id)
        return self._to_response(order)

    def get_my_order_by_id(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str,
    ) -> OrderResponse:
        order = self._get_owned_order(session, ctx, order_id)
        return self._to_response(order)

    def get_order_status(self, session: Session, order_id: str) -> MessageResponse:
        order = self._get_order(session, order_id)
        return self._status_message(order_id, order)

    def get_my_order_status(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str,
    ) -> MessageResponse:
        order = self._get_owned_order(session, ctx, order_id)
        return self._status_message(order_id, order)

    def get_order_items(
        self,
        session: Session,
        order_id: str,
        page: int,
        size: int,
        direction: str,
        sort_by: str,
    ) -> Page[OrderItemResponse]:
        """Sorted page of an order's items (admin)."""
        oid = parse_id(order_id)
        page_request = self.item_pages.page_request(page, size, direction, sort_by)
        if not self.order_repo.exists_by_id(session, oid):
            raise DataNotFoundError(f"Order with id: {order_id}, was not found.")
        return self._items_page(session, oid, page_request)

    def get_my_order_items(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str,
        page: int,
        size: int,
        direction: str,
        sort_by: str,
    ) -> Page[OrderItemResponse]:
        """Sorted page of one of the requester's orders' items."""
        oid = parse_id(order_id)
        page_request = self.item_pages.page_request(page, size, direction, sort_by)
        order = self._get_owned_order(session, ctx, oid)
        return self._items_page(session, order.id, page_request)

    # -------- Mutations --------

    def create_order(
        self,
        session: Session,
        ctx: RequestContext,
        payload: OrderCreateRequest,
    ) -> OrderResponse:
        """
        Convert the requester's cart into an Order.

        Steps:
          1. Resolve the user by email.
          2. Snapshot the cart (error if empty, prices read now).
          3. Insert the Order (status CREATED).
          4. Insert one OrderItem per cart line.
          5. Delete the converted cart items.
          6. Commit; any failure rolls back steps 3-5.
        """
        user = self._get_user_by_email(session, ctx.email)
        snapshot = self.converter.snapshot(session, user)

        with atomic(session):
            order = Order(
                user_id=user.id,
                first_name=payload.first_name,
                last_name=payload.last_name,
                address=payload.address,
                zip_code=payload.zip_code,
                city=payload.city,
                phone=payload.phone,
                delivery_method=payload.delivery_method,
            )
            order = self.order_repo.create_order(session, order)
            items = self.converter.to_order_items(snapshot, order.id)
            self.order_repo.create_items(session, items)
            self.converter.consume(session, snapshot)

        session.refresh(order)
        logger.info(
            "Order %s created for user %s with %d item(s)",
            order.id,
            user.id,
            len(items),
        )
        return self._to_response(order)

    def update_order(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str,
        payload: OrderUpdateRequest,
    ) -> OrderResponse:
        """
        Partial update: only fields present (non-null) in the payload
        overwrite the stored values.

        - InvalidArgument unless the order is CREATED.
        """
        with atomic(session):
            order = self._get_owned_order(session, ctx, order_id)
            self.state_machine.ensure_can_update(order)

            changed = []
            for field in UPDATABLE_FIELDS:
                value = getattr(payload, field)
                if value is not None:
                    setattr(order, field, value)
                    changed.append(field)

            touch(order)
            order = self.order_repo.update_order(session, order)

        session.refresh(order)
        logger.info("Order %s updated (%s)", order.id, ", ".join(changed) or "no fields")
        return self._to_response(order)

    def cancel_order(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str,
    ) -> MessageResponse:
        """
        Cancel one of the requester's orders.

        - InvalidArgument unless the order is CREATED or PAID.
        """
        with atomic(session):
            order = self._get_owned_order(session, ctx, order_id)
            self.state_machine.cancel(order)
            order = self.order_repo.update_order(session, order)

        logger.info("Order %s canceled", order.id)
        return MessageResponse(message=f"Order with id: {order.id} was canceled.")

    def toggle_order_status(self, session: Session, order_id: str) -> MessageResponse:
        """
        Advance the order to its next status (admin).

          CREATED -> PAID -> ON_THE_WAY -> DELIVERED -> RETURNED

        - InvalidArgument if the order is CANCELED or RETURNED.
        """
        with atomic(session):
            order = self._get_order(session, order_id)
            previous, current = self.state_machine.advance(order)
            self.order_repo.update_order(session, order)

        logger.info(
            "Order %s status changed %s -> %s", order.id, previous.name, current.name
        )
        return MessageResponse(
            message=(
                f"Order with id: {order_id} was updated from status "
                f"'{previous.name}' to status '{current.name}'."
            )
        )

    # -------- Helpers --------

    def _get_user_by_email(self, session: Session, email: str) -> User:
        user = self.user_repo.get_by_email(session, email)
        if user is None:
            raise DataNotFoundError(f"User with email: {email}, was not found.")
        return user

    def _get_order(self, session: Session, order_id: str | uuid.UUID) -> Order:
        oid = parse_id(order_id)
        order = self.order_repo.get_by_id(session, oid)
        if order is None:
            raise DataNotFoundError(f"Order with id: {order_id}, was not found.")
        return order

    def _get_owned_order(
        self,
        session: Session,
        ctx: RequestContext,
        order_id: str | uuid.UUID,
    ) -> Order:
        order = self._get_order(session, order_id)
        self.guard.ensure_owner(session, ctx.email, order)
        return order

    def _items_page(self, session: Session, order_id: uuid.UUID, page_request):
        rows, total = self.order_repo.list_items(session, order_id, page_request)
        products = self.product_repo.get_many(
            session, list({row.product_id for row in rows})
        )
        return self.item_pages.to_page(
            rows,
            total,
            page_request,
            lambda item: self._to_item_response(item, products.get(item.product_id)),
        )

    @staticmethod
    def _status_message(order_id: str, order: Order) -> MessageResponse:
        return MessageResponse(
            message=f"Order with id: {order_id} has status '{order.order_status.name}'."
        )

    @staticmethod
    def _to_response(order: Order) -> OrderResponse:
        return OrderResponse(
            order_id=order.id,
            first_name=order.first_name,
            last_name=order.last_name,
            address=order.address,
            zip_code=order.zip_code,
            city=order.city,
            phone=order.phone,
            delivery_method=order.delivery_method,
            order_status=order.order_status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    @staticmethod
    def _to_item_response(item: OrderItem, product: Product | None) -> OrderItemResponse:
        summary = None
        if product is not None:
            summary = ProductSummary(
                product_id=product.id,
                product_name=product.product_name,
                current_price=product.current_price,
                product_status=product.product_status,
            )
        return OrderItemResponse(
            order_item_id=item.id,
            quantity=item.quantity,
            price_at_purchase=item.price_at_purchase,
            product=summary,
        )
