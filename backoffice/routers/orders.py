# backoffice/routers/orders.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from backoffice.core.auth import RequestContext, require_admin, require_auth
from backoffice.core.config import get_settings
from backoffice.database import get_session
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
from backoffice.services.order_service import OrderService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
user_repo = UserRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
service = OrderService(
    order_repo,
    user_repo,
    cart_repo,
    product_repo,
    max_page_size=settings.MAX_PAGE_SIZE,
)


# -------- Self-service endpoints (operate on the caller's own orders) --------


@router.post(
    "/me",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_order(
    payload: OrderCreateRequest,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
):
    """
    Place an order from the current user's cart.

    The cart is emptied in the same transaction.
    """
    return service.create_order(session, ctx, payload)


@router.get(
    "/me/{order_id}",
    response_model=OrderResponse,
)
def get_my_order(
    order_id: str,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
):
    """
    Get a single order belonging to the current user.
    """
    return service.get_my_order_by_id(session, ctx, order_id)


@router.get(
    "/me/{order_id}/status",
    response_model=MessageResponse,
)
def get_my_order_status(
    order_id: str,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
):
    return service.get_my_order_status(session, ctx, order_id)


@router.get(
    "/me/{order_id}/items",
    response_model=Page[OrderItemResponse],
)
def get_my_order_items(
    order_id: str,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    page: int = Query(0),
    order: str = Query("ASC"),
    sort_by: str = Query("priceAtPurchase", alias="sortBy"),
):
    """
    List the items of one of the current user's orders.

    sortBy: 'quantity' or 'priceAtPurchase'.
    """
    return service.get_my_order_items(session, ctx, order_id, page, size, order, sort_by)


@router.patch(
    "/me/{order_id}",
    response_model=OrderResponse,
)
def update_my_order(
    order_id: str,
    payload: OrderUpdateRequest,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
):
    """
    Change shipping details of an order that is still CREATED.

    Omitted fields keep their current value.
    """
    return service.update_order(session, ctx, order_id, payload)


@router.patch(
    "/me/{order_id}/cancel",
    response_model=MessageResponse,
)
def cancel_my_order(
    order_id: str,
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
):
    """
    Cancel an order that is CREATED or PAID.
    """
    return service.cancel_order(session, ctx, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=Page[OrderResponse],
    dependencies=[Depends(require_admin)],
)
def list_orders(
    session: Session = Depends(get_session),
    user_id: str | None = Query(None, alias="userId"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    page: int = Query(0),
    order: str = Query("ASC"),
    sort_by: str = Query("createdAt", alias="sortBy"),
):
    """
    List all orders, or one user's orders when userId is given.

    sortBy: 'createdAt', 'updatedAt' or 'orderStatus'.
    """
    return service.list_orders(session, user_id, page, size, order, sort_by)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    dependencies=[Depends(require_admin)],
)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
):
    return service.get_order_by_id(session, order_id)


@router.get(
    "/{order_id}/status",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def get_order_status(
    order_id: str,
    session: Session = Depends(get_session),
):
    return service.get_order_status(session, order_id)


@router.get(
    "/{order_id}/items",
    response_model=Page[OrderItemResponse],
    dependencies=[Depends(require_admin)],
)
def get_order_items(
    order_id: str,
    session: Session = Depends(get_session),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    page: int = Query(0),
    order: str = Query("ASC"),
    sort_by: str = Query("priceAtPurchase", alias="sortBy"),
):
    return service.get_order_items(session, order_id, page, size, order, sort_by)


@router.patch(
    "/{order_id}/status",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def toggle_order_status(
    order_id: str,
    session: Session = Depends(get_session),
):
    """
    Advance the order to its next status.

      CREATED -> PAID -> ON_THE_WAY -> DELIVERED -> RETURNED

    Called once payment or delivery events are known.
    """
    return service.toggle_order_status(session, order_id)
