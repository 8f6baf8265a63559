# backoffice/routers/users.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from backoffice.core.auth import RequestContext, require_admin, require_auth
from backoffice.core.config import get_settings
from backoffice.database import get_session
from backoffice.routers.orders import service as order_service
from backoffice.schemas.common import Page
from backoffice.schemas.order import OrderResponse

settings = get_settings()

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me/orders",
    response_model=Page[OrderResponse],
)
def get_my_orders(
    session: Session = Depends(get_session),
    ctx: RequestContext = Depends(require_auth),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    page: int = Query(0),
    order: str = Query("ASC"),
    sort_by: str = Query("createdAt", alias="sortBy"),
):
    """
    List the current user's orders.
    """
    return order_service.get_my_orders(session, ctx, page, size, order, sort_by)


@router.get(
    "/{user_id}/orders",
    response_model=Page[OrderResponse],
    dependencies=[Depends(require_admin)],
)
def get_user_orders(
    user_id: str,
    session: Session = Depends(get_session),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    page: int = Query(0),
    order: str = Query("ASC"),
    sort_by: str = Query("createdAt", alias="sortBy"),
):
    """
    List one user's orders (admin only).
    """
    return order_service.list_orders(session, user_id, page, size, order, sort_by)
