"""Tests for OrderService: checkout, reads, updates, cancel, status changes."""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlmodel import select

from backoffice.core.auth import RequestContext
from backoffice.core.errors import (
    AccessDeniedError,
    DataNotFoundError,
    ErrorKind,
    InvalidArgumentError,
)
from backoffice.models.cart import CartItem
from backoffice.models.enums import DeliveryMethod, OrderStatus, UserRole
from backoffice.models.order import Order, OrderItem
from backoffice.schemas.order import OrderCreateRequest, OrderUpdateRequest
from backoffice.services.order_service import OrderService, parse_id


def _create_payload(**overrides) -> OrderCreateRequest:
    data = {
        "first_name": "Jane",
        "last_name": "Doe",
        "address": "1 Garden Lane",
        "zip_code": "12345",
        "city": "Springfield",
        "phone": "+123456789012",
        "delivery_method": DeliveryMethod.COURIER_DELIVERY,
    }
    data.update(overrides)
    return OrderCreateRequest(**data)


def _count(session, model) -> int:
    return len(session.exec(select(model)).all())


SAMPLE_ID = uuid.UUID("b56c8b43-2e10-4f35-ae21-b8360e2ff936")

NON_CANONICAL_IDS = [
    "bad",
    SAMPLE_ID.hex,
    "{" + str(SAMPLE_ID) + "}",
    "urn:uuid:" + str(SAMPLE_ID),
    str(SAMPLE_ID).upper(),
    str(SAMPLE_ID) + "\n",
]


class TestParseId:
    def test_accepts_uuid_string(self):
        value = uuid.uuid4()
        assert parse_id(str(value)) == value

    def test_accepts_uuid_instance(self):
        assert parse_id(SAMPLE_ID) is SAMPLE_ID

    @pytest.mark.parametrize("raw", NON_CANONICAL_IDS)
    def test_rejects_non_canonical_forms(self, raw):
        with pytest.raises(InvalidArgumentError) as exc:
            parse_id(raw)
        assert str(exc.value) == f"Invalid UUID string: {raw}"

    def test_rejects_nil_uuid(self):
        with pytest.raises(InvalidArgumentError):
            parse_id("00000000-0000-0000-0000-000000000000")


class TestCreateOrder:
    def test_cart_becomes_order(
        self, service, session, make_user, make_product, add_to_cart, context_for
    ):
        user = make_user()
        product = make_product("40.00")
        add_to_cart(user, product, quantity=3)

        response = service.create_order(session, context_for(user), _create_payload())

        assert response.order_status is OrderStatus.CREATED
        assert response.first_name == "Jane"
        items = session.exec(
            select(OrderItem).where(OrderItem.order_id == response.order_id)
        ).all()
        assert len(items) == 1
        assert items[0].quantity == 3
        assert items[0].price_at_purchase == Decimal("40.00")
        assert items[0].product_id == product.id
        assert _count(session, CartItem) == 0

    def test_price_is_frozen_after_product_change(
        self, service, session, make_user, make_product, add_to_cart, context_for
    ):
        user = make_user()
        product = make_product("40.00")
        add_to_cart(user, product, quantity=1)
        response = service.create_order(session, context_for(user), _create_payload())

        product.current_price = Decimal("99.99")
        session.add(product)
        session.commit()

        page = service.get_order_items(
            session, str(response.order_id), 0, 10, "ASC", "priceAtPurchase"
        )
        assert page.content[0].price_at_purchase == Decimal("40.00")
        assert page.content[0].product.current_price == Decimal("99.99")

    def test_empty_cart_writes_nothing(self, service, session, make_user, context_for):
        user = make_user("empty@example.com")

        with pytest.raises(InvalidArgumentError) as exc:
            service.create_order(session, context_for(user), _create_payload())

        assert exc.value.kind is ErrorKind.INVALID_ARGUMENT
        assert str(exc.value) == (
            "Cannot place order: user with email empty@example.com has an empty cart."
        )
        assert _count(session, Order) == 0
        assert _count(session, OrderItem) == 0

    def test_unknown_requester(self, service, session):
        ctx = RequestContext(uuid.uuid4(), "ghost@example.com", UserRole.CLIENT)

        with pytest.raises(DataNotFoundError) as exc:
            service.create_order(session, ctx, _create_payload())

        assert str(exc.value) == "User with email: ghost@example.com, was not found."

    def test_failure_while_consuming_cart_rolls_back(
        self, service, session, make_user, make_product, add_to_cart, context_for, monkeypatch
    ):
        user = make_user()
        add_to_cart(user, make_product(), quantity=2)

        def _boom(*args, **kwargs):
            raise RuntimeError("cart storage unavailable")

        monkeypatch.setattr(service.converter.cart_repo, "delete_items", _boom)

        with pytest.raises(RuntimeError):
            service.create_order(session, context_for(user), _create_payload())

        assert _count(session, Order) == 0
        assert _count(session, OrderItem) == 0
        assert _count(session, CartItem) == 1


class TestReads:
    def test_get_order_by_id(self, service, session, make_user, make_order):
        order = make_order(make_user())

        response = service.get_order_by_id(session, str(order.id))

        assert response.order_id == order.id
        assert response.delivery_method is DeliveryMethod.COURIER_DELIVERY

    def test_get_order_by_id_missing(self, service, session, random_id):
        with pytest.raises(DataNotFoundError) as exc:
            service.get_order_by_id(session, random_id)
        assert str(exc.value) == f"Order with id: {random_id}, was not found."

    def test_get_my_order_by_id_owner(self, service, session, make_user, make_order, context_for):
        user = make_user()
        order = make_order(user)

        response = service.get_my_order_by_id(session, context_for(user), str(order.id))

        assert response.order_id == order.id

    def test_get_my_order_by_id_denied_even_for_admin(
        self, service, session, make_user, make_order, context_for
    ):
        owner = make_user("owner@example.com")
        admin = make_user("admin@example.com", role=UserRole.ADMINISTRATOR)
        order = make_order(owner)

        with pytest.raises(AccessDeniedError) as exc:
            service.get_my_order_by_id(session, context_for(admin), str(order.id))

        assert exc.value.kind is ErrorKind.ACCESS_DENIED

    def test_status_message(self, service, session, make_user, make_order):
        order = make_order(make_user(), status=OrderStatus.ON_THE_WAY)

        response = service.get_order_status(session, str(order.id))

        assert response.message == f"Order with id: {order.id} has status 'ON_THE_WAY'."

    def test_my_status_message(self, service, session, make_user, make_order, context_for):
        user = make_user()
        order = make_order(user, status=OrderStatus.PAID)

        response = service.get_my_order_status(session, context_for(user), str(order.id))

        assert response.message == f"Order with id: {order.id} has status 'PAID'."


class TestListing:
    def test_list_all_orders(self, service, session, make_user, make_order):
        first = make_user("a@example.com")
        second = make_user("b@example.com")
        make_order(first)
        make_order(second)
        make_order(second)

        page = service.list_orders(session, None, 0, 2, "ASC", "createdAt")

        assert len(page.content) == 2
        assert page.page.total_elements == 3
        assert page.page.total_pages == 2

    def test_list_one_users_orders(self, service, session, make_user, make_order):
        first = make_user("a@example.com")
        second = make_user("b@example.com")
        make_order(first)
        mine = make_order(second)

        page = service.list_orders(session, str(second.id), 0, 10, "DESC", "updatedAt")

        assert [o.order_id for o in page.content] == [mine.id]

    def test_list_unknown_user(self, service, session, random_id):
        with pytest.raises(DataNotFoundError) as exc:
            service.list_orders(session, random_id, 0, 10, "ASC", "createdAt")
        assert str(exc.value) == f"User with id: {random_id}, was not found."

    def test_list_rejects_bad_sort_field(self, service, session):
        with pytest.raises(InvalidArgumentError):
            service.list_orders(session, None, 0, 10, "ASC", "phone")

    def test_get_my_orders(self, service, session, make_user, make_order, context_for):
        user = make_user("a@example.com")
        other = make_user("b@example.com")
        mine = make_order(user)
        make_order(other)

        page = service.get_my_orders(session, context_for(user), 0, 10, "ASC", "createdAt")

        assert [o.order_id for o in page.content] == [mine.id]
        assert page.page.total_elements == 1

    def test_sort_by_status(self, service, session, make_user, make_order):
        user = make_user()
        make_order(user, status=OrderStatus.PAID)
        make_order(user, status=OrderStatus.CANCELED)
        make_order(user, status=OrderStatus.CREATED)

        page = service.list_orders(session, None, 0, 10, "ASC", "orderStatus")

        statuses = [o.order_status.name for o in page.content]
        assert statuses == sorted(statuses)

    def test_items_sorted_by_quantity(
        self, service, session, make_user, make_product, add_to_cart, context_for
    ):
        user = make_user()
        add_to_cart(user, make_product("5.00", name="Seeds"), quantity=4)
        add_to_cart(user, make_product("30.00", name="Shovel"), quantity=1)
        order = service.create_order(session, context_for(user), _create_payload())

        page = service.get_my_order_items(
            session, context_for(user), str(order.order_id), 0, 10, "DESC", "quantity"
        )

        assert [item.quantity for item in page.content] == [4, 1]
        assert page.content[0].product.product_name == "Seeds"

    def test_items_of_missing_order(self, service, session, random_id):
        with pytest.raises(DataNotFoundError):
            service.get_order_items(session, random_id, 0, 10, "ASC", "quantity")

    def test_my_items_of_someone_elses_order(
        self, service, session, make_user, make_order, context_for
    ):
        owner = make_user("owner@example.com")
        other = make_user("other@example.com")
        order = make_order(owner)

        with pytest.raises(AccessDeniedError):
            service.get_my_order_items(
                session, context_for(other), str(order.id), 0, 10, "ASC", "quantity"
            )


class TestUpdateOrder:
    def test_partial_update_changes_only_given_fields(
        self, service, session, make_user, make_order, context_for
    ):
        user = make_user()
        order = make_order(user)
        before = service.get_order_by_id(session, str(order.id))

        response = service.update_order(
            session,
            context_for(user),
            str(order.id),
            OrderUpdateRequest(phone="+987654321000"),
        )

        assert response.phone == "+987654321000"
        assert response.first_name == before.first_name
        assert response.address == before.address
        assert response.city == before.city
        assert response.delivery_method is before.delivery_method
        assert response.order_status is OrderStatus.CREATED
        assert response.updated_at > before.updated_at

    @pytest.mark.parametrize("status", [OrderStatus.PAID, OrderStatus.DELIVERED])
    def test_update_rejected_after_created(
        self, service, session, make_user, make_order, context_for, status
    ):
        user = make_user()
        order = make_order(user, status=status)

        with pytest.raises(InvalidArgumentError) as exc:
            service.update_order(
                session, context_for(user), str(order.id), OrderUpdateRequest(city="Shelbyville")
            )

        assert str(exc.value) == (
            f"Order with id: {order.id} is already in status '{status.name}' "
            "and can not be updated."
        )
        session.refresh(order)
        assert order.city == "Springfield"

    def test_update_by_other_user(self, service, session, make_user, make_order, context_for):
        owner = make_user("owner@example.com")
        other = make_user("other@example.com")
        order = make_order(owner)

        with pytest.raises(AccessDeniedError):
            service.update_order(
                session, context_for(other), str(order.id), OrderUpdateRequest(city="Shelbyville")
            )

        session.refresh(order)
        assert order.city == "Springfield"


class TestCancelOrder:
    @pytest.mark.parametrize("status", [OrderStatus.CREATED, OrderStatus.PAID])
    def test_cancel(self, service, session, make_user, make_order, context_for, status):
        user = make_user()
        order = make_order(user, status=status)

        response = service.cancel_order(session, context_for(user), str(order.id))

        assert response.message == f"Order with id: {order.id} was canceled."
        session.refresh(order)
        assert order.order_status is OrderStatus.CANCELED

    def test_cancel_on_the_way(self, service, session, make_user, make_order, context_for):
        user = make_user()
        order = make_order(user, status=OrderStatus.ON_THE_WAY)
        before = order.updated_at

        with pytest.raises(InvalidArgumentError) as exc:
            service.cancel_order(session, context_for(user), str(order.id))

        assert str(exc.value) == (
            f"Order with id: {order.id} is already in status 'ON_THE_WAY' "
            "and can not be canceled."
        )
        session.refresh(order)
        assert order.order_status is OrderStatus.ON_THE_WAY
        assert order.updated_at == before

    def test_cancel_by_other_user(self, service, session, make_user, make_order, context_for):
        owner = make_user("owner@example.com")
        other = make_user("other@example.com")
        order = make_order(owner)

        with pytest.raises(AccessDeniedError):
            service.cancel_order(session, context_for(other), str(order.id))

        session.refresh(order)
        assert order.order_status is OrderStatus.CREATED


class TestToggleOrderStatus:
    def test_created_to_paid(self, service, session, make_user, make_order):
        order = make_order(make_user())

        response = service.toggle_order_status(session, str(order.id))

        assert response.message == (
            f"Order with id: {order.id} was updated from status 'CREATED' to status 'PAID'."
        )
        session.refresh(order)
        assert order.order_status is OrderStatus.PAID

    @pytest.mark.parametrize("status", [OrderStatus.CANCELED, OrderStatus.RETURNED])
    def test_final_status_is_left_alone(self, service, session, make_user, make_order, status):
        order = make_order(make_user(), status=status)
        before = order.updated_at
        raw = str(order.id)

        with pytest.raises(InvalidArgumentError) as exc:
            service.toggle_order_status(session, raw)

        assert str(exc.value) == (
            f"Order with id: {raw} is in final status {status.name} "
            "and the status can not be changed."
        )
        session.refresh(order)
        assert order.order_status is status
        assert order.updated_at == before

    def test_delivered_becomes_returned(self, service, session, make_user, make_order):
        order = make_order(make_user(), status=OrderStatus.DELIVERED)

        response = service.toggle_order_status(session, str(order.id))

        assert response.message == (
            f"Order with id: {order.id} was updated from status "
            "'DELIVERED' to status 'RETURNED'."
        )

    def test_missing_order(self, service, session, random_id):
        with pytest.raises(DataNotFoundError):
            service.toggle_order_status(session, random_id)


class TestInvalidIds:
    """A malformed id is rejected before any repository is touched."""

    @pytest.fixture
    def repos(self):
        return MagicMock(), MagicMock(), MagicMock(), MagicMock()

    @pytest.fixture
    def mocked_service(self, repos):
        return OrderService(*repos)

    @pytest.fixture
    def ctx(self):
        return RequestContext(uuid.uuid4(), "client@example.com", UserRole.CLIENT)

    @pytest.mark.parametrize(
        "call",
        [
            lambda s, session, ctx, raw: s.get_order_by_id(session, raw),
            lambda s, session, ctx, raw: s.get_order_status(session, raw),
            lambda s, session, ctx, raw: s.toggle_order_status(session, raw),
            lambda s, session, ctx, raw: s.get_my_order_by_id(session, ctx, raw),
            lambda s, session, ctx, raw: s.cancel_order(session, ctx, raw),
            lambda s, session, ctx, raw: s.update_order(
                session, ctx, raw, OrderUpdateRequest(city="Shelbyville")
            ),
            lambda s, session, ctx, raw: s.list_orders(session, raw, 0, 10, "ASC", "createdAt"),
            lambda s, session, ctx, raw: s.get_order_items(
                session, raw, 0, 10, "ASC", "quantity"
            ),
            lambda s, session, ctx, raw: s.get_my_order_items(
                session, ctx, raw, 0, 10, "ASC", "quantity"
            ),
        ],
    )
    @pytest.mark.parametrize("raw", NON_CANONICAL_IDS)
    def test_no_repository_calls(self, mocked_service, repos, ctx, call, raw):
        session = MagicMock()

        with pytest.raises(InvalidArgumentError) as exc:
            call(mocked_service, session, ctx, raw)

        assert str(exc.value) == f"Invalid UUID string: {raw}"
        for repo in repos:
            assert repo.method_calls == []
        session.commit.assert_not_called()
