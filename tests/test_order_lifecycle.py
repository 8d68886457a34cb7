from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from originate.errors import (
    EmptyOrder,
    InvalidAddress,
    InvalidProduct,
    InvalidRelationship,
    InvalidTransition,
    NotCancellable,
    TerminalState,
    Unauthorized,
)
from originate.extensions import db
from originate.models import Order, OrderItem
from originate.models.relationship import RELATIONSHIP_SUSPENDED
from originate.services.order_lifecycle import is_terminal, next_status
from originate.services.order_service import advance_order, cancel_order, create_order, order_summary
from originate.services.storage import transition_status
from tests.conftest import auth_headers, make_address, make_company, make_product


def _place(market, quantity: int = 2) -> Order:
    payload = market.order_payload(quantity)
    return create_order(
        market.consumer_actor,
        payload["supplier_id"],
        payload["company_provider_id"],
        payload["shipping_address_id"],
        payload["items"],
    )


def test_next_status_follows_fulfilment_path():
    assert next_status("pending") == "confirmed"
    assert next_status("confirmed") == "preparing"
    assert next_status("preparing") == "shipped"
    assert next_status("shipped") == "delivered"
    assert not is_terminal("shipped")
    assert is_terminal("delivered") and is_terminal("cancelled")

    with pytest.raises(TerminalState):
        next_status("delivered")
    with pytest.raises(TerminalState):
        next_status("cancelled")


def test_create_order_freezes_price_and_totals(market):
    order = _place(market, quantity=2)

    assert order.status == "pending"
    assert order.total_amount == Decimal("24.00")
    assert [item.price_at_purchase for item in order.items] == [Decimal("12.00")]

    market.product.price = Decimal("15.50")
    db.session.commit()
    db.session.expire_all()

    item = db.session.get(OrderItem, order.items[0].id)
    assert item.price_at_purchase == Decimal("12.00")
    assert db.session.get(Order, order.id).total_amount == Decimal("24.00")


def test_create_order_ignores_client_prices(market):
    payload = market.order_payload()
    payload["items"][0]["price"] = "0.01"

    order = create_order(
        market.consumer_actor,
        market.supplier.id,
        market.company.id,
        market.address.id,
        payload["items"],
    )
    assert order.total_amount == Decimal("24.00")


def test_empty_order_persists_nothing(market):
    with pytest.raises(EmptyOrder):
        create_order(market.consumer_actor, market.supplier.id, market.company.id, market.address.id, [])

    assert db.session.query(Order).count() == 0


def test_order_requires_active_connection(market):
    market.connection.status = "inactive"
    db.session.commit()

    with pytest.raises(InvalidRelationship):
        _place(market)
    assert db.session.query(Order).count() == 0


def test_order_requires_approved_supplier(market):
    market.relationship.status = RELATIONSHIP_SUSPENDED
    db.session.commit()

    with pytest.raises(InvalidRelationship):
        _place(market)


def test_order_rejects_foreign_address(market):
    stranger_address = make_address(market.supplier.user_id)

    with pytest.raises(InvalidAddress):
        create_order(
            market.consumer_actor,
            market.supplier.id,
            market.company.id,
            stranger_address.id,
            market.order_payload()["items"],
        )


def test_order_rejects_products_from_other_company(market):
    other_company = make_company("company-2", company_name="Lowland Roasters")
    foreign_product = make_product(other_company, name="Sumatra Dark")

    with pytest.raises(InvalidProduct):
        create_order(
            market.consumer_actor,
            market.supplier.id,
            market.company.id,
            market.address.id,
            [{"product_id": foreign_product.id, "quantity": 1}],
        )
    assert db.session.query(OrderItem).count() == 0


def test_order_rejects_unavailable_products(market):
    market.product.is_available = False
    db.session.commit()

    with pytest.raises(InvalidProduct):
        _place(market)


def test_only_consumers_place_orders(market):
    with pytest.raises(Unauthorized):
        create_order(
            market.supplier_actor,
            market.supplier.id,
            market.company.id,
            market.address.id,
            market.order_payload()["items"],
        )


def test_supplier_advances_order_to_delivered(market):
    order = _place(market)

    for expected in ("confirmed", "preparing", "shipped", "delivered"):
        order = advance_order(market.supplier_actor, order.id)
        assert order.status == expected

    with pytest.raises(TerminalState):
        advance_order(market.supplier_actor, order.id)
    assert db.session.get(Order, order.id).status == "delivered"


def test_stale_advance_does_not_skip_a_stage(market):
    order = _place(market)

    advance_order(market.supplier_actor, order.id, expected_status="pending")
    with pytest.raises(InvalidTransition):
        advance_order(market.supplier_actor, order.id, expected_status="pending")

    assert db.session.get(Order, order.id).status == "confirmed"


def test_conditional_update_only_applies_once(market):
    order = _place(market)

    assert transition_status(Order, order.id, "pending", "confirmed") is True
    assert transition_status(Order, order.id, "pending", "confirmed") is False

    db.session.expire_all()
    assert db.session.get(Order, order.id).status == "confirmed"


def test_company_cannot_advance_orders(market):
    order = _place(market)

    with pytest.raises(Unauthorized):
        advance_order(market.company_actor, order.id)
    assert db.session.get(Order, order.id).status == "pending"


def test_consumer_cancels_pending_order(market):
    order = _place(market)

    cancelled = cancel_order(market.consumer_actor, order.id)
    assert cancelled.status == "cancelled"

    with pytest.raises(TerminalState):
        advance_order(market.supplier_actor, order.id)


def test_confirmed_order_cannot_be_cancelled(market):
    order = _place(market)
    advance_order(market.supplier_actor, order.id)

    with pytest.raises(NotCancellable):
        cancel_order(market.consumer_actor, order.id)
    assert db.session.get(Order, order.id).status == "confirmed"


def test_supplier_cannot_cancel_orders(market):
    order = _place(market)

    with pytest.raises(Unauthorized):
        cancel_order(market.supplier_actor, order.id)


def test_order_summary_counts_visible_orders(market):
    first = _place(market)
    _place(market)
    advance_order(market.supplier_actor, first.id)

    summary = order_summary(market.supplier_actor)
    assert summary["total"] == 2
    assert summary["pending"] == 1
    assert summary["active"] == 1
    assert summary["by_status"]["confirmed"] == 1


def test_place_and_advance_over_http(client, market):
    consumer_headers = auth_headers(market.consumer.id)
    supplier_headers = auth_headers(market.supplier.user_id)

    created = client.post("/api/v1/orders", json=market.order_payload(3), headers=consumer_headers)
    assert created.status_code == 201
    body = created.get_json()
    assert body["status"] == "pending"
    assert body["next_status"] == "confirmed"
    assert body["can_cancel"] is True
    assert Decimal(body["total_amount"]) == Decimal("36.00")
    assert body["items"][0]["product_name"] == "Huila Reserve"

    order_id = body["id"]
    advanced = client.post(
        f"/api/v1/orders/{order_id}/advance",
        json={"from_status": "pending"},
        headers=supplier_headers,
    )
    assert advanced.status_code == 200
    assert advanced.get_json()["status"] == "confirmed"

    duplicate = client.post(
        f"/api/v1/orders/{order_id}/advance",
        json={"from_status": "pending"},
        headers=supplier_headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"] == "invalid_transition"

    cancel = client.post(f"/api/v1/orders/{order_id}/cancel", headers=consumer_headers)
    assert cancel.status_code == 409
    assert cancel.get_json()["error"] == "not_cancellable"


def test_advance_requires_from_status(client, market):
    order = _place(market)

    response = client.post(
        f"/api/v1/orders/{order.id}/advance",
        json={},
        headers=auth_headers(market.supplier.user_id),
    )
    assert response.status_code == 400
    assert db.session.get(Order, order.id).status == "pending"


def test_company_advance_over_http_is_unauthorized(client, market):
    order = _place(market)

    response = client.post(
        f"/api/v1/orders/{order.id}/advance",
        json={"from_status": "pending"},
        headers=auth_headers(market.company.user_id),
    )
    assert response.status_code == 403
    assert response.get_json()["error"] == "unauthorized"


def test_empty_order_over_http(client, market):
    payload = market.order_payload()
    payload["items"] = []

    response = client.post("/api/v1/orders", json=payload, headers=auth_headers(market.consumer.id))
    assert response.status_code == 400
    assert response.get_json()["error"] == "empty_order"


@pytest.mark.parametrize("status", ["preparing", "shipped", "delivered", "cancelled"])
def test_only_pending_orders_can_be_cancelled(market, status):
    order = _place(market)
    if status == "cancelled":
        cancel_order(market.consumer_actor, order.id)
    while order.status != status:
        order = advance_order(market.supplier_actor, order.id)

    with pytest.raises(NotCancellable):
        cancel_order(market.consumer_actor, order.id)
    db.session.expire_all()
    assert db.session.get(Order, order.id).status == status


def _backdate(order: Order) -> datetime:
    stale = datetime(2020, 1, 1)
    order.updated_at = stale
    db.session.commit()
    return stale


def test_advance_touches_updated_at(market):
    order = _place(market)
    stale = _backdate(order)

    advanced = advance_order(market.supplier_actor, order.id)
    assert advanced.updated_at.replace(tzinfo=None) > stale


def test_cancel_touches_updated_at(market):
    order = _place(market)
    stale = _backdate(order)

    cancelled = cancel_order(market.consumer_actor, order.id)
    assert cancelled.updated_at.replace(tzinfo=None) > stale


def test_failed_transition_leaves_updated_at_alone(market):
    order = _place(market)
    advance_order(market.supplier_actor, order.id)
    stale = _backdate(order)

    with pytest.raises(InvalidTransition):
        advance_order(market.supplier_actor, order.id, expected_status="pending")
    db.session.expire_all()
    assert db.session.get(Order, order.id).updated_at.replace(tzinfo=None) == stale


def test_boolean_ids_are_rejected_over_http(client, market):
    payload = market.order_payload()
    payload["supplier_id"] = True

    response = client.post("/api/v1/orders", json=payload, headers=auth_headers(market.consumer.id))
    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"
    assert db.session.query(Order).count() == 0
