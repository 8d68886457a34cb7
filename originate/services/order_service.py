"""Order lifecycle: placement by consumers, progression by suppliers.

Orders are never deleted. Placement writes the order and its items in one
commit; every later status change is a conditional update against the status
the caller observed, so duplicate or racing requests cannot skip a stage.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select

from originate.errors import (
    EmptyOrder,
    InvalidAddress,
    InvalidProduct,
    InvalidRelationship,
    InvalidTransition,
    NotCancellable,
    NotFound,
    ValidationError,
)
from originate.extensions import db
from originate.models import Address, Order, OrderItem, Product
from originate.security.actor import Actor
from originate.security.visibility import (
    ensure_can_advance_order,
    ensure_can_cancel_order,
    ensure_can_create_order,
    ensure_can_read_order,
    policy_for,
)
from originate.services.order_lifecycle import (
    ACTIVE_STATUSES,
    ORDER_CANCELLED,
    ORDER_PENDING,
    ORDER_STATUSES,
    is_cancellable,
    next_status,
)
from originate.services.relationship_service import has_active_connection, is_supplier_approved
from originate.services.storage import commit_session, transition_status

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def create_order(
    actor: Actor,
    supplier_id: int,
    company_provider_id: int,
    address_id: int | None,
    items: Sequence[Mapping[str, Any]],
    notes: str | None = None,
) -> Order:
    ensure_can_create_order(actor)

    if not items:
        raise EmptyOrder()

    if not has_active_connection(actor.profile_id, supplier_id, company_provider_id):
        raise InvalidRelationship()
    if not is_supplier_approved(supplier_id, company_provider_id):
        raise InvalidRelationship("This supplier no longer sells for this company.")

    valid_id = isinstance(address_id, int) and not isinstance(address_id, bool)
    address = db.session.get(Address, address_id) if valid_id else None
    if address is None or address.user_id != actor.profile_id:
        raise InvalidAddress()

    order_items, total = _price_items(company_provider_id, items)

    order = Order(
        consumer_id=actor.profile_id,
        supplier_id=supplier_id,
        company_provider_id=company_provider_id,
        status=ORDER_PENDING,
        total_amount=total,
        shipping_address_id=address.id,
        notes=notes or None,
    )
    order.items = order_items
    db.session.add(order)
    commit_session("placing order")

    logger.info(
        "Order %s placed by %s with supplier %s (%d items, total %s)",
        order.id,
        actor.profile_id,
        supplier_id,
        len(order_items),
        total,
    )
    return order


def _price_items(company_provider_id: int, items: Sequence[Mapping[str, Any]]) -> tuple[list[OrderItem], Decimal]:
    requested: list[tuple[int, int]] = []
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ValidationError(f"item at index {idx} must be an object")
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not isinstance(product_id, int) or isinstance(product_id, bool):
            raise ValidationError(f"item at index {idx} requires product_id")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError(f"item at index {idx} quantity must be a positive integer")
        requested.append((product_id, quantity))

    product_ids = {product_id for product_id, _ in requested}
    products = {
        product.id: product
        for product in db.session.execute(select(Product).where(Product.id.in_(product_ids))).scalars()
    }

    order_items: list[OrderItem] = []
    total = Decimal("0")
    for product_id, quantity in requested:
        product = products.get(product_id)
        if product is None:
            raise InvalidProduct(f"Product {product_id} does not exist.")
        if product.company_provider_id != company_provider_id:
            raise InvalidProduct(f"Product {product_id} is not sold by this company.")
        if not product.is_available:
            raise InvalidProduct(f"{product.name} is currently unavailable.")

        price = Decimal(product.price).quantize(CENT)
        order_items.append(OrderItem(product_id=product.id, quantity=quantity, price_at_purchase=price))
        total += price * quantity

    return order_items, total.quantize(CENT)


def get_order(actor: Actor, order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found.")
    ensure_can_read_order(actor, order)
    return order


def list_orders(actor: Actor, status: str | None = None, limit: int = 200) -> list[Order]:
    stmt = select(Order).where(policy_for(actor).order_clause(actor))
    if status:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"unknown order status: {status}")
        stmt = stmt.where(Order.status == status)
    stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)
    return list(db.session.execute(stmt).scalars().all())


def order_summary(actor: Actor) -> dict[str, Any]:
    stmt = (
        select(Order.status, func.count(Order.id))
        .where(policy_for(actor).order_clause(actor))
        .group_by(Order.status)
    )
    counts = {status: 0 for status in ORDER_STATUSES}
    for status, count in db.session.execute(stmt).all():
        counts[status] = count

    return {
        "by_status": counts,
        "total": sum(counts.values()),
        "pending": counts[ORDER_PENDING],
        "active": sum(counts[status] for status in ACTIVE_STATUSES),
    }


def advance_order(actor: Actor, order_id: int, expected_status: str | None = None) -> Order:
    """Move the order one stage forward on behalf of its supplier.

    ``expected_status`` is the status the caller last saw; when it no longer
    matches, the call fails rather than advancing a second time.
    """
    order = get_order(actor, order_id)
    ensure_can_advance_order(actor, order)

    current = order.status
    target = next_status(current)
    if expected_status is not None and expected_status != current:
        raise InvalidTransition(f"This order is already {current}; refresh and try again.")

    if not transition_status(Order, order.id, current, target):
        raise InvalidTransition("This order was updated by another request; refresh and try again.")

    db.session.refresh(order)
    logger.info("Order %s advanced %s -> %s by supplier %s", order.id, current, target, actor.supplier_id)
    return order


def cancel_order(actor: Actor, order_id: int) -> Order:
    order = get_order(actor, order_id)
    ensure_can_cancel_order(actor, order)

    if not is_cancellable(order.status):
        raise NotCancellable()
    if not transition_status(Order, order.id, ORDER_PENDING, ORDER_CANCELLED):
        raise NotCancellable()

    db.session.refresh(order)
    logger.info("Order %s cancelled by consumer %s", order.id, actor.profile_id)
    return order
