from flask import Blueprint, current_app, request

from originate.api.v1 import is_row_id
from originate.errors import ValidationError
from originate.models import Order
from originate.models.profile import ROLE_CONSUMER, ROLE_SUPPLIER
from originate.security.actor import Actor
from originate.security.decorators import require_actor
from originate.services.order_lifecycle import NEXT_STATUS, ORDER_STATUSES, is_cancellable
from originate.services.order_service import (
    advance_order,
    cancel_order,
    create_order,
    get_order,
    list_orders,
    order_summary,
)

order_bp = Blueprint("orders", __name__)


@order_bp.get("")
@require_actor()
def get_orders(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    status = str(request.args.get("status", "")).strip().lower() or None
    orders = list_orders(actor, status=status, limit=current_app.config["ORDER_LIST_LIMIT"])
    return {"items": [_build_order_response(order) for order in orders]}, 200


@order_bp.get("/summary")
@require_actor()
def get_order_summary(actor: Actor) -> tuple[dict[str, object], int]:
    return order_summary(actor), 200


@order_bp.get("/<int:order_id>")
@require_actor()
def get_single_order(actor: Actor, order_id: int) -> tuple[dict[str, object], int]:
    return _build_order_response(get_order(actor, order_id)), 200


@order_bp.post("")
@require_actor(ROLE_CONSUMER)
def place_order(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    supplier_id = payload.get("supplier_id")
    company_provider_id = payload.get("company_provider_id")
    items = payload.get("items", [])

    if not is_row_id(supplier_id) or not is_row_id(company_provider_id):
        raise ValidationError("supplier_id and company_provider_id are required")
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    notes = payload.get("notes")
    order = create_order(
        actor,
        supplier_id,
        company_provider_id,
        payload.get("shipping_address_id"),
        items,
        notes=str(notes).strip() if notes else None,
    )
    return _build_order_response(order), 201


@order_bp.post("/<int:order_id>/advance")
@require_actor(ROLE_SUPPLIER)
def advance(actor: Actor, order_id: int) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    from_status = str(payload.get("from_status", "")).strip().lower()
    if from_status not in ORDER_STATUSES:
        raise ValidationError("from_status must be the order status you are advancing from")

    order = advance_order(actor, order_id, expected_status=from_status)
    return _build_order_response(order), 200


@order_bp.post("/<int:order_id>/cancel")
@require_actor(ROLE_CONSUMER)
def cancel(actor: Actor, order_id: int) -> tuple[dict[str, object], int]:
    return _build_order_response(cancel_order(actor, order_id)), 200


def _build_order_response(order: Order) -> dict[str, object]:
    address = order.shipping_address
    consumer = order.consumer
    return {
        "id": order.id,
        "consumer_id": order.consumer_id,
        "consumer_name": (consumer.full_name or consumer.email) if consumer else None,
        "supplier_id": order.supplier_id,
        "supplier_name": order.supplier.business_name if order.supplier else None,
        "company_provider_id": order.company_provider_id,
        "company_name": order.company_provider.company_name if order.company_provider else None,
        "status": order.status,
        "next_status": NEXT_STATUS.get(order.status),
        "can_cancel": is_cancellable(order.status),
        "total_amount": str(order.total_amount),
        "shipping_address_id": order.shipping_address_id,
        "shipping_address": (
            {
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
            }
            if address
            else None
        ),
        "notes": order.notes,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name if item.product else None,
                "quantity": item.quantity,
                "price_at_purchase": str(item.price_at_purchase),
            }
            for item in order.items
        ],
    }
