from flask import Blueprint, request

from originate.api.v1 import is_row_id
from originate.errors import ValidationError
from originate.models import ConsumerSupplierConnection
from originate.models.profile import ROLE_CONSUMER
from originate.security.actor import Actor
from originate.security.decorators import require_actor
from originate.services.relationship_service import connect, disconnect, list_connections

connection_bp = Blueprint("connections", __name__)


@connection_bp.get("")
@require_actor()
def get_connections(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    active_only = request.args.get("active", "").lower() in {"1", "true", "yes"}
    connections = list_connections(actor, active_only=active_only)
    return {"items": [_build_connection_response(row) for row in connections]}, 200


@connection_bp.post("")
@require_actor(ROLE_CONSUMER)
def create_connection(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    supplier_id = payload.get("supplier_id")
    company_provider_id = payload.get("company_provider_id")
    if not is_row_id(supplier_id) or not is_row_id(company_provider_id):
        raise ValidationError("supplier_id and company_provider_id are required")

    connection = connect(actor, supplier_id, company_provider_id)
    return _build_connection_response(connection), 201


@connection_bp.post("/<int:connection_id>/disconnect")
@require_actor(ROLE_CONSUMER)
def remove_connection(actor: Actor, connection_id: int) -> tuple[dict[str, object], int]:
    return _build_connection_response(disconnect(actor, connection_id)), 200


def _build_connection_response(connection: ConsumerSupplierConnection) -> dict[str, object]:
    consumer = connection.consumer
    return {
        "id": connection.id,
        "consumer_id": connection.consumer_id,
        "consumer_name": (consumer.full_name or consumer.email) if consumer else None,
        "supplier_id": connection.supplier_id,
        "supplier_name": connection.supplier.business_name if connection.supplier else None,
        "company_provider_id": connection.company_provider_id,
        "company_name": connection.company_provider.company_name if connection.company_provider else None,
        "status": connection.status,
        "created_at": connection.created_at.isoformat() if connection.created_at else None,
    }
