from flask import Blueprint, request

from originate.api.v1 import is_row_id
from originate.errors import ValidationError
from originate.models import SupplierCompanyRelationship
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_SUPPLIER
from originate.security.actor import Actor
from originate.security.decorators import require_actor
from originate.services.relationship_service import (
    apply_to_company,
    approve_relationship,
    list_relationships,
    reject_relationship,
    suspend_relationship,
)

relationship_bp = Blueprint("relationships", __name__)


@relationship_bp.get("")
@require_actor(ROLE_SUPPLIER, ROLE_COMPANY_PROVIDER)
def get_relationships(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    status = str(request.args.get("status", "")).strip().lower() or None
    relationships = list_relationships(actor, status=status)
    return {"items": [_build_relationship_response(row) for row in relationships]}, 200


@relationship_bp.post("")
@require_actor(ROLE_SUPPLIER)
def apply(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    company_provider_id = payload.get("company_provider_id")
    if not is_row_id(company_provider_id):
        raise ValidationError("company_provider_id is required")

    relationship = apply_to_company(actor, company_provider_id)
    return _build_relationship_response(relationship), 201


@relationship_bp.post("/<int:relationship_id>/approve")
@require_actor(ROLE_COMPANY_PROVIDER)
def approve(actor: Actor, relationship_id: int) -> tuple[dict[str, object], int]:
    return _build_relationship_response(approve_relationship(actor, relationship_id)), 200


@relationship_bp.post("/<int:relationship_id>/reject")
@require_actor(ROLE_COMPANY_PROVIDER)
def reject(actor: Actor, relationship_id: int) -> tuple[dict[str, object], int]:
    return _build_relationship_response(reject_relationship(actor, relationship_id)), 200


@relationship_bp.post("/<int:relationship_id>/suspend")
@require_actor(ROLE_COMPANY_PROVIDER)
def suspend(actor: Actor, relationship_id: int) -> tuple[dict[str, object], int]:
    return _build_relationship_response(suspend_relationship(actor, relationship_id)), 200


def _build_relationship_response(relationship: SupplierCompanyRelationship) -> dict[str, object]:
    return {
        "id": relationship.id,
        "supplier_id": relationship.supplier_id,
        "supplier_name": relationship.supplier.business_name if relationship.supplier else None,
        "company_provider_id": relationship.company_provider_id,
        "company_name": relationship.company_provider.company_name if relationship.company_provider else None,
        "status": relationship.status,
        "approved_at": relationship.approved_at.isoformat() if relationship.approved_at else None,
        "approved_by": relationship.approved_by,
        "created_at": relationship.created_at.isoformat() if relationship.created_at else None,
    }
