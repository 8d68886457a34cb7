from flask import Blueprint, request
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from originate.api.v1.product_routes import build_product_response
from originate.models import CompanyProvider, Profile, Supplier
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_SUPPLIER
from originate.models.relationship import RELATIONSHIP_APPROVED
from originate.security.actor import Actor, actor_for_profile
from originate.security.decorators import require_actor
from originate.services.catalog_service import list_supplier_products
from originate.services.profile_service import (
    create_profile,
    dashboard_for,
    find_profile,
    list_companies,
    onboard_company,
    onboard_supplier,
    update_company,
    update_profile,
    update_supplier,
)
from originate.services.relationship_service import list_suppliers

profile_bp = Blueprint("profiles", __name__)
supplier_bp = Blueprint("suppliers", __name__)
company_bp = Blueprint("companies", __name__)


@profile_bp.post("")
@jwt_required()
def create_my_profile() -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    identity = str(get_jwt_identity())
    role = str(payload.get("role", "consumer")).strip().lower()
    email = payload.get("email") or get_jwt().get("email")

    profile = create_profile(
        identity,
        role,
        email=email,
        full_name=payload.get("full_name"),
        phone=payload.get("phone"),
    )
    return _build_me_response(profile, actor_for_profile(profile)), 201


@profile_bp.get("/me")
@require_actor()
def get_my_profile(actor: Actor) -> tuple[dict[str, object], int]:
    return _build_me_response(find_profile(actor.profile_id), actor), 200


@profile_bp.patch("/me")
@require_actor()
def update_my_profile(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    profile = update_profile(actor, payload)
    return _build_me_response(profile, actor), 200


@supplier_bp.post("/onboarding")
@require_actor(ROLE_SUPPLIER)
def complete_supplier_onboarding(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    supplier = onboard_supplier(actor, payload)
    return _build_supplier_response(supplier), 201


@supplier_bp.patch("/me")
@require_actor(ROLE_SUPPLIER)
def update_my_supplier(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    supplier = update_supplier(actor, payload)
    return _build_supplier_response(supplier), 200


@supplier_bp.get("")
@require_actor()
def browse_suppliers(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    company_provider_id = request.args.get("company_provider_id", type=int)
    suppliers = list_suppliers(company_provider_id=company_provider_id)
    return {"items": [_build_supplier_response(supplier) for supplier in suppliers]}, 200


@supplier_bp.get("/<int:supplier_id>/products")
@require_actor()
def browse_supplier_products(actor: Actor, supplier_id: int) -> tuple[dict[str, list[dict[str, object]]], int]:
    products = list_supplier_products(supplier_id)
    return {"items": [build_product_response(product) for product in products]}, 200


@company_bp.post("/onboarding")
@require_actor(ROLE_COMPANY_PROVIDER)
def complete_company_onboarding(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    company = onboard_company(actor, payload)
    return _build_company_response(company), 201


@company_bp.patch("/me")
@require_actor(ROLE_COMPANY_PROVIDER)
def update_my_company(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    company = update_company(actor, payload)
    return _build_company_response(company), 200


@company_bp.get("")
@require_actor()
def browse_companies(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    return {"items": [_build_company_response(company) for company in list_companies()]}, 200


def _build_me_response(profile: Profile, actor: Actor) -> dict[str, object]:
    return {
        "profile": {
            "id": profile.id,
            "email": profile.email,
            "full_name": profile.full_name,
            "phone": profile.phone,
            "avatar_url": profile.avatar_url,
            "role": profile.role,
            "created_at": profile.created_at.isoformat() if profile.created_at else None,
        },
        "supplier_id": actor.supplier_id,
        "company_provider_id": actor.company_provider_id,
        **dashboard_for(actor),
    }


def _build_supplier_response(supplier: Supplier) -> dict[str, object]:
    return {
        "id": supplier.id,
        "user_id": supplier.user_id,
        "business_name": supplier.business_name,
        "description": supplier.description,
        "delivery_zones": list(supplier.delivery_zones or []),
        "location_city": supplier.location_city,
        "location_state": supplier.location_state,
        "location_country": supplier.location_country,
        "is_active": supplier.is_active,
        "approved_company_ids": sorted(
            relationship.company_provider_id
            for relationship in supplier.relationships
            if relationship.status == RELATIONSHIP_APPROVED
        ),
    }


def _build_company_response(company: CompanyProvider) -> dict[str, object]:
    return {
        "id": company.id,
        "company_name": company.company_name,
        "description": company.description,
        "logo_url": company.logo_url,
        "website": company.website,
        "country": company.country,
        "is_active": company.is_active,
    }
