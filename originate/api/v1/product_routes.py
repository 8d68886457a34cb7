from flask import Blueprint, request

from originate.models import Product
from originate.models.profile import ROLE_COMPANY_PROVIDER
from originate.security.actor import Actor
from originate.security.decorators import require_actor
from originate.services.catalog_service import create_product, delete_product, list_products, update_product

product_bp = Blueprint("products", __name__)


@product_bp.get("")
@require_actor()
def browse_products(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    company_provider_id = request.args.get("company_provider_id", type=int)
    mine = request.args.get("mine", "").lower() in {"1", "true", "yes"}

    if mine and actor.is_company_provider:
        # Company providers managing their catalog also see unavailable products.
        products = []
        if actor.company_provider_id is not None:
            products = list_products(company_provider_id=actor.company_provider_id, include_unavailable=True)
    else:
        products = list_products(company_provider_id=company_provider_id)
    return {"items": [build_product_response(product) for product in products]}, 200


@product_bp.post("")
@require_actor(ROLE_COMPANY_PROVIDER)
def add_product(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    product = create_product(actor, payload)
    return build_product_response(product), 201


@product_bp.patch("/<int:product_id>")
@require_actor(ROLE_COMPANY_PROVIDER)
def edit_product(actor: Actor, product_id: int) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    product = update_product(actor, product_id, payload)
    return build_product_response(product), 200


@product_bp.delete("/<int:product_id>")
@require_actor(ROLE_COMPANY_PROVIDER)
def remove_product(actor: Actor, product_id: int) -> tuple[dict[str, object], int]:
    delete_product(actor, product_id)
    return {"id": product_id, "deleted": True}, 200


def build_product_response(product: Product) -> dict[str, object]:
    return {
        "id": product.id,
        "company_provider_id": product.company_provider_id,
        "company_name": product.company_provider.company_name if product.company_provider else None,
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "image_url": product.image_url,
        "category": product.category,
        "roast_level": product.roast_level,
        "origin": product.origin,
        "tasting_notes": list(product.tasting_notes or []),
        "weight_grams": product.weight_grams,
        "is_available": product.is_available,
    }
