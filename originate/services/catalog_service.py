from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import select

from originate.errors import NotFound, ProductInUse, Unauthorized, ValidationError
from originate.extensions import db
from originate.models import OrderItem, Product, Supplier, SupplierCompanyRelationship
from originate.models.product import PRODUCT_CATEGORIES, ROAST_LEVELS
from originate.models.relationship import RELATIONSHIP_APPROVED
from originate.security.actor import Actor
from originate.services.storage import commit_session

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "description", "image_url", "origin")


def list_products(company_provider_id: int | None = None, include_unavailable: bool = False) -> list[Product]:
    stmt = select(Product)
    if company_provider_id is not None:
        stmt = stmt.where(Product.company_provider_id == company_provider_id)
    if not include_unavailable:
        stmt = stmt.where(Product.is_available.is_(True))
    stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
    return list(db.session.execute(stmt).scalars().all())


def list_supplier_products(supplier_id: int) -> list[Product]:
    """Available products of every company that has approved the supplier."""
    if db.session.get(Supplier, supplier_id) is None:
        raise NotFound("Supplier not found.")

    stmt = (
        select(Product)
        .join(
            SupplierCompanyRelationship,
            SupplierCompanyRelationship.company_provider_id == Product.company_provider_id,
        )
        .where(
            SupplierCompanyRelationship.supplier_id == supplier_id,
            SupplierCompanyRelationship.status == RELATIONSHIP_APPROVED,
            Product.is_available.is_(True),
        )
        .order_by(Product.name)
    )
    return list(db.session.execute(stmt).scalars().all())


def create_product(actor: Actor, data: dict[str, Any]) -> Product:
    company_provider_id = _owning_company(actor)
    fields = _product_fields(data, partial=False)
    product = Product(company_provider_id=company_provider_id, **fields)
    db.session.add(product)
    commit_session("creating product")
    logger.info("Product %s created by company %s", product.id, company_provider_id)
    return product


def update_product(actor: Actor, product_id: int, data: dict[str, Any]) -> Product:
    product = _owned_product(actor, product_id)
    if "company_provider_id" in data and data["company_provider_id"] != product.company_provider_id:
        raise ValidationError("product owner cannot be changed")

    # Existing order items keep their own price_at_purchase.
    for field, value in _product_fields(data, partial=True).items():
        setattr(product, field, value)
    commit_session("updating product")
    return product


def delete_product(actor: Actor, product_id: int) -> None:
    product = _owned_product(actor, product_id)
    ordered = db.session.scalar(select(OrderItem.id).where(OrderItem.product_id == product.id).limit(1))
    if ordered is not None:
        raise ProductInUse()

    db.session.delete(product)
    commit_session("deleting product")
    logger.info("Product %s deleted by company %s", product_id, actor.company_provider_id)


def _owning_company(actor: Actor) -> int:
    if not actor.is_company_provider or actor.company_provider_id is None:
        raise Unauthorized("Only company providers can manage products.")
    return actor.company_provider_id


def _owned_product(actor: Actor, product_id: int) -> Product:
    company_provider_id = _owning_company(actor)
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found.")
    if product.company_provider_id != company_provider_id:
        raise Unauthorized("This product belongs to another company.")
    return product


def _product_fields(data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    fields: dict[str, Any] = {}

    for field in TEXT_FIELDS:
        if field in data:
            value = data[field]
            fields[field] = str(value).strip() if value is not None else None
    if not partial and not fields.get("name"):
        raise ValidationError("name is required")
    if "name" in fields and not fields["name"]:
        raise ValidationError("name cannot be empty")

    if "price" in data or not partial:
        try:
            price = Decimal(str(data.get("price")))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("price is invalid") from None
        if not price.is_finite() or price <= 0:
            raise ValidationError("price must be positive")
        fields["price"] = price.quantize(Decimal("0.01"))

    if "category" in data or not partial:
        category = str(data.get("category", "")).strip().lower()
        if category not in PRODUCT_CATEGORIES:
            raise ValidationError(f"category must be one of {', '.join(PRODUCT_CATEGORIES)}")
        fields["category"] = category

    if "roast_level" in data or not partial:
        roast_level = str(data.get("roast_level", "")).strip().lower()
        if roast_level not in ROAST_LEVELS:
            raise ValidationError(f"roast_level must be one of {', '.join(ROAST_LEVELS)}")
        fields["roast_level"] = roast_level

    if "weight_grams" in data or not partial:
        weight = data.get("weight_grams")
        if not isinstance(weight, int) or isinstance(weight, bool) or weight <= 0:
            raise ValidationError("weight_grams must be a positive integer")
        fields["weight_grams"] = weight

    if "tasting_notes" in data:
        notes = data["tasting_notes"] or []
        if not isinstance(notes, list) or not all(isinstance(note, str) for note in notes):
            raise ValidationError("tasting_notes must be a list of strings")
        fields["tasting_notes"] = [note.strip() for note in notes if note.strip()]

    if "is_available" in data:
        fields["is_available"] = bool(data["is_available"])

    return fields
