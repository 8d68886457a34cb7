from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from originate.errors import AlreadyExists, Unauthorized, ValidationError
from originate.extensions import db
from originate.models import CompanyProvider, Profile, Supplier
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_SUPPLIER, ROLES
from originate.security.actor import Actor
from originate.services.storage import commit_session

logger = logging.getLogger(__name__)

PROFILE_EDITABLE_FIELDS = ("full_name", "phone", "avatar_url")

SUPPLIER_REQUIRED_FIELDS = ("business_name", "location_country")
SUPPLIER_OPTIONAL_FIELDS = ("description", "location_city", "location_state")
COMPANY_REQUIRED_FIELDS = ("company_name", "country")
COMPANY_OPTIONAL_FIELDS = ("description", "website", "logo_url")

ONBOARDING_PATHS = {
    ROLE_SUPPLIER: "/onboarding/supplier",
    ROLE_COMPANY_PROVIDER: "/onboarding/company",
}


def find_profile(identity: str) -> Profile | None:
    return db.session.get(Profile, identity)


def create_profile(
    identity: str,
    role: str,
    email: str | None = None,
    full_name: str | None = None,
    phone: str | None = None,
) -> Profile:
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    if find_profile(identity) is not None:
        raise AlreadyExists("A profile already exists for this account.")

    profile = Profile(
        id=identity,
        role=role,
        email=email.lower().strip() if email else None,
        full_name=full_name,
        phone=phone,
    )
    db.session.add(profile)
    commit_session("creating profile", conflict=AlreadyExists("A profile already exists for this account."))
    logger.info("Profile %s created with role %s", identity, role)
    return profile


def update_profile(actor: Actor, updates: dict[str, Any]) -> Profile:
    profile = db.session.get(Profile, actor.profile_id)
    if "role" in updates and updates["role"] != profile.role:
        raise ValidationError("role cannot be changed")

    for field in PROFILE_EDITABLE_FIELDS:
        if field in updates:
            value = updates[field]
            setattr(profile, field, str(value).strip() if value is not None else None)
    commit_session("updating profile")
    return profile


def onboard_supplier(actor: Actor, data: dict[str, Any]) -> Supplier:
    if not actor.is_supplier:
        raise Unauthorized("Only supplier accounts can complete supplier onboarding.")
    if actor.supplier_id is not None:
        raise AlreadyExists("Supplier onboarding is already complete.")

    supplier = Supplier(user_id=actor.profile_id, **_supplier_fields(data, partial=False))
    db.session.add(supplier)
    commit_session("onboarding supplier", conflict=AlreadyExists("Supplier onboarding is already complete."))
    logger.info("Supplier %s onboarded for profile %s", supplier.id, actor.profile_id)
    return supplier


def update_supplier(actor: Actor, data: dict[str, Any]) -> Supplier:
    if not actor.is_supplier or actor.supplier_id is None:
        raise Unauthorized("Complete supplier onboarding before editing your business details.")

    supplier = db.session.get(Supplier, actor.supplier_id)
    for field, value in _supplier_fields(data, partial=True).items():
        setattr(supplier, field, value)
    commit_session("updating supplier")
    logger.info("Supplier %s updated by profile %s", supplier.id, actor.profile_id)
    return supplier


def onboard_company(actor: Actor, data: dict[str, Any]) -> CompanyProvider:
    if not actor.is_company_provider:
        raise Unauthorized("Only company provider accounts can complete company onboarding.")
    if actor.company_provider_id is not None:
        raise AlreadyExists("Company onboarding is already complete.")

    company = CompanyProvider(user_id=actor.profile_id, **_company_fields(data, partial=False))
    db.session.add(company)
    commit_session("onboarding company", conflict=AlreadyExists("Company onboarding is already complete."))
    logger.info("Company %s onboarded for profile %s", company.id, actor.profile_id)
    return company


def update_company(actor: Actor, data: dict[str, Any]) -> CompanyProvider:
    if not actor.is_company_provider or actor.company_provider_id is None:
        raise Unauthorized("Complete company onboarding before editing your company details.")

    company = db.session.get(CompanyProvider, actor.company_provider_id)
    for field, value in _company_fields(data, partial=True).items():
        setattr(company, field, value)
    commit_session("updating company")
    logger.info("Company %s updated by profile %s", company.id, actor.profile_id)
    return company


def list_companies() -> list[CompanyProvider]:
    stmt = select(CompanyProvider).where(CompanyProvider.is_active.is_(True)).order_by(CompanyProvider.company_name)
    return list(db.session.execute(stmt).scalars().all())


def dashboard_for(actor: Actor) -> dict[str, Any]:
    """Which dashboard the client should open, and whether onboarding comes first."""
    onboarding_required = (actor.role == ROLE_SUPPLIER and actor.supplier_id is None) or (
        actor.role == ROLE_COMPANY_PROVIDER and actor.company_provider_id is None
    )
    return {
        "dashboard": actor.role if actor.role in ROLES else None,
        "onboarding_required": onboarding_required,
        "onboarding_path": ONBOARDING_PATHS.get(actor.role) if onboarding_required else None,
    }


def _text_fields(
    data: dict[str, Any], required: tuple[str, ...], optional: tuple[str, ...], partial: bool
) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for field in required:
        if field in data or not partial:
            value = str(data.get(field) or "").strip()
            if not value:
                raise ValidationError(f"{field} is required")
            fields[field] = value
    for field in optional:
        if field in data:
            value = data[field]
            fields[field] = (str(value).strip() or None) if value is not None else None
    return fields


def _supplier_fields(data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    fields = _text_fields(data, SUPPLIER_REQUIRED_FIELDS, SUPPLIER_OPTIONAL_FIELDS, partial)

    if "delivery_zones" in data or not partial:
        zones = data.get("delivery_zones") or []
        if not isinstance(zones, list) or not all(isinstance(zone, str) for zone in zones):
            raise ValidationError("delivery_zones must be a list of strings")
        fields["delivery_zones"] = [zone.strip() for zone in zones if zone.strip()]
    return fields


def _company_fields(data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    return _text_fields(data, COMPANY_REQUIRED_FIELDS, COMPANY_OPTIONAL_FIELDS, partial)
