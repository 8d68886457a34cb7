"""Explicit caller context handed to every service call."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select

from originate.extensions import db
from originate.models import CompanyProvider, Profile, Supplier
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_CONSUMER, ROLE_SUPPLIER


@dataclass(frozen=True)
class Actor:
    profile_id: str
    role: str
    supplier_id: int | None = None
    company_provider_id: int | None = None

    @property
    def is_consumer(self) -> bool:
        return self.role == ROLE_CONSUMER

    @property
    def is_supplier(self) -> bool:
        return self.role == ROLE_SUPPLIER

    @property
    def is_company_provider(self) -> bool:
        return self.role == ROLE_COMPANY_PROVIDER


def resolve_actor(identity: str) -> Actor | None:
    """Build the actor for a verified identity, or ``None`` without a profile."""
    profile = db.session.get(Profile, identity)
    if profile is None:
        return None
    return actor_for_profile(profile)


def actor_for_profile(profile: Profile) -> Actor:
    supplier_id = None
    company_provider_id = None
    if profile.role == ROLE_SUPPLIER:
        supplier_id = db.session.scalar(select(Supplier.id).where(Supplier.user_id == profile.id))
    elif profile.role == ROLE_COMPANY_PROVIDER:
        company_provider_id = db.session.scalar(
            select(CompanyProvider.id).where(CompanyProvider.user_id == profile.id)
        )
    return Actor(
        profile_id=profile.id,
        role=profile.role,
        supplier_id=supplier_id,
        company_provider_id=company_provider_id,
    )
