from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from originate.errors import (
    DuplicateApplication,
    InvalidTransition,
    NotFound,
    SupplierNotApproved,
    Unauthorized,
)
from originate.extensions import db
from originate.models import (
    CompanyProvider,
    ConsumerSupplierConnection,
    Supplier,
    SupplierCompanyRelationship,
)
from originate.models.relationship import (
    CONNECTION_ACTIVE,
    CONNECTION_INACTIVE,
    RELATIONSHIP_APPROVED,
    RELATIONSHIP_PENDING,
    RELATIONSHIP_REJECTED,
    RELATIONSHIP_SUSPENDED,
)
from originate.security.actor import Actor
from originate.security.visibility import policy_for
from originate.services.storage import commit_session, transition_status, utcnow

logger = logging.getLogger(__name__)


def find_relationship(supplier_id: int, company_provider_id: int) -> SupplierCompanyRelationship | None:
    stmt = select(SupplierCompanyRelationship).where(
        SupplierCompanyRelationship.supplier_id == supplier_id,
        SupplierCompanyRelationship.company_provider_id == company_provider_id,
    )
    return db.session.execute(stmt).scalar_one_or_none()


def is_supplier_approved(supplier_id: int, company_provider_id: int) -> bool:
    relationship = find_relationship(supplier_id, company_provider_id)
    return relationship is not None and relationship.status == RELATIONSHIP_APPROVED


def find_connection(consumer_id: str, supplier_id: int, company_provider_id: int) -> ConsumerSupplierConnection | None:
    stmt = select(ConsumerSupplierConnection).where(
        ConsumerSupplierConnection.consumer_id == consumer_id,
        ConsumerSupplierConnection.supplier_id == supplier_id,
        ConsumerSupplierConnection.company_provider_id == company_provider_id,
    )
    return db.session.execute(stmt).scalar_one_or_none()


def has_active_connection(consumer_id: str, supplier_id: int, company_provider_id: int) -> bool:
    connection = find_connection(consumer_id, supplier_id, company_provider_id)
    return connection is not None and connection.status == CONNECTION_ACTIVE


def apply_to_company(actor: Actor, company_provider_id: int) -> SupplierCompanyRelationship:
    if not actor.is_supplier or actor.supplier_id is None:
        raise Unauthorized("Complete supplier onboarding before applying to companies.")

    company = db.session.get(CompanyProvider, company_provider_id)
    if company is None or not company.is_active:
        raise NotFound("Company not found.")

    existing = find_relationship(actor.supplier_id, company_provider_id)
    if existing is not None:
        if existing.status in {RELATIONSHIP_PENDING, RELATIONSHIP_APPROVED}:
            raise DuplicateApplication()
        if existing.status == RELATIONSHIP_SUSPENDED:
            raise InvalidTransition("Your access to this company is suspended.")

        # A rejected application is reopened rather than duplicated.
        if not transition_status(
            SupplierCompanyRelationship,
            existing.id,
            RELATIONSHIP_REJECTED,
            RELATIONSHIP_PENDING,
            approved_at=None,
            approved_by=None,
        ):
            raise DuplicateApplication()
        db.session.refresh(existing)
        logger.info("Supplier %s re-applied to company %s", actor.supplier_id, company_provider_id)
        return existing

    relationship = SupplierCompanyRelationship(
        supplier_id=actor.supplier_id,
        company_provider_id=company_provider_id,
        status=RELATIONSHIP_PENDING,
    )
    db.session.add(relationship)
    commit_session("creating supplier application", conflict=DuplicateApplication())
    logger.info("Supplier %s applied to company %s", actor.supplier_id, company_provider_id)
    return relationship


def _owned_relationship(actor: Actor, relationship_id: int) -> SupplierCompanyRelationship:
    relationship = db.session.get(SupplierCompanyRelationship, relationship_id)
    if relationship is None:
        raise NotFound("Application not found.")
    if not actor.is_company_provider or relationship.company_provider_id != actor.company_provider_id:
        raise Unauthorized("Only the company that received this application can review it.")
    return relationship


def _review(actor: Actor, relationship_id: int, expected: str, target: str, **values) -> SupplierCompanyRelationship:
    relationship = _owned_relationship(actor, relationship_id)
    if relationship.status != expected:
        raise InvalidTransition(f"Applications that are {relationship.status} cannot be {target}.")

    if not transition_status(SupplierCompanyRelationship, relationship.id, expected, target, **values):
        raise InvalidTransition("This application was updated by someone else; refresh and try again.")

    db.session.refresh(relationship)
    logger.info(
        "Relationship %s (supplier %s, company %s) %s -> %s",
        relationship.id,
        relationship.supplier_id,
        relationship.company_provider_id,
        expected,
        target,
    )
    return relationship


def approve_relationship(actor: Actor, relationship_id: int) -> SupplierCompanyRelationship:
    return _review(
        actor,
        relationship_id,
        RELATIONSHIP_PENDING,
        RELATIONSHIP_APPROVED,
        approved_at=utcnow(),
        approved_by=actor.profile_id,
    )


def reject_relationship(actor: Actor, relationship_id: int) -> SupplierCompanyRelationship:
    return _review(actor, relationship_id, RELATIONSHIP_PENDING, RELATIONSHIP_REJECTED)


def suspend_relationship(actor: Actor, relationship_id: int) -> SupplierCompanyRelationship:
    return _review(actor, relationship_id, RELATIONSHIP_APPROVED, RELATIONSHIP_SUSPENDED)


def list_relationships(actor: Actor, status: str | None = None) -> list[SupplierCompanyRelationship]:
    stmt = select(SupplierCompanyRelationship).where(policy_for(actor).relationship_clause(actor))
    if status:
        stmt = stmt.where(SupplierCompanyRelationship.status == status)
    stmt = stmt.order_by(SupplierCompanyRelationship.created_at.desc(), SupplierCompanyRelationship.id.desc())
    return list(db.session.execute(stmt).scalars().all())


def connect(actor: Actor, supplier_id: int, company_provider_id: int) -> ConsumerSupplierConnection:
    if not actor.is_consumer:
        raise Unauthorized("Only consumers can connect with suppliers.")
    if not is_supplier_approved(supplier_id, company_provider_id):
        raise SupplierNotApproved()

    existing = find_connection(actor.profile_id, supplier_id, company_provider_id)
    if existing is not None:
        if existing.status == CONNECTION_INACTIVE:
            transition_status(ConsumerSupplierConnection, existing.id, CONNECTION_INACTIVE, CONNECTION_ACTIVE)
            db.session.refresh(existing)
            logger.info("Consumer %s reconnected with supplier %s", actor.profile_id, supplier_id)
        return existing

    connection = ConsumerSupplierConnection(
        consumer_id=actor.profile_id,
        supplier_id=supplier_id,
        company_provider_id=company_provider_id,
        status=CONNECTION_ACTIVE,
    )
    db.session.add(connection)
    commit_session("connecting consumer with supplier")
    logger.info(
        "Consumer %s connected with supplier %s under company %s",
        actor.profile_id,
        supplier_id,
        company_provider_id,
    )
    return connection


def disconnect(actor: Actor, connection_id: int) -> ConsumerSupplierConnection:
    connection = db.session.get(ConsumerSupplierConnection, connection_id)
    if connection is None:
        raise NotFound("Connection not found.")
    if not actor.is_consumer or connection.consumer_id != actor.profile_id:
        raise Unauthorized("Only the consumer who made this connection can remove it.")

    if connection.status == CONNECTION_ACTIVE:
        transition_status(ConsumerSupplierConnection, connection.id, CONNECTION_ACTIVE, CONNECTION_INACTIVE)
        db.session.refresh(connection)
        logger.info("Consumer %s disconnected from supplier %s", actor.profile_id, connection.supplier_id)
    return connection


def list_connections(actor: Actor, active_only: bool = False) -> list[ConsumerSupplierConnection]:
    stmt = select(ConsumerSupplierConnection).where(policy_for(actor).connection_clause(actor))
    if active_only:
        stmt = stmt.where(ConsumerSupplierConnection.status == CONNECTION_ACTIVE)
    stmt = stmt.order_by(ConsumerSupplierConnection.created_at.desc(), ConsumerSupplierConnection.id.desc())
    return list(db.session.execute(stmt).scalars().all())


def list_suppliers(company_provider_id: int | None = None) -> list[Supplier]:
    """Active suppliers, optionally only those approved by one company."""
    stmt = (
        select(Supplier)
        .where(Supplier.is_active.is_(True))
        .options(selectinload(Supplier.relationships))
        .order_by(Supplier.business_name)
    )
    if company_provider_id is not None:
        stmt = stmt.join(
            SupplierCompanyRelationship,
            SupplierCompanyRelationship.supplier_id == Supplier.id,
        ).where(
            SupplierCompanyRelationship.company_provider_id == company_provider_id,
            SupplierCompanyRelationship.status == RELATIONSHIP_APPROVED,
        )
    return list(db.session.execute(stmt).scalars().unique().all())
