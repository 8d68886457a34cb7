"""Row-level visibility and write authority, one policy per role.

Listings filter with ``order_clause``/``relationship_clause``/``connection_clause``
so that rows outside the actor's scope never leave the database; single-row
reads go through ``ensure_can_read_order``.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, false

from originate.errors import Forbidden, Unauthorized
from originate.models import ConsumerSupplierConnection, Order, SupplierCompanyRelationship
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_CONSUMER, ROLE_SUPPLIER
from originate.security.actor import Actor


class RolePolicy:
    can_create_orders = False
    can_advance_orders = False
    can_cancel_orders = False

    def order_clause(self, actor: Actor) -> ColumnElement[bool]:
        raise NotImplementedError

    def can_read_order(self, actor: Actor, order: Order) -> bool:
        raise NotImplementedError

    def relationship_clause(self, actor: Actor) -> ColumnElement[bool]:
        return false()

    def connection_clause(self, actor: Actor) -> ColumnElement[bool]:
        return false()


class ConsumerPolicy(RolePolicy):
    can_create_orders = True
    can_cancel_orders = True

    def order_clause(self, actor: Actor) -> ColumnElement[bool]:
        return Order.consumer_id == actor.profile_id

    def can_read_order(self, actor: Actor, order: Order) -> bool:
        return order.consumer_id == actor.profile_id

    def connection_clause(self, actor: Actor) -> ColumnElement[bool]:
        return ConsumerSupplierConnection.consumer_id == actor.profile_id


class SupplierPolicy(RolePolicy):
    can_advance_orders = True

    def order_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.supplier_id is None:
            return false()
        return Order.supplier_id == actor.supplier_id

    def can_read_order(self, actor: Actor, order: Order) -> bool:
        return actor.supplier_id is not None and order.supplier_id == actor.supplier_id

    def relationship_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.supplier_id is None:
            return false()
        return SupplierCompanyRelationship.supplier_id == actor.supplier_id

    def connection_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.supplier_id is None:
            return false()
        return ConsumerSupplierConnection.supplier_id == actor.supplier_id


class CompanyProviderPolicy(RolePolicy):
    def order_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.company_provider_id is None:
            return false()
        return Order.company_provider_id == actor.company_provider_id

    def can_read_order(self, actor: Actor, order: Order) -> bool:
        return actor.company_provider_id is not None and order.company_provider_id == actor.company_provider_id

    def relationship_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.company_provider_id is None:
            return false()
        return SupplierCompanyRelationship.company_provider_id == actor.company_provider_id

    def connection_clause(self, actor: Actor) -> ColumnElement[bool]:
        if actor.company_provider_id is None:
            return false()
        return ConsumerSupplierConnection.company_provider_id == actor.company_provider_id


_POLICIES: dict[str, RolePolicy] = {
    ROLE_CONSUMER: ConsumerPolicy(),
    ROLE_SUPPLIER: SupplierPolicy(),
    ROLE_COMPANY_PROVIDER: CompanyProviderPolicy(),
}


def policy_for(actor: Actor) -> RolePolicy:
    policy = _POLICIES.get(actor.role)
    if policy is None:
        raise Forbidden()
    return policy


def ensure_can_read_order(actor: Actor, order: Order) -> None:
    if not policy_for(actor).can_read_order(actor, order):
        raise Forbidden()


def ensure_can_create_order(actor: Actor) -> None:
    if not policy_for(actor).can_create_orders:
        raise Unauthorized("Only consumers can place orders.")


def ensure_can_advance_order(actor: Actor, order: Order) -> None:
    policy = policy_for(actor)
    if not policy.can_advance_orders or order.supplier_id != actor.supplier_id:
        raise Unauthorized("Only the supplier fulfilling this order can update its status.")


def ensure_can_cancel_order(actor: Actor, order: Order) -> None:
    policy = policy_for(actor)
    if not policy.can_cancel_orders or order.consumer_id != actor.profile_id:
        raise Unauthorized("Only the customer who placed this order can cancel it.")
