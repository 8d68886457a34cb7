from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update

from originate.errors import AddressInUse, DefaultAddressConflict, NotFound, ValidationError
from originate.extensions import db
from originate.models import Address, Order
from originate.security.actor import Actor
from originate.services.storage import commit_session, utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("street", "city", "postal_code", "country")
EDITABLE_FIELDS = ("street", "city", "state", "postal_code", "country")


def list_addresses(actor: Actor) -> list[Address]:
    stmt = (
        select(Address)
        .where(Address.user_id == actor.profile_id)
        .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
    )
    return list(db.session.execute(stmt).scalars().all())


def get_address(actor: Actor, address_id: int) -> Address:
    address = db.session.get(Address, address_id)
    if address is None or address.user_id != actor.profile_id:
        raise NotFound("Address not found.")
    return address


def add_address(actor: Actor, data: dict[str, Any]) -> Address:
    fields = _clean_fields(data)
    missing = [field for field in REQUIRED_FIELDS if not fields.get(field)]
    if missing:
        raise ValidationError(f"missing address fields: {', '.join(missing)}")

    is_default = bool(data.get("is_default", False))
    if is_default:
        _clear_other_defaults(actor.profile_id)

    address = Address(user_id=actor.profile_id, is_default=is_default, **fields)
    db.session.add(address)
    commit_session("adding address", conflict=DefaultAddressConflict())
    logger.info("Address %s added for %s (default=%s)", address.id, actor.profile_id, address.is_default)
    if is_default:
        logger.info("Default address for %s is now %s", actor.profile_id, address.id)
    return address


def update_address(actor: Actor, address_id: int, data: dict[str, Any]) -> Address:
    address = get_address(actor, address_id)
    fields = _clean_fields(data)
    for field in REQUIRED_FIELDS:
        if field in fields and not fields[field]:
            raise ValidationError(f"{field} cannot be empty")

    is_default = bool(data["is_default"]) if "is_default" in data else address.is_default
    if is_default and not address.is_default:
        _clear_other_defaults(actor.profile_id, keep_id=address.id)

    for field, value in fields.items():
        setattr(address, field, value)
    address.is_default = is_default

    commit_session("updating address", conflict=DefaultAddressConflict())
    if is_default:
        logger.info("Default address for %s is now %s", actor.profile_id, address.id)
    return address


def set_default_address(actor: Actor, address_id: int) -> Address:
    return update_address(actor, address_id, {"is_default": True})


def delete_address(actor: Actor, address_id: int) -> None:
    address = get_address(actor, address_id)
    used = db.session.scalar(select(Order.id).where(Order.shipping_address_id == address.id).limit(1))
    if used is not None:
        raise AddressInUse()

    db.session.delete(address)
    commit_session("deleting address")
    logger.info("Address %s deleted for %s", address_id, actor.profile_id)


def _clear_other_defaults(user_id: str, keep_id: int | None = None) -> None:
    # Runs before the new default is written, inside the same transaction.
    stmt = update(Address).where(Address.user_id == user_id, Address.is_default.is_(True))
    if keep_id is not None:
        stmt = stmt.where(Address.id != keep_id)
    db.session.execute(
        stmt.values(is_default=False, updated_at=utcnow()).execution_options(synchronize_session="fetch")
    )


def _clean_fields(data: dict[str, Any]) -> dict[str, str | None]:
    fields: dict[str, str | None] = {}
    for field in EDITABLE_FIELDS:
        if field in data:
            value = data[field]
            fields[field] = str(value).strip() if value is not None else None
    return fields
