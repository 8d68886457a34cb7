from flask import Blueprint, request

from originate.models import Address
from originate.security.actor import Actor
from originate.security.decorators import require_actor
from originate.services.address_service import (
    add_address,
    delete_address,
    list_addresses,
    set_default_address,
    update_address,
)

address_bp = Blueprint("addresses", __name__)


@address_bp.get("")
@require_actor()
def get_addresses(actor: Actor) -> tuple[dict[str, list[dict[str, object]]], int]:
    return {"items": [build_address_response(address) for address in list_addresses(actor)]}, 200


@address_bp.post("")
@require_actor()
def create_address(actor: Actor) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    address = add_address(actor, payload)
    return build_address_response(address), 201


@address_bp.patch("/<int:address_id>")
@require_actor()
def edit_address(actor: Actor, address_id: int) -> tuple[dict[str, object], int]:
    payload = request.get_json(silent=True) or {}
    address = update_address(actor, address_id, payload)
    return build_address_response(address), 200


@address_bp.post("/<int:address_id>/default")
@require_actor()
def make_default_address(actor: Actor, address_id: int) -> tuple[dict[str, object], int]:
    address = set_default_address(actor, address_id)
    return build_address_response(address), 200


@address_bp.delete("/<int:address_id>")
@require_actor()
def remove_address(actor: Actor, address_id: int) -> tuple[dict[str, object], int]:
    delete_address(actor, address_id)
    return {"id": address_id, "deleted": True}, 200


def build_address_response(address: Address) -> dict[str, object]:
    return {
        "id": address.id,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "is_default": address.is_default,
    }
