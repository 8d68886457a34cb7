from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from originate.errors import AddressInUse, NotFound, ValidationError
from originate.extensions import db
from originate.models import Address, Order
from originate.models.profile import ROLE_CONSUMER
from originate.services.address_service import (
    add_address,
    delete_address,
    list_addresses,
    set_default_address,
    update_address,
)
from originate.services.order_service import create_order
from tests.conftest import actor_of, auth_headers, make_address, make_profile

ADDRESS = {"street": "1 Main St", "city": "Portland", "postal_code": "97201", "country": "US"}


def _defaults(profile_id: str) -> list[int]:
    db.session.expire_all()
    stmt = select(Address.id).where(Address.user_id == profile_id, Address.is_default.is_(True))
    return list(db.session.execute(stmt).scalars().all())


@pytest.fixture()
def consumer(app):
    return make_profile("consumer-1", ROLE_CONSUMER)


def test_new_default_clears_previous_default(consumer):
    actor = actor_of(consumer.id)
    first = add_address(actor, {**ADDRESS, "is_default": True})
    second = add_address(actor, {**ADDRESS, "street": "2 Side St", "is_default": True})

    assert _defaults(consumer.id) == [second.id]
    assert db.session.get(Address, first.id).is_default is False


def test_set_default_keeps_exactly_one(consumer):
    actor = actor_of(consumer.id)
    first = add_address(actor, {**ADDRESS, "is_default": True})
    second = add_address(actor, {**ADDRESS, "street": "2 Side St"})
    assert _defaults(consumer.id) == [first.id]

    set_default_address(actor, second.id)
    assert _defaults(consumer.id) == [second.id]
    assert list_addresses(actor)[0].id == second.id


def test_defaults_are_per_owner(consumer):
    make_profile("consumer-2", ROLE_CONSUMER)
    mine = add_address(actor_of(consumer.id), {**ADDRESS, "is_default": True})
    theirs = add_address(actor_of("consumer-2"), {**ADDRESS, "is_default": True})

    assert _defaults(consumer.id) == [mine.id]
    assert _defaults("consumer-2") == [theirs.id]


def test_missing_fields_are_rejected(consumer):
    with pytest.raises(ValidationError):
        add_address(actor_of(consumer.id), {"street": "1 Main St"})
    assert db.session.query(Address).count() == 0


def test_cannot_touch_someone_elses_address(consumer):
    make_profile("consumer-2", ROLE_CONSUMER)
    address = add_address(actor_of(consumer.id), ADDRESS)

    with pytest.raises(NotFound):
        update_address(actor_of("consumer-2"), address.id, {"city": "Salem"})
    with pytest.raises(NotFound):
        delete_address(actor_of("consumer-2"), address.id)


def test_address_book_over_http(client, consumer):
    headers = auth_headers(consumer.id)

    created = client.post("/api/v1/addresses", json={**ADDRESS, "is_default": True}, headers=headers)
    assert created.status_code == 201
    second = client.post("/api/v1/addresses", json={**ADDRESS, "street": "2 Side St"}, headers=headers)
    second_id = second.get_json()["id"]

    made_default = client.post(f"/api/v1/addresses/{second_id}/default", headers=headers)
    assert made_default.status_code == 200
    assert made_default.get_json()["is_default"] is True

    listing = client.get("/api/v1/addresses", headers=headers).get_json()["items"]
    assert [row["is_default"] for row in listing] == [True, False]
    assert listing[0]["id"] == second_id

    deleted = client.delete(f"/api/v1/addresses/{second_id}", headers=headers)
    assert deleted.status_code == 200
    assert len(client.get("/api/v1/addresses", headers=headers).get_json()["items"]) == 1


def test_store_refuses_a_second_default(consumer):
    make_address(consumer.id, is_default=True)

    with pytest.raises(IntegrityError):
        make_address(consumer.id, street="2 Side St", is_default=True)
    db.session.rollback()

    assert len(_defaults(consumer.id)) == 1


def test_non_default_addresses_are_unconstrained(consumer):
    make_address(consumer.id)
    make_address(consumer.id, street="2 Side St")

    assert _defaults(consumer.id) == []
    assert len(list_addresses(actor_of(consumer.id))) == 2


def test_address_on_an_order_cannot_be_deleted(market):
    payload = market.order_payload()
    create_order(
        market.consumer_actor,
        payload["supplier_id"],
        payload["company_provider_id"],
        payload["shipping_address_id"],
        payload["items"],
    )

    with pytest.raises(AddressInUse):
        delete_address(market.consumer_actor, market.address.id)

    db.session.expire_all()
    order = db.session.query(Order).one()
    assert order.shipping_address_id == market.address.id


def test_address_on_an_order_over_http(client, market):
    client.post("/api/v1/orders", json=market.order_payload(), headers=auth_headers(market.consumer.id))

    response = client.delete(f"/api/v1/addresses/{market.address.id}", headers=auth_headers(market.consumer.id))
    assert response.status_code == 409
    assert response.get_json()["error"] == "address_in_use"
