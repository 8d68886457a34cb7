from __future__ import annotations

from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from originate import create_app
from originate.config import Config
from originate.extensions import db
from originate.models import (
    Address,
    CompanyProvider,
    ConsumerSupplierConnection,
    Product,
    Profile,
    Supplier,
    SupplierCompanyRelationship,
)
from originate.models.profile import ROLE_COMPANY_PROVIDER, ROLE_CONSUMER, ROLE_SUPPLIER
from originate.models.relationship import CONNECTION_ACTIVE, RELATIONSHIP_APPROVED
from originate.security.actor import Actor, actor_for_profile


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret"
    JWT_DECODE_AUDIENCE = None
    CORS_ORIGINS = ["http://localhost:5173"]
    LOG_LEVEL = "WARNING"
    LOG_FILE = None
    RATELIMIT_ENABLED = False


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def auth_headers(profile_id: str) -> dict[str, str]:
    token = create_access_token(identity=profile_id)
    return {"Authorization": f"Bearer {token}"}


def actor_of(profile_id: str) -> Actor:
    return actor_for_profile(db.session.get(Profile, profile_id))


def make_profile(profile_id: str, role: str, email: str | None = None) -> Profile:
    profile = Profile(id=profile_id, role=role, email=email or f"{profile_id}@example.com", full_name=profile_id)
    db.session.add(profile)
    db.session.commit()
    return profile


def make_supplier(profile_id: str, business_name: str = "Bean Runners") -> Supplier:
    make_profile(profile_id, ROLE_SUPPLIER)
    supplier = Supplier(
        user_id=profile_id,
        business_name=business_name,
        delivery_zones=["Downtown"],
        location_city="Portland",
        location_country="US",
    )
    db.session.add(supplier)
    db.session.commit()
    return supplier


def make_company(profile_id: str, company_name: str = "Highland Roasters") -> CompanyProvider:
    make_profile(profile_id, ROLE_COMPANY_PROVIDER)
    company = CompanyProvider(user_id=profile_id, company_name=company_name, country="CO")
    db.session.add(company)
    db.session.commit()
    return company


def make_product(company: CompanyProvider, name: str = "Huila Reserve", price: str = "12.00", **fields) -> Product:
    product = Product(
        company_provider_id=company.id,
        name=name,
        price=Decimal(price),
        category=fields.pop("category", "single-origin"),
        roast_level=fields.pop("roast_level", "medium"),
        weight_grams=fields.pop("weight_grams", 340),
        **fields,
    )
    db.session.add(product)
    db.session.commit()
    return product


def make_address(profile_id: str, street: str = "1 Main St", is_default: bool = False) -> Address:
    address = Address(
        user_id=profile_id,
        street=street,
        city="Portland",
        postal_code="97201",
        country="US",
        is_default=is_default,
    )
    db.session.add(address)
    db.session.commit()
    return address


def approve(supplier: Supplier, company: CompanyProvider) -> SupplierCompanyRelationship:
    relationship = SupplierCompanyRelationship(
        supplier_id=supplier.id,
        company_provider_id=company.id,
        status=RELATIONSHIP_APPROVED,
        approved_by=company.user_id,
    )
    db.session.add(relationship)
    db.session.commit()
    return relationship


def connect(consumer_id: str, supplier: Supplier, company: CompanyProvider) -> ConsumerSupplierConnection:
    connection = ConsumerSupplierConnection(
        consumer_id=consumer_id,
        supplier_id=supplier.id,
        company_provider_id=company.id,
        status=CONNECTION_ACTIVE,
    )
    db.session.add(connection)
    db.session.commit()
    return connection


class Marketplace:
    """One company, one approved supplier and one connected consumer with an address."""

    def __init__(self):
        self.company = make_company("company-1")
        self.supplier = make_supplier("supplier-1")
        self.consumer = make_profile("consumer-1", ROLE_CONSUMER)
        self.relationship = approve(self.supplier, self.company)
        self.connection = connect(self.consumer.id, self.supplier, self.company)
        self.address = make_address(self.consumer.id, is_default=True)
        self.product = make_product(self.company)

    @property
    def consumer_actor(self) -> Actor:
        return actor_of(self.consumer.id)

    @property
    def supplier_actor(self) -> Actor:
        return actor_of(self.supplier.user_id)

    @property
    def company_actor(self) -> Actor:
        return actor_of(self.company.user_id)

    def order_payload(self, quantity: int = 2) -> dict[str, object]:
        return {
            "supplier_id": self.supplier.id,
            "company_provider_id": self.company.id,
            "shipping_address_id": self.address.id,
            "items": [{"product_id": self.product.id, "quantity": quantity}],
        }


@pytest.fixture()
def market(app) -> Marketplace:
    return Marketplace()
