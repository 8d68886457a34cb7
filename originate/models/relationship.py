from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from originate.extensions import db

RELATIONSHIP_PENDING = "pending"
RELATIONSHIP_APPROVED = "approved"
RELATIONSHIP_REJECTED = "rejected"
RELATIONSHIP_SUSPENDED = "suspended"

CONNECTION_ACTIVE = "active"
CONNECTION_INACTIVE = "inactive"


class SupplierCompanyRelationship(db.Model):
    __tablename__ = "supplier_company_relationships"
    __table_args__ = (
        UniqueConstraint("supplier_id", "company_provider_id", name="uq_supplier_company_relationship"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    supplier_id: Mapped[int] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_provider_id: Mapped[int] = mapped_column(
        ForeignKey("company_providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RELATIONSHIP_PENDING)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approved_by: Mapped[str | None] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    supplier: Mapped["Supplier"] = relationship(back_populates="relationships", lazy="joined")
    company_provider: Mapped["CompanyProvider"] = relationship(lazy="joined")


class ConsumerSupplierConnection(db.Model):
    __tablename__ = "consumer_supplier_connections"
    __table_args__ = (
        UniqueConstraint(
            "consumer_id",
            "supplier_id",
            "company_provider_id",
            name="uq_consumer_supplier_connection",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    consumer_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    supplier_id: Mapped[int] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_provider_id: Mapped[int] = mapped_column(
        ForeignKey("company_providers.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=CONNECTION_ACTIVE)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    consumer: Mapped["Profile"] = relationship(foreign_keys=[consumer_id], lazy="joined")
    supplier: Mapped["Supplier"] = relationship(lazy="joined")
    company_provider: Mapped["CompanyProvider"] = relationship(lazy="joined")


from .company_provider import CompanyProvider  # noqa: E402
from .profile import Profile  # noqa: E402
from .supplier import Supplier  # noqa: E402
