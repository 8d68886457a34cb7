from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from originate.extensions import db

ROLE_CONSUMER = "consumer"
ROLE_SUPPLIER = "supplier"
ROLE_COMPANY_PROVIDER = "company_provider"
ROLES = (ROLE_CONSUMER, ROLE_SUPPLIER, ROLE_COMPANY_PROVIDER)


class Profile(db.Model):
    __tablename__ = "profiles"

    # Identity id issued by the auth provider (the token subject).
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    full_name: Mapped[str | None] = mapped_column(String(250))
    phone: Mapped[str | None] = mapped_column(String(32))
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    supplier: Mapped["Supplier | None"] = relationship(back_populates="profile", uselist=False)
    company_provider: Mapped["CompanyProvider | None"] = relationship(back_populates="profile", uselist=False)


from .company_provider import CompanyProvider  # noqa: E402
from .supplier import Supplier  # noqa: E402
