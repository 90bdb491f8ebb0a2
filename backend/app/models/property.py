from datetime import datetime

from sqlalchemy import Boolean, DateTime, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    postal_code: Mapped[str] = mapped_column(String(10), nullable=False)  # drives the TVA territory
    city: Mapped[str | None] = mapped_column(String(120))
    owner_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_address: Mapped[str | None] = mapped_column(Text)
    # Honoraires HT négociés au mandat; None = taux par défaut de l'année
    fee_rate_ht: Mapped[float | None] = mapped_column(Numeric(5, 4))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    leases: Mapped[list["Lease"]] = relationship(  # noqa: F821
        "Lease", back_populates="property", cascade="all, delete-orphan"
    )
