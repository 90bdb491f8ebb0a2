from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.lease_status import DRAFT
from app.db.database import Base


class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id"), nullable=False, index=True)
    tenant_name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
    rent_amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)  # loyer hors charges
    charges_amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False, default=0)  # provision
    # see app.core.lease_status
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=DRAFT)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    property: Mapped["Property"] = relationship("Property", back_populates="leases")  # noqa: F821
    invoices: Mapped[list["Invoice"]] = relationship(  # noqa: F821
        "Invoice", back_populates="lease", cascade="all, delete-orphan"
    )
    regularisations: Mapped[list["ChargeRegularisation"]] = relationship(  # noqa: F821
        "ChargeRegularisation", back_populates="lease", cascade="all, delete-orphan"
    )
