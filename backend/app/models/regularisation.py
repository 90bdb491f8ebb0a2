from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base


class ChargeRegularisation(Base):
    """One row = annual charges regularisation of one lease."""

    __tablename__ = "charge_regularisations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    lease_id: Mapped[int] = mapped_column(ForeignKey("leases.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    provisions_collected: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    total_real_charges: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    balance: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)  # + trop perçu / - complément
    # type: 'credit' | 'debit'
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    occupied_days: Mapped[int] = mapped_column(Integer, nullable=False)
    prorata_ratio: Mapped[float] = mapped_column(Numeric(6, 4), nullable=False)
    details: Mapped[list | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (UniqueConstraint("lease_id", "year", name="uq_lease_year"),)

    lease: Mapped["Lease"] = relationship(  # noqa: F821
        "Lease", back_populates="regularisations"
    )
