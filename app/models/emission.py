import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, Date, ForeignKey, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.business_unit import BusinessUnit


class EmissionStatus(str, PyEnum):
    """Emission review status"""

    PENDING = "pending"
    APPROVED = "approved"


class Emission(Base, TimestampMixin):
    """
    Greenhouse-gas emissions recorded for a business unit.

    Scope values are tonnes CO2e. Records start PENDING and move to
    APPROVED once a user with APPROVE_DATA signs them off.
    """

    __tablename__ = "emissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_unit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("business_units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    scope1: Mapped[float] = mapped_column(Numeric(precision=15, scale=3), nullable=False, default=0)
    scope2: Mapped[float] = mapped_column(Numeric(precision=15, scale=3), nullable=False, default=0)
    scope3: Mapped[float] = mapped_column(Numeric(precision=15, scale=3), nullable=False, default=0)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    status: Mapped[EmissionStatus] = mapped_column(
        Enum(EmissionStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EmissionStatus.PENDING,
    )
    approved_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    business_unit: Mapped["BusinessUnit"] = relationship(
        "BusinessUnit", back_populates="emissions"
    )

    @property
    def total(self) -> float:
        return float(self.scope1) + float(self.scope2) + float(self.scope3)
