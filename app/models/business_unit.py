"""Business unit model, the scoping boundary for emissions data."""

from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Text, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.organization import Organization
    from app.models.emission import Emission


class BusinessUnitStatus(str, PyEnum):
    """Business unit lifecycle status"""

    ACTIVE = "active"
    ARCHIVED = "archived"


class BusinessUnit(Base, TimestampMixin):
    """
    Organizational scoping boundary.

    Emissions belong to exactly one business unit. Users are scoped to a
    home unit (User.business_unit_id), and a BUSINESS_UNIT_MANAGER is also
    scoped to every unit that records them as manager_id.

    Units are never hard-deleted; archiving flips status to ARCHIVED.
    """

    __tablename__ = "business_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    manager_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[BusinessUnitStatus] = mapped_column(
        Enum(BusinessUnitStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=BusinessUnitStatus.ACTIVE,
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="business_units"
    )
    emissions: Mapped[list["Emission"]] = relationship(
        "Emission",
        back_populates="business_unit",
        order_by="Emission.date",
    )

    @property
    def is_archived(self) -> bool:
        return self.status == BusinessUnitStatus.ARCHIVED

    def __repr__(self) -> str:
        return f"<BusinessUnit(id={self.id}, name='{self.name}', status={self.status.value})>"
