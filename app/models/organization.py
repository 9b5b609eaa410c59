"""Organization model for multi-tenant isolation."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.business_unit import BusinessUnit


class Organization(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    Every user, business unit and invitation belongs to exactly one
    organization. Emissions belong to a business unit and therefore
    inherit its organization. Nothing is ever shared across organizations.
    """

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    logo: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    # logo is a URL to the uploaded image

    # Relationships
    users: Mapped[list["User"]] = relationship("User", back_populates="organization")
    business_units: Mapped[list["BusinessUnit"]] = relationship(
        "BusinessUnit",
        back_populates="organization",
        order_by="BusinessUnit.id",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug='{self.slug}')>"
