from sqlalchemy import String, Integer, Boolean, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TimestampMixin
from app.models.role import UserRole

if TYPE_CHECKING:
    from app.models.organization import Organization


class User(Base, TimestampMixin):
    """
    Organization member with a role and an optional home business unit.

    Users are never deleted. Archiving sets is_active to False, which
    blocks login and every authenticated request.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Critical for multi-tenant queries
    )
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # password_hash is NULL for users who have not set a password yet
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=UserRole.TEAM_MEMBER,
    )
    business_unit_id: Mapped[int | None] = mapped_column(
        Integer,
        # users <-> business_units reference each other
        ForeignKey(
            "business_units.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_users_business_unit_id",
        ),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    organization: Mapped["Organization"] = relationship("Organization", back_populates="users")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role.value})>"
