from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    DateTime,
    func,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntId
from datetime import datetime
from enum import Enum as PyEnum


# ==================== User Role ===================== #
class UserRole(str, PyEnum):
    ADMIN = "admin"  # platform admin with blanket visibility
    EMPLOYER = "employer"  # posts and manages job listings
    CANDIDATE = "candidate"  # job applicant


class User(Base):
    """
    Identity record mirrored from the external identity provider.

    Jobs and applications reference users by id; authentication itself
    happens on the bearer token, not against this table.
    """

    __tablename__: str = "users"
    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.CANDIDATE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
