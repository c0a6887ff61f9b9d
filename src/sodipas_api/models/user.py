"""SQLAlchemy User model."""

from datetime import datetime

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from sodipas_api.models.base import Base, UTCDateTime, new_id, utcnow

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"
ROLE_WAREHOUSE = "warehouse"
ROLE_VIEWER = "viewer"

ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_CASHIER, ROLE_WAREHOUSE, ROLE_VIEWER)


class User(Base):
    """A staff member allowed to sign in with an e-mailed one-time code.

    ``hangar`` scopes what a non-admin user sees; admins see every hangar.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True, doc="Stored lower-cased"
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_VIEWER)
    hangar: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (Index("ix_users_role", "role"),)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
