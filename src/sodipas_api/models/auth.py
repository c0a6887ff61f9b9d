"""OTP codes and bearer sessions."""

from datetime import datetime

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from sodipas_api.models.base import Base, UTCDateTime, utcnow


class OtpCode(Base):
    """A pending one-time code; the email is the key, so one live code per email."""

    __tablename__ = "otp_codes"

    email: Mapped[str] = mapped_column(String(256), primary_key=True)
    otp: Mapped[str] = mapped_column(String(6), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<OtpCode email={self.email!r} expires_at={self.expires_at}>"


class AuthSession(Base):
    """Bearer session created by a successful OTP verification.

    Expiry is absolute from creation; sessions are never renewed.
    """

    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (Index("ix_sessions_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<AuthSession user_id={self.user_id} expires_at={self.expires_at}>"
