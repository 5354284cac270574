from datetime import datetime

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from verifier.db.session import Base
from verifier.models.common import TimestampMixin


class VerificationRequestRecord(Base, TimestampMixin):
    __tablename__ = "verification_requests"
    # Insertion order; "last pending" means highest seq.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    sender: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    recipient: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    secret: Mapped[str] = mapped_column(String(512), nullable=False)
    secret_expiry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dispatch_log: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True, default="pending")
