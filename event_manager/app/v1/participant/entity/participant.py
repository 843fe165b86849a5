from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_manager.app.common.utils.consts import JoinStatus
from event_manager.app.common.utils.datetime_utils import utcnow
from event_manager.config.database import Base, BigIntId


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_participants_user_event"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[JoinStatus] = mapped_column(Enum(JoinStatus, name="join_status_enum"), nullable=False, default=JoinStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="participants")
    event = relationship("Event", back_populates="participants")
