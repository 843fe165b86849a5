from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_manager.app.common.utils.consts import EventType
from event_manager.app.common.utils.datetime_utils import utcnow
from event_manager.config.database import Base, BigIntId

event_organizers = Table(
    "event_organizers",
    Base.metadata,
    Column("event_id", BigIntId, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", BigIntId, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_events_end_after_start"),
        CheckConstraint("total_seats IS NULL OR total_seats > 0", name="ck_events_total_seats_positive"),
        CheckConstraint("confirmed_count >= 0", name="ck_events_confirmed_count_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[EventType] = mapped_column(Enum(EventType, name="event_type_enum"), nullable=False)
    venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    join_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    contact_info: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_seats: Mapped[int | None] = mapped_column(Integer, nullable=True)  # None = unlimited
    confirmed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    organizers = relationship("User", secondary=event_organizers, back_populates="organized_events", passive_deletes=True)
    participants = relationship("Participant", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)

    def is_organizer(self, user_id: int) -> bool:
        return any(organizer.id == user_id for organizer in self.organizers)

    def has_seat_limit(self) -> bool:
        return self.total_seats is not None
