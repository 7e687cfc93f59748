"""SQLAlchemy ORM models for panels, breakers, rooms and circuits."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base


class Panel(Base):
    __tablename__ = "panels"
    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_panels_name_not_empty"),
        CheckConstraint("size >= 12 AND size <= 42", name="ck_panels_size"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    breakers: Mapped[list[Breaker]] = relationship(
        back_populates="panel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Panel {self.name} ({self.id})>"


class Breaker(Base):
    __tablename__ = "breakers"
    __table_args__ = (
        UniqueConstraint(
            "panel_id", "position", "slot", name="uq_breakers_panel_position_slot"
        ),
        CheckConstraint("position > 0", name="ck_breakers_position"),
        CheckConstraint("slot IN ('single', 'A', 'B')", name="ck_breakers_slot"),
        CheckConstraint(
            "breaker_type IN ('single', 'double_pole', 'tandem')",
            name="ck_breakers_type",
        ),
        CheckConstraint(
            "amperage IS NULL OR (amperage > 0 AND amperage <= 200)",
            name="ck_breakers_amperage",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    panel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("panels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    slot: Mapped[str] = mapped_column(
        String(10), nullable=False, default="single", server_default="single"
    )
    breaker_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="single", server_default="single"
    )
    label: Mapped[str | None] = mapped_column(Text, nullable=True)
    amperage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    critical: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    monitor: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    confirmed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    panel: Mapped[Panel] = relationship(back_populates="breakers", lazy="raise")
    circuits: Mapped[list[Circuit]] = relationship(
        back_populates="breaker",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Breaker {self.panel_id}:{self.position}/{self.slot} ({self.id})>"


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_rooms_name_not_empty"),
        CheckConstraint(
            "level IN ('basement', 'main', 'upper', 'outside')",
            name="ck_rooms_level",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Room {self.name} ({self.id})>"


class Circuit(Base):
    __tablename__ = "circuits"
    __table_args__ = (
        CheckConstraint(
            "type IS NULL OR type IN "
            "('outlet', 'lighting', 'heating', 'appliance', 'subpanel')",
            name="ck_circuits_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    breaker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("breakers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Only meaningful when type == "subpanel": the panel this circuit feeds
    subpanel_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("panels.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    breaker: Mapped[Breaker] = relationship(back_populates="circuits", lazy="raise")
    room: Mapped[Room | None] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Circuit {self.type} on breaker {self.breaker_id} ({self.id})>"
