from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class AreaModel(Base):
    __tablename__ = "areas"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    max_tables: Mapped[int] = mapped_column(Integer, nullable=False)

    tables: Mapped[list["FloorTableModel"]] = relationship(back_populates="area")


class FloorTableModel(Base):
    __tablename__ = "floor_tables"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    area_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("areas.id"),
        nullable=False,
        index=True,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_vip: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_merge: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    merge_group: Mapped[str | None] = mapped_column(String(50), nullable=True)
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    area: Mapped[AreaModel] = relationship(back_populates="tables")


class ReservationModel(Base):
    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    client_name: Mapped[str] = mapped_column(String(120), nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    tables: Mapped[list["ReservationTableModel"]] = relationship(
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationTableModel.position",
    )

    __table_args__ = (Index("ix_reservations_date_status", "date", "status"),)


class ReservationTableModel(Base):
    __tablename__ = "reservation_tables"

    reservation_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("reservations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    table_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("floor_tables.id"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    reservation: Mapped[ReservationModel] = relationship(back_populates="tables")

    __table_args__ = (
        UniqueConstraint("reservation_id", "position", name="uq_reservation_tables_position"),
    )
