from __future__ import annotations

from collections.abc import Callable, Iterable

from sqlalchemy import Engine, Select, select, update
from sqlalchemy.orm import Session, selectinload

from floorops.application.ports.repositories import ReservationRepository
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.infrastructure.db.models.floor import (
    FloorTableModel,
    ReservationModel,
    ReservationTableModel,
)
from floorops.infrastructure.db.repositories.floor_repo import as_utc
from floorops.infrastructure.db.session import get_engine


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_for_date(self, date: str) -> list[Reservation]:
        with Session(self._engine) as session:
            models = list(session.execute(_same_day(date)).scalars().all())
            return [self._to_domain(model) for model in models]

    def get(self, reservation_id: ReservationId) -> Reservation | None:
        statement = (
            select(ReservationModel)
            .options(selectinload(ReservationModel.tables))
            .where(ReservationModel.id == str(reservation_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def add(self, reservation: Reservation) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(reservation))
            session.commit()

    def add_guarded(
        self,
        reservation: Reservation,
        guard: Callable[[list[Reservation]], None],
        lock_table_ids: Iterable[TableId] = (),
    ) -> None:
        locked_ids = sorted({str(table_id) for table_id in lock_table_ids})
        # Row locks on the booked tables serialize writers across processes.
        lock_statement = (
            select(FloorTableModel.id)
            .where(FloorTableModel.id.in_(locked_ids))
            .order_by(FloorTableModel.id)
            .with_for_update()
        )
        with Session(self._engine) as session, session.begin():
            session.execute(lock_statement)
            models = session.execute(_same_day(reservation.date)).scalars().all()
            guard([self._to_domain(model) for model in models])
            session.add(self._to_model(reservation))

    def update_status(
        self,
        reservation_id: ReservationId,
        status: ReservationStatus,
    ) -> Reservation:
        statement = (
            update(ReservationModel)
            .where(ReservationModel.id == str(reservation_id))
            .values(status=status.value)
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise RuntimeError(f"reservation {reservation_id} not found for status update")
            session.commit()

        updated = self.get(reservation_id)
        if updated is None:
            raise RuntimeError(f"reservation {reservation_id} not found after status update")
        return updated

    def _to_model(self, reservation: Reservation) -> ReservationModel:
        model = ReservationModel(
            id=str(reservation.reservation_id),
            client_name=reservation.client_name,
            party_size=reservation.party_size,
            date=reservation.date,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            status=reservation.status.value,
            duration=reservation.duration,
            notes=reservation.notes,
            created_at=as_utc(reservation.created_at),
        )
        model.tables = [
            ReservationTableModel(
                reservation_id=str(reservation.reservation_id),
                table_id=str(table_id),
                position=position,
            )
            for position, table_id in enumerate(reservation.table_ids)
        ]
        return model

    def _to_domain(self, model: ReservationModel) -> Reservation:
        return Reservation(
            reservation_id=ReservationId(model.id),
            table_ids=tuple(TableId(link.table_id) for link in model.tables),
            client_name=model.client_name,
            party_size=model.party_size,
            date=model.date,
            start_time=model.start_time,
            end_time=model.end_time,
            status=ReservationStatus(model.status),
            duration=model.duration,
            notes=model.notes,
            created_at=as_utc(model.created_at),
        )


def _same_day(date: str) -> Select[tuple[ReservationModel]]:
    return (
        select(ReservationModel)
        .options(selectinload(ReservationModel.tables))
        .where(ReservationModel.date == date)
        .order_by(ReservationModel.created_at, ReservationModel.id)
    )
