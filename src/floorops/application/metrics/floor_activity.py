from __future__ import annotations

from prometheus_client import Counter

RESERVATIONS_CREATED_TOTAL = Counter(
    "floorops_reservations_created_total",
    "Total number of reservations created, by initial status.",
    ["status"],
)

RESERVATION_REJECTIONS_TOTAL = Counter(
    "floorops_reservation_rejections_total",
    "Total number of rejected reservation requests, by error code.",
    ["reason"],
)

RESERVATION_TRANSITION_TOTAL = Counter(
    "floorops_reservation_transition_total",
    "Total number of reservation status transitions.",
    ["from", "to"],
)

IDEMPOTENT_REPLAYS_TOTAL = Counter(
    "floorops_idempotent_replays_total",
    "Total number of create requests answered from an idempotency record.",
)

WALK_INS_TOTAL = Counter(
    "floorops_walk_ins_total",
    "Total number of walk-ins seated.",
)

TABLE_POSITION_UPDATES_TOTAL = Counter(
    "floorops_table_position_updates_total",
    "Total number of table position updates, by outcome.",
    ["outcome"],
)

TABLES_CREATED_TOTAL = Counter(
    "floorops_tables_created_total",
    "Total number of tables created.",
    ["area_id"],
)


def record_reservation_created(status: str) -> None:
    RESERVATIONS_CREATED_TOTAL.labels(status=status).inc()


def record_reservation_rejected(reason: str) -> None:
    RESERVATION_REJECTIONS_TOTAL.labels(reason=reason).inc()


def record_transition(from_status: str, to_status: str) -> None:
    RESERVATION_TRANSITION_TOTAL.labels(**{"from": from_status, "to": to_status}).inc()


def record_idempotent_replay() -> None:
    IDEMPOTENT_REPLAYS_TOTAL.inc()


def record_walk_in() -> None:
    WALK_INS_TOTAL.inc()


def record_position_update(outcome: str) -> None:
    TABLE_POSITION_UPDATES_TOTAL.labels(outcome=outcome).inc()


def record_table_created(area_id: str) -> None:
    TABLES_CREATED_TOTAL.labels(area_id=area_id).inc()
