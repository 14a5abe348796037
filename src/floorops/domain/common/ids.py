from __future__ import annotations

from typing import NewType

AreaId = NewType("AreaId", str)
TableId = NewType("TableId", str)
ReservationId = NewType("ReservationId", str)
