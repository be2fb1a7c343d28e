# src/modules/queue/presence.py
"""Doctor presence derived from queue timestamp columns.

The stored ``status`` string is never consulted here. Presence is
recomputed from the rows every time it is needed; nothing is cached.
"""

from typing import Any, Dict, Iterable, List
from uuid import UUID

from src.common.utils.global_functions import read_field
from .schemas import DoctorPresence


def _is_open(row: Any) -> bool:
    # A terminated row never contributes, whatever else is set on it.
    return not read_field(row, "ended_at") and not read_field(row, "canceled_at")


def is_busy_row(row: Any) -> bool:
    return bool(read_field(row, "started_at")) and _is_open(row)


def is_calling_row(row: Any) -> bool:
    return (
        bool(read_field(row, "called_at"))
        and not read_field(row, "started_at")
        and _is_open(row)
    )


def derive_status(rows: Iterable[Any]) -> DoctorPresence:
    """Compute a doctor's presence from that doctor's queue rows.

    busy wins over calling, which wins over available. An empty row set
    means available.
    """
    rows = list(rows)
    if any(is_busy_row(r) for r in rows):
        return DoctorPresence.BUSY
    if any(is_calling_row(r) for r in rows):
        return DoctorPresence.CALLING
    return DoctorPresence.AVAILABLE


def derive_status_map(rows: Iterable[Any], doctor_ids: Iterable[UUID]) -> Dict[UUID, DoctorPresence]:
    """Group rows by doctor and derive presence for each requested doctor."""
    grouped: Dict[UUID, List[Any]] = {}
    for row in rows:
        doctor_id = read_field(row, "doctor_id")
        if doctor_id is None:
            continue
        grouped.setdefault(doctor_id, []).append(row)

    return {doctor_id: derive_status(grouped.get(doctor_id, [])) for doctor_id in doctor_ids}
