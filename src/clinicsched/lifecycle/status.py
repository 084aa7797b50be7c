# src/clinicsched/lifecycle/status.py
from __future__ import annotations

from pydantic import BaseModel

from clinicsched.errors import StatusTransitionError
from clinicsched.schemas.models import AppointmentStatus

# Statuses that free the slot for conflict scanning
RELEASING_STATUSES = frozenset({AppointmentStatus.CANCELLED.value, AppointmentStatus.NO_SHOW.value})


class StatusChange(BaseModel):
    model_config = {"use_enum_values": True}

    previous: AppointmentStatus
    status: AppointmentStatus
    cancellation_reason: str | None = None

    @property
    def releases_slot(self) -> bool:
        return self.status in RELEASING_STATUSES


def transition(
    current: AppointmentStatus | str,
    new: AppointmentStatus | str,
    cancellation_reason: str | None = None,
) -> StatusChange:
    """
    @brief
    Apply a status change to an appointment.

    @details
    The status is a flat field: any value may follow any other. The one
    guard is that cancelling requires a non-blank reason.

    @raises
        StatusTransitionError
            On an unknown status or a cancellation without reason.
    """
    try:
        prev_status = AppointmentStatus(current)
        new_status = AppointmentStatus(new)
    except ValueError as e:
        raise StatusTransitionError(
            f"Unknown appointment status: {e}",
            source="lifecycle.transition",
            suggested_action=f"Use one of: {', '.join(s.value for s in AppointmentStatus)}",
        ) from e

    reason = cancellation_reason.strip() if cancellation_reason else None
    if new_status is AppointmentStatus.CANCELLED and not reason:
        raise StatusTransitionError(
            "A cancellation reason is required when cancelling an appointment",
            source="lifecycle.transition",
            suggested_action="Provide cancellation_reason.",
        )

    return StatusChange(previous=prev_status, status=new_status, cancellation_reason=reason)


__all__ = ["RELEASING_STATUSES", "StatusChange", "transition"]
