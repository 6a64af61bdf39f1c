from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Text, Enum as SQLEnum
import enum

from ..core.database import Base
from ..core.exceptions import InvalidTransitionError
from ..core.timeutils import utcnow


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Every status change goes through this table. Rejected and completed are
# terminal, and confirmed -> confirmed is not a transition.
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.REJECTED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
    return AppointmentStatus(requested) in ALLOWED_TRANSITIONS[AppointmentStatus(current)]


def next_status(current: AppointmentStatus, requested: AppointmentStatus) -> AppointmentStatus:
    """Return the status after applying ``requested`` or raise InvalidTransitionError."""
    current = AppointmentStatus(current)
    requested = AppointmentStatus(requested)
    if not can_transition(current, requested):
        raise InvalidTransitionError(
            f"Cannot change appointment status from '{current.value}' to '{requested.value}'"
        )
    return requested


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, index=True)

    # Relationships
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Appointment details
    date = Column(DateTime, nullable=False, index=True)
    time_slot = Column(String(5), nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(
        SQLEnum(AppointmentStatus, values_callable=lambda s: [m.value for m in s]),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )

    # Filled in by the doctor on confirmation
    doctor_comment = Column(Text, nullable=True)
    clinic_address = Column(String(255), nullable=True)
    clinic_phone = Column(String(20), nullable=True)

    patient_notified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, patient_id={self.patient_id}, "
            f"doctor_id={self.doctor_id}, status='{self.status}')>"
        )
