"""
Appointment lifecycle.

Appointments are created ``pending`` by a patient (or by a doctor on a
patient's behalf) and then moved through the transition table in
``models.appointment`` by their assigned doctor only. The owning patient can
acknowledge an appointment at any status.
"""
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Union
import logging
import re
import uuid

from ..core.exceptions import NotFoundError, ValidationError
from ..core.security import Identity, UserRole, ensure_ownership, ensure_role
from ..core.timeutils import to_utc_naive, utcnow
from ..models.appointment import Appointment, AppointmentStatus, next_status
from ..schemas.appointment import (
    AppointmentCreate, AppointmentDetail, AppointmentStatusUpdate
)
from ..storage.base import Storage
from .enrichment import PartyResolver

logger = logging.getLogger(__name__)

TIME_SLOT_PATTERN = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")
CLINIC_PHONE_PATTERN = re.compile(r"^[+\d][\d\s\-()]{5,19}$")
REASON_MIN_LENGTH = 5
REASON_MAX_LENGTH = 300


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def parse_appointment_date(value: Union[datetime, str]) -> datetime:
    if isinstance(value, datetime):
        return to_utc_naive(value)
    try:
        return to_utc_naive(datetime.fromisoformat(value.strip()))
    except (AttributeError, ValueError) as exc:
        raise ValidationError(
            "Invalid date format. Use ISO string e.g. 2025-09-10T10:30:00Z"
        ) from exc


def validate_time_slot(time_slot: str) -> str:
    if not TIME_SLOT_PATTERN.match(time_slot or ""):
        raise ValidationError("Invalid time format HH:MM")
    return time_slot


def validate_reason(reason: Optional[str]) -> Optional[str]:
    if reason is None or reason == "":
        return None
    reason = reason.strip()
    if len(reason) < REASON_MIN_LENGTH:
        raise ValidationError(f"Reason must be at least {REASON_MIN_LENGTH} characters")
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(f"Reason must be at most {REASON_MAX_LENGTH} characters")
    return reason


def validate_clinic_phone(phone: Optional[str]) -> Optional[str]:
    phone = _clean(phone)
    if phone is not None and not CLINIC_PHONE_PATTERN.match(phone):
        raise ValidationError("Invalid clinicPhone format")
    return phone


class AppointmentService:
    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], datetime] = utcnow,
        clock_skew: timedelta = timedelta(seconds=60),
    ):
        self.storage = storage
        self.clock = clock
        self.clock_skew = clock_skew

    def _get_or_404(self, appointment_id: str) -> Appointment:
        appointment = self.storage.get_appointment(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def create_appointment(self, identity: Identity, data: AppointmentCreate) -> Appointment:
        # Patients can only book for themselves
        if identity.role == UserRole.PATIENT:
            ensure_ownership(
                identity, data.patient_id,
                "You can only book appointments for yourself.",
            )

        now = self.clock()
        scheduled_for = parse_appointment_date(data.date)
        if scheduled_for < now - self.clock_skew:
            raise ValidationError("Date must be in the future")
        time_slot = validate_time_slot(data.time_slot)
        reason = validate_reason(data.reason)

        doctor = self.storage.get_user(data.doctor_id)
        if not doctor or not doctor.is_doctor:
            raise ValidationError("doctorId does not reference a registered doctor")
        patient = self.storage.get_user(data.patient_id)
        if not patient or not patient.is_patient:
            raise ValidationError("patientId does not reference a registered patient")

        appointment = Appointment(
            id=str(uuid.uuid4()),
            patient_id=patient.id,
            doctor_id=doctor.id,
            date=scheduled_for,
            time_slot=time_slot,
            reason=reason,
            status=AppointmentStatus.PENDING,
            patient_notified=False,
            created_at=now,
        )
        appointment = self.storage.create_appointment(appointment)
        logger.info(
            f"Appointment {appointment.id} booked by {identity.id} "
            f"with doctor {doctor.id} for {scheduled_for.isoformat()} {time_slot}"
        )
        return appointment

    def update_status(
        self,
        identity: Identity,
        appointment_id: str,
        data: AppointmentStatusUpdate,
    ) -> Appointment:
        ensure_role(identity, [UserRole.DOCTOR])
        appointment = self._get_or_404(appointment_id)
        ensure_ownership(
            identity, appointment.doctor_id,
            "You can only update the status of your own appointments.",
        )

        requested = AppointmentStatus(data.status)
        doctor_comment = _clean(data.doctor_comment)
        clinic_address = _clean(data.clinic_address)
        clinic_phone = validate_clinic_phone(data.clinic_phone)
        has_details = any(v is not None for v in (doctor_comment, clinic_address, clinic_phone))
        if has_details and requested != AppointmentStatus.CONFIRMED:
            raise ValidationError(
                "doctorComment, clinicAddress and clinicPhone can only be set when confirming"
            )

        previous = AppointmentStatus(appointment.status)
        appointment.status = next_status(previous, requested)
        if requested == AppointmentStatus.CONFIRMED:
            appointment.doctor_comment = doctor_comment
            appointment.clinic_address = clinic_address
            appointment.clinic_phone = clinic_phone

        appointment = self.storage.save_appointment(appointment)
        logger.info(
            f"Appointment {appointment.id} moved {previous.value} -> "
            f"{requested.value} by doctor {identity.id}"
        )
        return appointment

    def acknowledge(self, identity: Identity, appointment_id: str) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        ensure_ownership(identity, appointment.patient_id, "Not allowed")

        if not appointment.patient_notified:
            appointment.patient_notified = True
            appointment = self.storage.save_appointment(appointment)
            logger.info(f"Appointment {appointment.id} acknowledged by patient {identity.id}")
        return appointment

    def list_for_role(self, identity: Identity) -> List[AppointmentDetail]:
        if identity.role == UserRole.DOCTOR:
            appointments = self.storage.list_appointments_by_doctor(identity.id)
        else:
            appointments = self.storage.list_appointments_by_patient(identity.id)

        resolver = PartyResolver(self.storage)
        return [
            resolver.enrich(AppointmentDetail.model_validate(appointment))
            for appointment in appointments
        ]
