from datetime import datetime
from typing import Callable, List
import logging
import uuid

from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.security import Identity, UserRole, ensure_ownership, ensure_role
from ..core.timeutils import utcnow
from ..models.appointment import AppointmentStatus
from ..models.prescription import Prescription
from ..schemas.prescription import PrescriptionCreate, PrescriptionDetail
from ..storage.base import Storage
from .enrichment import PartyResolver

logger = logging.getLogger(__name__)

# A prescription can only follow a consultation that actually took place
# or is scheduled.
PRESCRIBABLE_STATUSES = frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED})


class PrescriptionService:
    def __init__(self, storage: Storage, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.clock = clock

    def create_prescription(self, identity: Identity, data: PrescriptionCreate) -> Prescription:
        ensure_role(identity, [UserRole.DOCTOR])
        ensure_ownership(
            identity, data.doctor_id,
            "You can only create prescriptions for your own consultations.",
        )

        if not data.medicines:
            raise ValidationError("At least one medicine is required")
        medicines = []
        for index, medicine in enumerate(data.medicines):
            name = medicine.name.strip()
            if not name:
                raise ValidationError(f"Medicine {index + 1} is missing a name")
            medicines.append({"name": name, "dosage": medicine.dosage.strip()})

        patient = self.storage.get_user(data.patient_id)
        if not patient or not patient.is_patient:
            raise ValidationError("patientId does not reference a registered patient")

        if data.appointment_id:
            appointment = self.storage.get_appointment(data.appointment_id)
            if not appointment:
                raise NotFoundError("Appointment not found")
            if appointment.doctor_id != identity.id:
                raise AuthorizationError(
                    "You can only prescribe for your own appointments."
                )
            if appointment.patient_id != patient.id:
                raise ValidationError("Appointment belongs to a different patient")
            if AppointmentStatus(appointment.status) not in PRESCRIBABLE_STATUSES:
                raise ValidationError(
                    "Prescriptions can only be issued for confirmed or completed appointments"
                )

        prescription = Prescription(
            id=str(uuid.uuid4()),
            appointment_id=data.appointment_id or None,
            doctor_id=identity.id,
            patient_id=patient.id,
            medicines=medicines,
            notes=(data.notes or "").strip() or None,
            created_at=self.clock(),
        )
        prescription = self.storage.create_prescription(prescription)
        logger.info(
            f"Prescription {prescription.id} issued by doctor {identity.id} "
            f"for patient {patient.id} ({len(medicines)} medicines)"
        )
        return prescription

    def _enrich(self, prescriptions: List[Prescription]) -> List[PrescriptionDetail]:
        resolver = PartyResolver(self.storage)
        return [
            resolver.enrich(PrescriptionDetail.model_validate(prescription))
            for prescription in prescriptions
        ]

    def list_for_patient(self, patient_id: str) -> List[PrescriptionDetail]:
        return self._enrich(self.storage.list_prescriptions_by_patient(patient_id))

    def list_for_doctor(self, doctor_id: str) -> List[PrescriptionDetail]:
        return self._enrich(self.storage.list_prescriptions_by_doctor(doctor_id))

    def list_for_role(self, identity: Identity) -> List[PrescriptionDetail]:
        if identity.role == UserRole.DOCTOR:
            return self.list_for_doctor(identity.id)
        return self.list_for_patient(identity.id)
