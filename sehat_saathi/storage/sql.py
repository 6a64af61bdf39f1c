from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError
from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.pharmacy import Pharmacy
from ..models.prescription import Prescription
from ..models.user import User
from .base import Storage

logger = logging.getLogger(__name__)


class SQLStorage(Storage):
    """Storage backed by a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, record):
        # One record per transaction
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"Integrity error writing {record!r}: {exc.orig}")
            raise ConflictError("Record conflicts with existing data") from exc
        self.db.refresh(record)
        return record

    # Users
    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, user: User) -> User:
        return self._commit(user)

    def list_doctors(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == UserRole.DOCTOR)
            .order_by(User.created_at)
            .all()
        )

    # Appointments
    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)

    def list_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.created_at)
            .all()
        )

    def list_appointments_by_doctor(self, doctor_id: str) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.created_at)
            .all()
        )

    def create_appointment(self, appointment: Appointment) -> Appointment:
        return self._commit(appointment)

    def save_appointment(self, appointment: Appointment) -> Appointment:
        return self._commit(appointment)

    # Prescriptions
    def get_prescription(self, prescription_id: str) -> Optional[Prescription]:
        return self.db.get(Prescription, prescription_id)

    def list_prescriptions_by_patient(self, patient_id: str) -> List[Prescription]:
        return (
            self.db.query(Prescription)
            .filter(Prescription.patient_id == patient_id)
            .order_by(Prescription.created_at)
            .all()
        )

    def list_prescriptions_by_doctor(self, doctor_id: str) -> List[Prescription]:
        return (
            self.db.query(Prescription)
            .filter(Prescription.doctor_id == doctor_id)
            .order_by(Prescription.created_at)
            .all()
        )

    def create_prescription(self, prescription: Prescription) -> Prescription:
        return self._commit(prescription)

    # Pharmacies
    def get_pharmacy(self, pharmacy_id: str) -> Optional[Pharmacy]:
        return self.db.get(Pharmacy, pharmacy_id)

    def list_pharmacies(self) -> List[Pharmacy]:
        return self.db.query(Pharmacy).order_by(Pharmacy.name).all()

    def create_pharmacy(self, pharmacy: Pharmacy) -> Pharmacy:
        return self._commit(pharmacy)
