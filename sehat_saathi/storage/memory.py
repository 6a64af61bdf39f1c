import copy
import threading
from typing import Dict, List, Optional

from sqlalchemy import inspect

from ..core.exceptions import ConflictError
from ..models.appointment import Appointment
from ..models.pharmacy import Pharmacy
from ..models.prescription import Prescription
from ..models.user import User
from .base import Storage


def _clone(obj):
    """Detached copy of an ORM instance built from its column attributes."""
    mapper = inspect(type(obj))
    values = {
        attr.key: copy.deepcopy(getattr(obj, attr.key))
        for attr in mapper.column_attrs
    }
    return type(obj)(**values)


class MemoryStorage(Storage):
    """Process-local store used by the tests and STORAGE_BACKEND=memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._appointments: Dict[str, Appointment] = {}
        self._prescriptions: Dict[str, Prescription] = {}
        self._pharmacies: Dict[str, Pharmacy] = {}

    def _get(self, table: Dict, key: str):
        with self._lock:
            record = table.get(key)
            return _clone(record) if record is not None else None

    def _filter(self, table: Dict, **criteria) -> List:
        with self._lock:
            rows = [
                _clone(record) for record in table.values()
                if all(getattr(record, k) == v for k, v in criteria.items())
            ]
        return sorted(rows, key=lambda r: r.created_at)

    def _put(self, table: Dict, record):
        with self._lock:
            table[record.id] = _clone(record)
        return record

    # Users
    def get_user(self, user_id: str) -> Optional[User]:
        return self._get(self._users, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        matches = self._filter(self._users, email=email)
        return matches[0] if matches else None

    def create_user(self, user: User) -> User:
        with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                raise ConflictError("User already exists")
            self._users[user.id] = _clone(user)
        return user

    def list_doctors(self) -> List[User]:
        return [u for u in self._filter(self._users) if u.is_doctor]

    # Appointments
    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._get(self._appointments, appointment_id)

    def list_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        return self._filter(self._appointments, patient_id=patient_id)

    def list_appointments_by_doctor(self, doctor_id: str) -> List[Appointment]:
        return self._filter(self._appointments, doctor_id=doctor_id)

    def create_appointment(self, appointment: Appointment) -> Appointment:
        return self._put(self._appointments, appointment)

    def save_appointment(self, appointment: Appointment) -> Appointment:
        return self._put(self._appointments, appointment)

    # Prescriptions
    def get_prescription(self, prescription_id: str) -> Optional[Prescription]:
        return self._get(self._prescriptions, prescription_id)

    def list_prescriptions_by_patient(self, patient_id: str) -> List[Prescription]:
        return self._filter(self._prescriptions, patient_id=patient_id)

    def list_prescriptions_by_doctor(self, doctor_id: str) -> List[Prescription]:
        return self._filter(self._prescriptions, doctor_id=doctor_id)

    def create_prescription(self, prescription: Prescription) -> Prescription:
        return self._put(self._prescriptions, prescription)

    # Pharmacies
    def get_pharmacy(self, pharmacy_id: str) -> Optional[Pharmacy]:
        return self._get(self._pharmacies, pharmacy_id)

    def list_pharmacies(self) -> List[Pharmacy]:
        with self._lock:
            rows = [_clone(record) for record in self._pharmacies.values()]
        return sorted(rows, key=lambda p: p.name)

    def create_pharmacy(self, pharmacy: Pharmacy) -> Pharmacy:
        return self._put(self._pharmacies, pharmacy)
