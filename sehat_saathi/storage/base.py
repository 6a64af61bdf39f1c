"""
Storage interface consumed by the services.

Services only ever talk to a ``Storage``; which implementation backs it is
decided by the ``get_storage`` dependency. Records are the ORM classes from
``sehat_saathi.models``. Objects handed out by a store may be mutated freely
by the caller; changes only become visible to other requests once passed
back through ``save_appointment``.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.appointment import Appointment
from ..models.pharmacy import Pharmacy
from ..models.prescription import Prescription
from ..models.user import User


class Storage(ABC):

    # Users
    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def create_user(self, user: User) -> User:
        """Persist a new user; raises ConflictError if the email is taken."""

    @abstractmethod
    def list_doctors(self) -> List[User]:
        ...

    # Appointments
    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    def list_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        ...

    @abstractmethod
    def list_appointments_by_doctor(self, doctor_id: str) -> List[Appointment]:
        ...

    @abstractmethod
    def create_appointment(self, appointment: Appointment) -> Appointment:
        ...

    @abstractmethod
    def save_appointment(self, appointment: Appointment) -> Appointment:
        """Write back a single appointment record."""

    # Prescriptions
    @abstractmethod
    def get_prescription(self, prescription_id: str) -> Optional[Prescription]:
        ...

    @abstractmethod
    def list_prescriptions_by_patient(self, patient_id: str) -> List[Prescription]:
        ...

    @abstractmethod
    def list_prescriptions_by_doctor(self, doctor_id: str) -> List[Prescription]:
        ...

    @abstractmethod
    def create_prescription(self, prescription: Prescription) -> Prescription:
        ...

    # Pharmacies
    @abstractmethod
    def get_pharmacy(self, pharmacy_id: str) -> Optional[Pharmacy]:
        ...

    @abstractmethod
    def list_pharmacies(self) -> List[Pharmacy]:
        """All pharmacies ordered by name."""

    @abstractmethod
    def create_pharmacy(self, pharmacy: Pharmacy) -> Pharmacy:
        ...
