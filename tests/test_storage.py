from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sehat_saathi.core.database import init_db
from sehat_saathi.core.exceptions import ConflictError
from sehat_saathi.core.security import UserRole
from sehat_saathi.models.appointment import Appointment, AppointmentStatus
from sehat_saathi.models.pharmacy import Pharmacy
from sehat_saathi.models.prescription import Prescription
from sehat_saathi.models.user import User
from sehat_saathi.storage.memory import MemoryStorage
from sehat_saathi.storage.sql import SQLStorage

CREATED = datetime(2026, 1, 1, 8, 0, 0)


@pytest.fixture
def sql_storage():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield SQLStorage(session)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_storage(request):
    if request.param == "memory":
        return MemoryStorage()
    return request.getfixturevalue("sql_storage")


def new_user(user_id, email, role=UserRole.PATIENT, specialization=None, offset=0):
    return User(
        id=user_id,
        name=f"User {user_id}",
        email=email,
        password_hash="hash",
        role=role,
        specialization=specialization,
        created_at=CREATED + timedelta(minutes=offset),
    )


def new_appointment(appointment_id, patient_id, doctor_id, offset=0):
    return Appointment(
        id=appointment_id,
        patient_id=patient_id,
        doctor_id=doctor_id,
        date=datetime(2026, 2, 1, 10, 0, 0),
        time_slot="10:00",
        reason=None,
        status=AppointmentStatus.PENDING,
        patient_notified=False,
        created_at=CREATED + timedelta(minutes=offset),
    )


@pytest.fixture
def seeded(any_storage):
    any_storage.create_user(new_user("doc-1", "doc@example.com", UserRole.DOCTOR, "Cardiology", 0))
    any_storage.create_user(new_user("pat-1", "pat@example.com", offset=1))
    any_storage.create_user(new_user("pat-2", "pat2@example.com", offset=2))
    return any_storage


class TestUsers:

    def test_create_and_read(self, seeded):
        user = seeded.get_user("doc-1")
        assert user.email == "doc@example.com"
        assert user.is_doctor
        assert user.specialization == "Cardiology"

        assert seeded.get_user_by_email("pat@example.com").id == "pat-1"
        assert seeded.get_user("missing") is None
        assert seeded.get_user_by_email("missing@example.com") is None

    def test_duplicate_email(self, seeded):
        with pytest.raises(ConflictError):
            seeded.create_user(new_user("pat-3", "pat@example.com"))

    def test_list_doctors(self, seeded):
        seeded.create_user(new_user("doc-2", "doc2@example.com", UserRole.DOCTOR, "ENT", 5))
        assert [d.id for d in seeded.list_doctors()] == ["doc-1", "doc-2"]


class TestAppointments:

    def test_listings_are_scoped_and_ordered(self, seeded):
        seeded.create_appointment(new_appointment("a-2", "pat-1", "doc-1", offset=10))
        seeded.create_appointment(new_appointment("a-1", "pat-1", "doc-1", offset=5))
        seeded.create_appointment(new_appointment("a-3", "pat-2", "doc-1", offset=15))

        assert [a.id for a in seeded.list_appointments_by_patient("pat-1")] == ["a-1", "a-2"]
        assert [a.id for a in seeded.list_appointments_by_doctor("doc-1")] == ["a-1", "a-2", "a-3"]
        assert seeded.list_appointments_by_doctor("pat-1") == []

    def test_save_persists_changes(self, seeded):
        seeded.create_appointment(new_appointment("a-1", "pat-1", "doc-1"))

        appointment = seeded.get_appointment("a-1")
        appointment.status = AppointmentStatus.CONFIRMED
        appointment.clinic_address = "12 MG Road"
        seeded.save_appointment(appointment)

        stored = seeded.get_appointment("a-1")
        assert AppointmentStatus(stored.status) == AppointmentStatus.CONFIRMED
        assert stored.clinic_address == "12 MG Road"
        assert stored.patient_notified is False


class TestPrescriptions:

    def test_medicines_round_trip(self, seeded):
        medicines = [{"name": "Amoxicillin", "dosage": "250mg"}, {"name": "Zinc", "dosage": ""}]
        seeded.create_prescription(
            Prescription(
                id="rx-1", doctor_id="doc-1", patient_id="pat-1",
                medicines=medicines, notes=None, created_at=CREATED,
            )
        )

        stored = seeded.get_prescription("rx-1")
        assert stored.medicines == medicines
        assert stored.appointment_id is None
        assert [p.id for p in seeded.list_prescriptions_by_patient("pat-1")] == ["rx-1"]
        assert [p.id for p in seeded.list_prescriptions_by_doctor("doc-1")] == ["rx-1"]
        assert seeded.list_prescriptions_by_patient("pat-2") == []


class TestMemoryStorageIsolation:

    def test_reads_are_copies(self):
        storage = MemoryStorage()
        storage.create_user(new_user("pat-1", "pat@example.com"))
        storage.create_appointment(new_appointment("a-1", "pat-1", "doc-1"))

        appointment = storage.get_appointment("a-1")
        appointment.status = AppointmentStatus.REJECTED

        assert storage.get_appointment("a-1").status == AppointmentStatus.PENDING

    def test_writes_are_copies(self):
        storage = MemoryStorage()
        medicines = [{"name": "ORS", "dosage": "1 sachet"}]
        prescription = Prescription(
            id="rx-1", doctor_id="doc-1", patient_id="pat-1",
            medicines=medicines, created_at=CREATED,
        )
        storage.create_prescription(prescription)

        medicines.append({"name": "Zinc", "dosage": "10mg"})
        assert len(storage.get_prescription("rx-1").medicines) == 1


class TestPharmacies:

    def test_create_list_and_get(self, any_storage):
        for pharmacy_id, name in (("ph-2", "Zeta Pharmacy"), ("ph-1", "Alpha Medicals")):
            any_storage.create_pharmacy(
                Pharmacy(
                    id=pharmacy_id, name=name, address="Raja Park, Jaipur",
                    latitude=26.9224, longitude=75.7973,
                    medicines={"Aspirin": 40}, phone=None, is_open=True,
                )
            )

        assert [p.id for p in any_storage.list_pharmacies()] == ["ph-1", "ph-2"]

        stored = any_storage.get_pharmacy("ph-2")
        assert stored.medicines == {"Aspirin": 40}
        assert stored.latitude == pytest.approx(26.9224)
        assert stored.is_open is True
        assert any_storage.get_pharmacy("missing") is None
