from datetime import datetime
from typing import List, Optional

from .common import CamelModel, DoctorSummary, PatientSummary


class Medicine(CamelModel):
    name: str
    dosage: str = ""


class PrescriptionCreate(CamelModel):
    doctor_id: str
    patient_id: str
    appointment_id: Optional[str] = None
    medicines: List[Medicine]
    notes: Optional[str] = None


class PrescriptionResponse(CamelModel):
    id: str
    appointment_id: Optional[str] = None
    doctor_id: str
    patient_id: str
    medicines: List[Medicine]
    notes: Optional[str] = None
    created_at: datetime


class PrescriptionDetail(PrescriptionResponse):
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None
