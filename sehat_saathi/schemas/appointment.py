from datetime import datetime
from typing import Optional, Union

from ..models.appointment import AppointmentStatus
from .common import CamelModel, DoctorSummary, PatientSummary


class AppointmentCreate(CamelModel):
    patient_id: str
    doctor_id: str
    # ISO 8601; parsed and range-checked by the appointment service
    date: Union[datetime, str]
    time_slot: str
    reason: Optional[str] = None


class AppointmentStatusUpdate(CamelModel):
    status: AppointmentStatus
    doctor_comment: Optional[str] = None
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: str
    patient_id: str
    doctor_id: str
    date: datetime
    time_slot: str
    reason: Optional[str] = None
    status: AppointmentStatus
    doctor_comment: Optional[str] = None
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    patient_notified: bool = False
    created_at: datetime


class AppointmentDetail(AppointmentResponse):
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None
