from typing import List

from fastapi import APIRouter, Depends, status

from ...api.deps import get_appointment_service, get_doctor_identity, require_auth
from ...core.security import Identity
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentDetail, AppointmentResponse, AppointmentStatusUpdate
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    identity: Identity = Depends(require_auth),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; patients may only book for themselves."""
    return service.create_appointment(identity, appointment_data)


@router.get("", response_model=List[AppointmentDetail])
def list_appointments(
    identity: Identity = Depends(require_auth),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments of the caller: by doctor for doctors, by patient otherwise."""
    return service.list_for_role(identity)


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: str,
    status_data: AppointmentStatusUpdate,
    identity: Identity = Depends(get_doctor_identity),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_status(identity, appointment_id, status_data)


@router.post("/{appointment_id}/ack", response_model=AppointmentResponse)
def acknowledge_appointment(
    appointment_id: str,
    identity: Identity = Depends(require_auth),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Patient acknowledges having seen the doctor's update."""
    return service.acknowledge(identity, appointment_id)
