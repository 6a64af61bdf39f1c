from typing import List

from fastapi import APIRouter, Depends, status

from ...api.deps import get_doctor_identity, get_prescription_service, require_auth
from ...core.security import Identity
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import (
    PrescriptionCreate, PrescriptionDetail, PrescriptionResponse
)

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])


@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
def create_prescription(
    prescription_data: PrescriptionCreate,
    identity: Identity = Depends(get_doctor_identity),
    service: PrescriptionService = Depends(get_prescription_service),
):
    return service.create_prescription(identity, prescription_data)


@router.get("", response_model=List[PrescriptionDetail])
def list_prescriptions(
    identity: Identity = Depends(require_auth),
    service: PrescriptionService = Depends(get_prescription_service),
):
    return service.list_for_role(identity)
