from typing import List, Optional

from fastapi import APIRouter, Depends

from ...api.deps import get_storage, optional_auth
from ...core.security import Identity
from ...schemas.auth import DoctorResponse
from ...storage.base import Storage

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("", response_model=List[DoctorResponse], response_model_exclude_none=True)
def list_doctors(
    identity: Optional[Identity] = Depends(optional_auth),
    storage: Storage = Depends(get_storage),
):
    """Public doctor directory; contact emails are only shown to signed-in users."""
    return [
        DoctorResponse(
            id=doctor.id,
            name=doctor.name,
            specialization=doctor.specialization,
            email=doctor.email if identity else None,
        )
        for doctor in storage.list_doctors()
    ]
