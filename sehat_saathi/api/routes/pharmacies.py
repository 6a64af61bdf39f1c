from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.deps import get_pharmacy_service
from ...services.pharmacy_service import PharmacyService
from ...schemas.pharmacy import PharmacyResponse

router = APIRouter(prefix="/pharmacies", tags=["Pharmacies"])


@router.get("", response_model=List[PharmacyResponse])
def list_pharmacies(
    medicine: Optional[str] = Query(None, description="Only pharmacies with this medicine in stock"),
    open_only: bool = Query(False, alias="openOnly"),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    """Public pharmacy directory."""
    return service.list_pharmacies(medicine=medicine, open_only=open_only)


@router.get("/{pharmacy_id}", response_model=PharmacyResponse)
def get_pharmacy(
    pharmacy_id: str,
    service: PharmacyService = Depends(get_pharmacy_service),
):
    return service.get_pharmacy(pharmacy_id)
