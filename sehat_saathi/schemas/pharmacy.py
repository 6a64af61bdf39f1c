from typing import Dict, Optional

from .common import CamelModel


class PharmacyResponse(CamelModel):
    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    medicines: Dict[str, int]
    phone: Optional[str] = None
    is_open: bool = True
