"""
Pharmacy directory.

Read-only lookup of pharmacies and their stock. Locations are returned as
stored; distance and map handling belong to the client.
"""
from typing import List, Optional
import logging
import uuid

from ..core.exceptions import NotFoundError
from ..models.pharmacy import Pharmacy
from ..storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_PHARMACIES = [
    {
        "name": "राम मेडिकल स्टोर",
        "address": "Main Market, Jaipur",
        "latitude": 26.9124,
        "longitude": 75.7873,
        "medicines": {"Paracetamol": 50, "ORS": 30, "Crocin": 25},
        "phone": "+91-9876543210",
    },
    {
        "name": "सरस्वती फार्मेसी",
        "address": "Raja Park, Jaipur",
        "latitude": 26.9224,
        "longitude": 75.7973,
        "medicines": {"Paracetamol": 25, "Amoxicillin": 15, "Aspirin": 40},
        "phone": "+91-9876543211",
    },
    {
        "name": "गणेश मेडिकल",
        "address": "Malviya Nagar, Jaipur",
        "latitude": 26.9024,
        "longitude": 75.7773,
        "medicines": {"ORS": 40, "Crocin": 20, "Ibuprofen": 30},
        "phone": "+91-9876543212",
    },
]


class PharmacyService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def list_pharmacies(
        self,
        medicine: Optional[str] = None,
        open_only: bool = False,
    ) -> List[Pharmacy]:
        pharmacies = self.storage.list_pharmacies()
        if open_only:
            pharmacies = [p for p in pharmacies if p.is_open]
        if medicine and medicine.strip():
            pharmacies = [p for p in pharmacies if p.in_stock(medicine)]
        return pharmacies

    def get_pharmacy(self, pharmacy_id: str) -> Pharmacy:
        pharmacy = self.storage.get_pharmacy(pharmacy_id)
        if not pharmacy:
            raise NotFoundError("Pharmacy not found")
        return pharmacy


def seed_pharmacies(storage: Storage) -> int:
    """Load the default directory into an empty store; returns how many were added."""
    if storage.list_pharmacies():
        return 0
    for entry in DEFAULT_PHARMACIES:
        storage.create_pharmacy(Pharmacy(id=str(uuid.uuid4()), is_open=True, **entry))
    logger.info(f"Seeded {len(DEFAULT_PHARMACIES)} pharmacies")
    return len(DEFAULT_PHARMACIES)
