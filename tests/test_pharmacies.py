import pytest

from sehat_saathi.core.exceptions import NotFoundError
from sehat_saathi.models.pharmacy import Pharmacy
from sehat_saathi.services.pharmacy_service import (
    DEFAULT_PHARMACIES, PharmacyService, seed_pharmacies
)


def add_pharmacy(storage, pharmacy_id, name, medicines, is_open=True):
    return storage.create_pharmacy(
        Pharmacy(
            id=pharmacy_id,
            name=name,
            address="Main Market, Jaipur",
            latitude=26.9124,
            longitude=75.7873,
            medicines=medicines,
            phone="+91-9876543210",
            is_open=is_open,
        )
    )


@pytest.fixture
def stocked(storage):
    add_pharmacy(storage, "ph-1", "Apollo", {"Paracetamol": 50, "ORS": 0})
    add_pharmacy(storage, "ph-2", "Balaji Medicals", {"ors": 12}, is_open=False)
    add_pharmacy(storage, "ph-3", "City Chemist", {"Ibuprofen": 30})
    return storage


class TestPharmacyApi:

    def test_public_listing(self, client, stocked):
        response = client.get("/api/pharmacies")
        assert response.status_code == 200

        data = response.json()
        assert [p["name"] for p in data] == ["Apollo", "Balaji Medicals", "City Chemist"]
        assert data[0] == {
            "id": "ph-1",
            "name": "Apollo",
            "address": "Main Market, Jaipur",
            "latitude": 26.9124,
            "longitude": 75.7873,
            "medicines": {"Paracetamol": 50, "ORS": 0},
            "phone": "+91-9876543210",
            "isOpen": True,
        }

    def test_filter_by_medicine_in_stock(self, client, stocked):
        response = client.get("/api/pharmacies", params={"medicine": " ORS "})
        assert [p["id"] for p in response.json()] == ["ph-2"]

    def test_open_only(self, client, stocked):
        response = client.get("/api/pharmacies", params={"medicine": "ors", "openOnly": "true"})
        assert response.json() == []

        response = client.get("/api/pharmacies", params={"openOnly": "true"})
        assert [p["id"] for p in response.json()] == ["ph-1", "ph-3"]

    def test_get_one(self, client, stocked):
        response = client.get("/api/pharmacies/ph-3")
        assert response.status_code == 200
        assert response.json()["medicines"] == {"Ibuprofen": 30}

    def test_unknown_pharmacy(self, client, stocked):
        response = client.get("/api/pharmacies/missing")
        assert response.status_code == 404
        assert response.json() == {"detail": "Pharmacy not found", "error": "NOT_FOUND"}

    def test_empty_directory(self, client):
        assert client.get("/api/pharmacies").json() == []


class TestPharmacyService:

    def test_get_pharmacy_not_found(self, storage):
        with pytest.raises(NotFoundError):
            PharmacyService(storage).get_pharmacy("missing")

    def test_blank_medicine_filter_is_ignored(self, stocked):
        assert len(PharmacyService(stocked).list_pharmacies(medicine="   ")) == 3

    def test_seed_fills_an_empty_store_once(self, storage):
        assert seed_pharmacies(storage) == len(DEFAULT_PHARMACIES)
        assert seed_pharmacies(storage) == 0

        pharmacies = storage.list_pharmacies()
        assert len(pharmacies) == len(DEFAULT_PHARMACIES)
        assert all(p.is_open for p in pharmacies)
        assert {p.address for p in pharmacies} == {
            "Main Market, Jaipur", "Raja Park, Jaipur", "Malviya Nagar, Jaipur",
        }

    def test_seeded_stock_is_searchable(self, storage):
        seed_pharmacies(storage)
        names = {p.name for p in PharmacyService(storage).list_pharmacies(medicine="crocin")}
        assert names == {"राम मेडिकल स्टोर", "गणेश मेडिकल"}
