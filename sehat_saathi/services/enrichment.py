from typing import Dict, Optional

from ..models.user import User
from ..schemas.common import DoctorSummary, PatientSummary
from ..storage.base import Storage


class PartyResolver:
    """Read-time join of doctor/patient summaries onto records.

    Lookups are cached for the lifetime of the resolver, which is one
    listing call.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._users: Dict[str, Optional[User]] = {}

    def _user(self, user_id: str) -> Optional[User]:
        if user_id not in self._users:
            self._users[user_id] = self.storage.get_user(user_id)
        return self._users[user_id]

    def doctor(self, user_id: str) -> Optional[DoctorSummary]:
        user = self._user(user_id)
        if user is None:
            return None
        return DoctorSummary(id=user.id, name=user.name, specialization=user.specialization)

    def patient(self, user_id: str) -> Optional[PatientSummary]:
        user = self._user(user_id)
        if user is None:
            return None
        return PatientSummary(id=user.id, name=user.name)

    def enrich(self, detail):
        detail.doctor = self.doctor(detail.doctor_id)
        detail.patient = self.patient(detail.patient_id)
        return detail
