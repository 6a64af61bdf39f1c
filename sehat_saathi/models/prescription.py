from sqlalchemy import Column, String, ForeignKey, DateTime, Text, JSON

from ..core.database import Base
from ..core.timeutils import utcnow


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(String(36), primary_key=True, index=True)
    appointment_id = Column(String(36), ForeignKey("appointments.id"), nullable=True)
    doctor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Ordered list of {"name": ..., "dosage": ...}
    medicines = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Prescription(id={self.id}, doctor_id={self.doctor_id}, patient_id={self.patient_id})>"
