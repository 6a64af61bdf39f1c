from sqlalchemy import Column, String, Float, Boolean, JSON

from ..core.database import Base


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    # Stock on hand: {"Paracetamol": 50, "ORS": 30}
    medicines = Column(JSON, nullable=False, default=dict)
    phone = Column(String(20), nullable=True)
    is_open = Column(Boolean, nullable=False, default=True)

    def in_stock(self, medicine: str) -> bool:
        wanted = medicine.strip().lower()
        return any(
            name.lower() == wanted and quantity > 0
            for name, quantity in (self.medicines or {}).items()
        )

    def __repr__(self):
        return f"<Pharmacy(id={self.id}, name='{self.name}', is_open={self.is_open})>"
