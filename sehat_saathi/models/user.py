from sqlalchemy import Column, String, DateTime, Enum as SQLEnum

from ..core.database import Base
from ..core.security import UserRole
from ..core.timeutils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(80), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
    )
    # Only set for doctors
    specialization = Column(String(120), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
