import re
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, field_validator, model_validator

from ..core.security import UserRole
from .common import CamelModel

PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Must include an uppercase letter"),
    (re.compile(r"[a-z]"), "Must include a lowercase letter"),
    (re.compile(r"[0-9]"), "Must include a number"),
    (re.compile(r"[^A-Za-z0-9]"), "Must include a special character"),
)


class UserRegister(CamelModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str
    role: UserRole
    specialization: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(value) > 80:
            raise ValueError("Name too long")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters")
        for pattern, message in PASSWORD_RULES:
            if not pattern.search(value):
                raise ValueError(message)
        return value

    @field_validator("specialization")
    @classmethod
    def blank_specialization_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            value = value.strip()
        return value or None

    @model_validator(mode="after")
    def check_consistency(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        if self.role == UserRole.DOCTOR and not self.specialization:
            raise ValueError("Specialization is required for doctors")
        if self.role == UserRole.PATIENT and self.specialization:
            raise ValueError("Specialization is only allowed for doctors")
        return self


class UserLogin(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    specialization: Optional[str] = None
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    token: str


class DoctorResponse(CamelModel):
    id: str
    name: str
    specialization: Optional[str] = None
    # Only disclosed to signed-in callers
    email: Optional[str] = None
