from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DoctorSummary(CamelModel):
    id: str
    name: str
    specialization: Optional[str] = None


class PatientSummary(CamelModel):
    id: str
    name: str
