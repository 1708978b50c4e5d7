from __future__ import annotations

from pydantic import BaseModel, Field


class UniversityRecord(BaseModel):
    name: str
    location: str = "UAE"
    image_url: str


class ProgramRecord(BaseModel):
    name: str
    university_name: str
    degree: str
    duration: str
    tuition: str
    intake: str
    study_field: str
    requirements: list[str] = Field(default_factory=list)
    has_scholarship: bool = False
    image_url: str
