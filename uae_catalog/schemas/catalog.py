# catalog.py
from pydantic import BaseModel, ConfigDict


class UniversityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    image_url: str
    program_count: int = 0


class ProgramRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    university_id: int
    degree: str
    duration: str
    tuition: str
    intake: str
    study_field: str
    requirements: list[str]
    has_scholarship: bool
    image_url: str


class ProgramListResponse(BaseModel):
    items: list[ProgramRead]
    total: int
