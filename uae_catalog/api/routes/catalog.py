from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from uae_catalog.database import get_db
from uae_catalog.models.program import Program
from uae_catalog.models.university import University
from uae_catalog.schemas.catalog import ProgramListResponse, ProgramRead, UniversityRead


router = APIRouter(tags=["catalog"])


@router.get("/universities", response_model=list[UniversityRead])
def list_universities(db: Session = Depends(get_db)) -> list[UniversityRead]:
    program_count = func.count(Program.id).label("program_count")
    rows = (
        db.query(University, program_count)
        .outerjoin(Program, Program.university_id == University.id)
        .group_by(University.id)
        .order_by(University.name)
        .all()
    )
    out: list[UniversityRead] = []
    for university, count in rows:
        item = UniversityRead.model_validate(university)
        item.program_count = int(count or 0)
        out.append(item)
    return out


@router.get("/programs", response_model=ProgramListResponse)
def list_programs(
    university_id: int | None = Query(default=None),
    degree: str | None = Query(default=None, description="Exact degree label, e.g. Master's Degree"),
    study_field: str | None = Query(default=None),
    q: str | None = Query(default=None, description="Case-insensitive substring search on program name"),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> ProgramListResponse:
    query = db.query(Program)
    if university_id is not None:
        query = query.filter(Program.university_id == university_id)
    if degree:
        query = query.filter(Program.degree == degree)
    if study_field:
        query = query.filter(Program.study_field == study_field)
    if q and q.strip():
        query = query.filter(func.lower(Program.name).contains(q.strip().lower()))

    total = query.count()
    rows = query.order_by(Program.university_id, Program.name).limit(limit).all()
    return ProgramListResponse(items=[ProgramRead.model_validate(row) for row in rows], total=total)
