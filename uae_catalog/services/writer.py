from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from uae_catalog.models.program import Program
from uae_catalog.models.university import University
from uae_catalog.schemas.imports import ImportReport, UniversityProgramCount
from uae_catalog.schemas.records import ProgramRecord, UniversityRecord


logger = logging.getLogger(__name__)


class CatalogWriter:
    """Idempotent inserts into the catalog tables.

    Universities are keyed on name, programs on (university_id, name). Each
    insert commits on its own so one bad row never rolls back earlier ones.
    """

    def __init__(self, db: Session, report: ImportReport) -> None:
        self.db = db
        self.report = report

    def _find_university_id(self, name: str) -> int | None:
        row = self.db.query(University.id).filter(University.name == name).first()
        return int(row.id) if row else None

    def ensure_university(self, record: UniversityRecord) -> tuple[int | None, bool]:
        """Return (id, created). id is None when the insert failed for a non-duplicate reason."""
        existing_id = self._find_university_id(record.name)
        if existing_id is not None:
            self.report.universities_existing += 1
            return existing_id, False

        university = University(name=record.name, location=record.location, image_url=record.image_url)
        self.db.add(university)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            # Another run may have inserted the same name between our check and insert.
            existing_id = self._find_university_id(record.name)
            if existing_id is not None:
                self.report.universities_existing += 1
                return existing_id, False
            self.report.universities_failed += 1
            logger.error("university.insert_failed name=%s error=%s: %s", record.name, type(exc).__name__, exc)
            return None, False

        self.db.refresh(university)
        self.report.universities_inserted += 1
        logger.info("university.inserted id=%s name=%s", university.id, university.name)
        return int(university.id), True

    def program_exists(self, university_id: int, name: str) -> bool:
        return (
            self.db.query(Program.id)
            .filter(Program.university_id == university_id)
            .filter(Program.name == name)
            .first()
            is not None
        )

    def insert_program(self, record: ProgramRecord, university_id: int) -> bool:
        if self.program_exists(university_id, record.name):
            self.report.programs_skipped_duplicate += 1
            return False

        self.db.add(
            Program(
                name=record.name,
                university_id=university_id,
                degree=record.degree,
                duration=record.duration,
                tuition=record.tuition,
                intake=record.intake,
                study_field=record.study_field,
                requirements=list(record.requirements),
                has_scholarship=record.has_scholarship,
                image_url=record.image_url,
            )
        )
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            # Only a row that now exists makes this a duplicate; FK and other errors fail the record.
            if isinstance(exc, IntegrityError) and self.program_exists(university_id, record.name):
                self.report.programs_skipped_duplicate += 1
                return False
            self.report.programs_failed += 1
            logger.error(
                "program.insert_failed university_id=%s name=%s error=%s: %s",
                university_id,
                record.name,
                type(exc).__name__,
                exc,
            )
            return False

        self.report.programs_inserted += 1
        return True


def reset_catalog(db: Session) -> None:
    """Delete every program and university. Destructive; only reload mode calls this."""
    deleted_programs = db.query(Program).delete(synchronize_session=False)
    deleted_universities = db.query(University).delete(synchronize_session=False)
    db.commit()
    logger.warning(
        "catalog.reset programs_deleted=%s universities_deleted=%s",
        deleted_programs,
        deleted_universities,
    )


def university_program_counts(db: Session) -> list[UniversityProgramCount]:
    program_count = func.count(Program.id).label("program_count")
    rows = (
        db.query(University.id, University.name, program_count)
        .outerjoin(Program, Program.university_id == University.id)
        .group_by(University.id, University.name)
        .order_by(program_count.desc(), University.name)
        .all()
    )
    return [
        UniversityProgramCount(university_id=int(row.id), name=str(row.name), program_count=int(row.program_count))
        for row in rows
    ]
