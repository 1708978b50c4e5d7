from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from uae_catalog.schemas.imports import ImportReport
from uae_catalog.services.matcher import UniversityIndex
from uae_catalog.services.normalizer import derive_university_rows, normalize_program, normalize_university
from uae_catalog.services.sources import SourceBatch
from uae_catalog.services.writer import CatalogWriter, reset_catalog


logger = logging.getLogger(__name__)


def import_catalog(
    db: Session,
    batch: SourceBatch,
    *,
    derive_universities: bool = False,
    report: ImportReport | None = None,
) -> ImportReport:
    """Additive, idempotent import: normalize -> match -> insert-if-absent.

    With derive_universities, universities named by flat program rows are
    created before matching; otherwise programs only match universities that
    are stored already or listed in batch.universities.
    """
    report = report or ImportReport()
    writer = CatalogWriter(db, report)
    index = UniversityIndex.from_session(db)

    for raw in batch.universities:
        record = normalize_university(raw)
        if not record.name:
            report.universities_incomplete += 1
            continue
        university_id, _ = writer.ensure_university(record)
        if university_id is not None:
            index.add(university_id, record.name)

    if derive_universities:
        for raw in derive_university_rows(batch.programs):
            record = normalize_university(raw)
            # a name the matcher already resolves must not become a second university
            existing_id = index.match(record.name)
            if existing_id is not None:
                report.universities_existing += 1
                continue
            university_id, _ = writer.ensure_university(record)
            if university_id is not None:
                index.add(university_id, record.name)

    for raw in batch.programs:
        record = normalize_program(raw)
        if not record.name or not record.university_name:
            report.programs_incomplete += 1
            continue
        university_id = index.match(record.university_name)
        if university_id is None:
            report.record_unmatched(record.university_name)
            logger.debug("program.unmatched name=%s university=%s", record.name, record.university_name)
            continue
        writer.insert_program(record, university_id)

    logger.info(
        "import.done universities_inserted=%d programs_inserted=%d duplicates=%d unmatched=%d",
        report.universities_inserted,
        report.programs_inserted,
        report.programs_skipped_duplicate,
        report.programs_unmatched,
    )
    return report


def reload_catalog(db: Session, batch: SourceBatch, *, derive_universities: bool = False) -> ImportReport:
    """Destructive reload: clear both catalog tables, then run the additive import."""
    reset_catalog(db)
    report = ImportReport(reset=True)
    return import_catalog(db, batch, derive_universities=derive_universities, report=report)
