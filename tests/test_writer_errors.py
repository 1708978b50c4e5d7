from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError

from uae_catalog.models import Program, University
from uae_catalog.services.pipeline import import_catalog
from uae_catalog.services.sources import SourceBatch


def _fail_commit_once(monkeypatch, db, exc: Exception) -> None:
    real_commit = db.commit
    calls = {"n": 0}

    def commit() -> None:
        calls["n"] += 1
        if calls["n"] == 1:
            raise exc
        real_commit()

    monkeypatch.setattr(db, "commit", commit)


def _programs(*names: str) -> SourceBatch:
    return SourceBatch(programs=[{"name": name, "universityName": "Ajman University"} for name in names])


def test_failed_program_insert_does_not_stop_the_run(db, monkeypatch, caplog) -> None:
    db.add(University(name="Ajman University"))
    db.commit()
    _fail_commit_once(monkeypatch, db, OperationalError("INSERT INTO programs", {}, Exception("database is locked")))

    with caplog.at_level(logging.ERROR):
        report = import_catalog(db, _programs("Doctor of Pharmacy", "Bachelor of Dentistry", "MSc Nursing"))

    assert report.programs_failed == 1
    assert report.programs_inserted == 2
    assert sorted(p.name for p in db.query(Program).all()) == ["Bachelor of Dentistry", "MSc Nursing"]
    assert "program.insert_failed" in caplog.text
    assert "Programs failed to insert: 1" in report.render()


def test_integrity_error_without_existing_row_counts_as_failed(db, monkeypatch, caplog) -> None:
    db.add(University(name="Ajman University"))
    db.commit()
    _fail_commit_once(
        monkeypatch, db, IntegrityError("INSERT INTO programs", {}, Exception("FOREIGN KEY constraint failed"))
    )

    with caplog.at_level(logging.ERROR):
        report = import_catalog(db, _programs("Doctor of Pharmacy", "Bachelor of Dentistry"))

    assert report.programs_failed == 1
    assert report.programs_skipped_duplicate == 0
    assert report.programs_inserted == 1
    assert "IntegrityError" in caplog.text


def test_failed_university_insert_leaves_its_programs_unmatched(db, monkeypatch, caplog) -> None:
    _fail_commit_once(monkeypatch, db, OperationalError("INSERT INTO universities", {}, Exception("disk I/O error")))
    batch = SourceBatch(
        universities=[{"name": "Ajman University"}, {"name": "Zayed University"}],
        programs=[
            {"name": "Doctor of Pharmacy", "universityName": "Ajman University"},
            {"name": "Bachelor of Arts", "universityName": "Zayed University"},
        ],
    )

    with caplog.at_level(logging.ERROR):
        report = import_catalog(db, batch)

    assert report.universities_failed == 1
    assert report.universities_inserted == 1
    assert report.programs_inserted == 1
    assert report.unmatched_universities == ["Ajman University"]
    assert "university.insert_failed" in caplog.text
    assert "Universities failed to insert: 1" in report.render()
    assert [u.name for u in db.query(University).all()] == ["Zayed University"]
