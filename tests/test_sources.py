from __future__ import annotations

import json
import logging

import pandas as pd
import pytest

from uae_catalog.services.normalizer import normalize_program
from uae_catalog.services.sources import SourceBatch, SourceFormatError, dump_batch, load_source


def test_json_array_is_program_rows(tmp_path) -> None:
    path = tmp_path / "programs.json"
    path.write_text(
        json.dumps(
            [
                {"University name": "Zayed University", "Name of Degree": "Bachelor of Arts", "Degree Level": "Undergraduate"},
                "not a row",
            ]
        ),
        encoding="utf-8",
    )

    batch = load_source(path)

    assert batch.universities == []
    assert len(batch.programs) == 1
    assert batch.programs[0]["Name of Degree"] == "Bachelor of Arts"


def test_json_object_with_both_arrays(tmp_path) -> None:
    path = tmp_path / "scraped.json"
    path.write_text(
        json.dumps({"universities": [{"name": "Khalifa University"}], "programs": [{"name": "MSc Robotics"}]}),
        encoding="utf-8",
    )

    batch = load_source(path)

    assert [u["name"] for u in batch.universities] == ["Khalifa University"]
    assert [p["name"] for p in batch.programs] == ["MSc Robotics"]
    assert len(batch) == 2


def test_json_object_without_arrays_warns(tmp_path, caplog) -> None:
    path = tmp_path / "odd.json"
    path.write_text(json.dumps({"data": []}), encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        batch = load_source(path)

    assert len(batch) == 0
    assert "source.json_empty" in caplog.text


def test_json_scalar_is_rejected(tmp_path) -> None:
    path = tmp_path / "scalar.json"
    path.write_text("42", encoding="utf-8")

    with pytest.raises(SourceFormatError):
        load_source(path)


def test_csv_rows(tmp_path) -> None:
    path = tmp_path / "programs.csv"
    path.write_text(
        "University name,Name of Degree,Duration,Annual Fee\n"
        "Ajman University,Doctor of Pharmacy,5,\"60,000 AED\"\n"
        "Ajman University,Bachelor of Dentistry,,\n",
        encoding="utf-8",
    )

    batch = load_source(path)

    assert len(batch.programs) == 2
    first = normalize_program(batch.programs[0])
    assert first.duration == "5 years"
    assert first.tuition == "60,000 AED"
    second = normalize_program(batch.programs[1])
    assert second.duration == "4 years"
    assert second.tuition == "35,000 AED/year"


def test_csv_without_name_column_warns(tmp_path, caplog) -> None:
    path = tmp_path / "other.csv"
    path.write_text("title,city\nfoo,bar\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        batch = load_source(path)

    assert batch.programs == []
    assert "source.csv_missing_column" in caplog.text


def test_workbook_with_both_sheets(tmp_path) -> None:
    path = tmp_path / "catalog.xlsx"
    universities = pd.DataFrame([{"name": "Khalifa University", "location": "Abu Dhabi"}])
    programs = pd.DataFrame(
        [
            {"name": "MSc Robotics", "universityName": "Khalifa University", "duration": None},
            {"name": "PhD Engineering", "universityName": "Khalifa University", "duration": 4},
        ]
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        universities.to_excel(writer, sheet_name="Universities", index=False)
        programs.to_excel(writer, sheet_name="Programs", index=False)

    batch = load_source(path)

    assert batch.universities == [{"name": "Khalifa University", "location": "Abu Dhabi"}]
    assert len(batch.programs) == 2
    assert batch.programs[0]["duration"] is None
    assert normalize_program(batch.programs[0]).duration == "2 years"
    assert normalize_program(batch.programs[1]).duration == "4 years"


def test_workbook_missing_program_sheet(tmp_path, caplog) -> None:
    path = tmp_path / "universities_only.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([{"name": "Zayed University"}]).to_excel(writer, sheet_name="Universities", index=False)

    with caplog.at_level(logging.WARNING):
        batch = load_source(path)

    assert len(batch.universities) == 1
    assert batch.programs == []
    assert "source.sheet_missing" in caplog.text


def test_workbook_program_sheet_without_university_column(tmp_path, caplog) -> None:
    path = tmp_path / "no_university.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([{"name": "Zayed University"}]).to_excel(writer, sheet_name="Universities", index=False)
        pd.DataFrame([{"name": "Law"}]).to_excel(writer, sheet_name="Programs", index=False)

    with caplog.at_level(logging.WARNING):
        batch = load_source(path)

    assert batch.programs == []
    assert "source.column_missing" in caplog.text


def test_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_source(tmp_path / "nope.json")


def test_unsupported_suffix(tmp_path) -> None:
    path = tmp_path / "programs.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(SourceFormatError):
        load_source(path)


def test_dump_batch_can_be_reloaded(tmp_path) -> None:
    batch = SourceBatch(
        universities=[{"name": "Khalifa University", "location": "Abu Dhabi"}],
        programs=[{"name": "MSc Robotics", "universityName": "Khalifa University", "requirements": ["IELTS 6.5"]}],
    )
    path = tmp_path / "out" / "batch.json"

    dump_batch(batch, path)

    assert load_source(path) == batch


def test_broken_json_is_a_format_error(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SourceFormatError, match="Invalid JSON"):
        load_source(path)


def test_corrupt_workbook_is_a_format_error(tmp_path) -> None:
    path = tmp_path / "corrupt.xlsx"
    path.write_bytes(b"this is not a zip archive")

    with pytest.raises(SourceFormatError):
        load_source(path)


def test_non_utf8_files_are_format_errors(tmp_path) -> None:
    json_path = tmp_path / "latin1.json"
    json_path.write_bytes(b'[{"name": "\xff\xfe"}]')
    csv_path = tmp_path / "latin1.csv"
    csv_path.write_bytes(b"name,University name\nCaf\xe9 Management,Zayed University\n")

    with pytest.raises(SourceFormatError, match="UTF-8"):
        load_source(json_path)
    with pytest.raises(SourceFormatError, match="UTF-8"):
        load_source(csv_path)


def test_csv_decimal_duration(tmp_path) -> None:
    path = tmp_path / "programs.csv"
    path.write_text("University name,Name of Degree,Duration\nZayed University,Bachelor of Arts,4.0\n", encoding="utf-8")

    batch = load_source(path)

    assert normalize_program(batch.programs[0]).duration == "4 years"
