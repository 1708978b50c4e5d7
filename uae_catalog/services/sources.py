"""Read pre-extracted university/program datasets (JSON, CSV, spreadsheets).

Usage:
  batch = load_source(Path("data/programs.json"))
  batch.programs[0]["Name of Degree"]

Supported shapes
- .json: an array of flat program objects ("University name", "Name of Degree",
  "Degree Level", "Intakes", ...) or {"universities": [...], "programs": [...]}
  as written by dump_batch().
- .csv: flat program rows.
- .xlsx/.xls: a "Universities" sheet and a "Programs" sheet, matched by name.
"""
from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd


logger = logging.getLogger(__name__)

RawRecord = dict[str, Any]

UNIVERSITY_NAME_COLUMNS = ("name", "University name", "universityName")
PROGRAM_NAME_COLUMNS = ("name", "Name of Degree", "programName")
PROGRAM_UNIVERSITY_COLUMNS = ("universityName", "University name", "university_name")


class SourceFormatError(ValueError):
    pass


@dataclass
class SourceBatch:
    universities: list[RawRecord] = field(default_factory=list)
    programs: list[RawRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.universities) + len(self.programs)


def _frame_records(df: pd.DataFrame) -> list[RawRecord]:
    # NaN cells become None so downstream defaulting sees them as missing
    cleaned = df.astype(object).where(pd.notna(df), None)
    return [dict(row) for row in cleaned.to_dict(orient="records")]


def _has_any_column(df: pd.DataFrame, candidates: tuple[str, ...]) -> bool:
    return any(col in df.columns for col in candidates)


def load_json(path: Path) -> SourceBatch:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise SourceFormatError(f"{path} is not UTF-8 encoded: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SourceFormatError(f"Invalid JSON in {path}: {exc}") from exc
    if isinstance(raw, list):
        return SourceBatch(programs=[dict(item) for item in raw if isinstance(item, dict)])
    if isinstance(raw, dict):
        universities = raw.get("universities")
        programs = raw.get("programs")
        if not isinstance(universities, list) and not isinstance(programs, list):
            logger.warning("source.json_empty path=%s reason=no universities/programs arrays", path)
            return SourceBatch()
        return SourceBatch(
            universities=[dict(item) for item in (universities or []) if isinstance(item, dict)],
            programs=[dict(item) for item in (programs or []) if isinstance(item, dict)],
        )
    raise SourceFormatError(f"Unsupported JSON document in {path}: expected an array or an object")


def load_csv(path: Path) -> SourceBatch:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except UnicodeDecodeError as exc:
        raise SourceFormatError(f"{path} is not UTF-8 encoded: {exc}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise SourceFormatError(f"Unreadable CSV {path}: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    if not _has_any_column(df, PROGRAM_NAME_COLUMNS):
        logger.warning("source.csv_missing_column path=%s expected=%s", path, list(PROGRAM_NAME_COLUMNS))
        return SourceBatch()
    return SourceBatch(programs=_frame_records(df))


def _find_sheet(sheets: dict[str, pd.DataFrame], keyword: str) -> str | None:
    for name in sheets:
        if keyword in str(name).lower():
            return name
    return None


def load_spreadsheet(path: Path) -> SourceBatch:
    try:
        sheets: dict[str, pd.DataFrame] = pd.read_excel(path, sheet_name=None, dtype=object)
    except ImportError as exc:
        # legacy .xls needs the optional xlrd engine
        raise SourceFormatError(f"No Excel reader available for {path.suffix}: {exc}") from exc
    except (ValueError, zipfile.BadZipFile) as exc:
        raise SourceFormatError(f"Unreadable workbook {path}: {exc}") from exc
    logger.info("source.spreadsheet path=%s sheets=%s", path, list(sheets))
    batch = SourceBatch()

    uni_sheet = _find_sheet(sheets, "universit")
    if uni_sheet is None:
        logger.warning("source.sheet_missing path=%s sheet=Universities", path)
    else:
        df = sheets[uni_sheet]
        df.columns = [str(c).strip() for c in df.columns]
        if _has_any_column(df, UNIVERSITY_NAME_COLUMNS):
            batch.universities = _frame_records(df)
        else:
            logger.warning(
                "source.column_missing path=%s sheet=%s expected=%s", path, uni_sheet, list(UNIVERSITY_NAME_COLUMNS)
            )

    program_sheet = _find_sheet(sheets, "program")
    if program_sheet is None:
        logger.warning("source.sheet_missing path=%s sheet=Programs", path)
    else:
        df = sheets[program_sheet]
        df.columns = [str(c).strip() for c in df.columns]
        if _has_any_column(df, PROGRAM_NAME_COLUMNS) and _has_any_column(df, PROGRAM_UNIVERSITY_COLUMNS):
            batch.programs = _frame_records(df)
        else:
            logger.warning(
                "source.column_missing path=%s sheet=%s expected=%s and %s",
                path,
                program_sheet,
                list(PROGRAM_NAME_COLUMNS),
                list(PROGRAM_UNIVERSITY_COLUMNS),
            )

    return batch


def load_source(path: Path) -> SourceBatch:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".json":
        batch = load_json(path)
    elif suffix == ".csv":
        batch = load_csv(path)
    elif suffix in {".xlsx", ".xlsm", ".xls"}:
        batch = load_spreadsheet(path)
    else:
        raise SourceFormatError(f"Unsupported source format: {path.suffix or path.name}")
    logger.info(
        "source.loaded path=%s universities=%d programs=%d", path, len(batch.universities), len(batch.programs)
    )
    return batch


def dump_batch(batch: SourceBatch, path: Path) -> None:
    """Write a batch in the {"universities": [...], "programs": [...]} shape load_json() reads back."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"universities": batch.universities, "programs": batch.programs}
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str) + "\n", encoding="utf-8")
    logger.info("source.dumped path=%s universities=%d programs=%d", path, len(batch.universities), len(batch.programs))
