"""Map loosely-typed source rows onto the canonical university/program shape.

Every heuristic lives in an ordered rule table so it can be tested on its own:
the first matching rule wins and nothing here is random.
"""
from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping, Sequence

from uae_catalog.models.program import DEFAULT_PROGRAM_IMAGE
from uae_catalog.models.university import DEFAULT_UNIVERSITY_IMAGE
from uae_catalog.schemas.records import ProgramRecord, UniversityRecord


BACHELOR = "Bachelor's Degree"
MASTER = "Master's Degree"
PHD = "PhD"

DEFAULT_TUITION = "35,000 AED/year"
DEFAULT_INTAKE = "September"
DEFAULT_LOCATION = "UAE"
FALLBACK_STUDY_FIELD = "Business & Management"

# canonical field -> raw keys seen across scraper output, spreadsheets and JSON dumps
PROGRAM_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name of Degree", "programName", "program_name", "Program"),
    "university_name": ("universityName", "University name", "university_name", "University", "university"),
    "degree": ("degree", "Degree Level", "degreeLevel", "degree_level"),
    "duration": ("duration", "Duration"),
    "tuition": ("tuition", "Annual Fee", "annualFee", "annual_fee", "Tuition"),
    "intake": ("intake", "Intakes", "intakes", "Intake"),
    "study_field": ("studyField", "Field", "study_field", "field"),
    "requirements": (
        "requirements",
        "General Entry Requirements and Documents",
        "General Entry Requirements",
        "entryRequirements",
        "Requirements",
    ),
    "has_scholarship": ("hasScholarship", "has_scholarship", "Scholarships available", "scholarship", "Scholarship"),
    "image_url": ("imageUrl", "image_url", "Image URL"),
}

UNIVERSITY_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "University name", "universityName", "university_name", "University"),
    "location": ("location", "University city", "city", "Location"),
    "image_url": ("imageUrl", "image_url", "Image URL"),
}

DEGREE_SYNONYMS: dict[str, str] = {
    "undergraduate": BACHELOR,
    "postgraduate": MASTER,
    "postgraduayte": MASTER,
    "doctorate": PHD,
}

# (pattern over lower-cased program name, degree); short abbreviations are word-bounded
DEGREE_NAME_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"master"), MASTER),
    (re.compile(r"\bm\.?sc\b"), MASTER),
    (re.compile(r"\bmba\b"), MASTER),
    (re.compile(r"\bm\.?a\b"), MASTER),
    (re.compile(r"\bph\.?d\b"), PHD),
    (re.compile(r"doctor"), PHD),
)

# (substring of degree, default duration); checked in order, "4 years" otherwise
DURATION_BY_DEGREE: tuple[tuple[str, str], ...] = (
    ("bachelor", "4 years"),
    ("master", "2 years"),
    ("phd", "3-5 years"),
    ("diploma", "1 year"),
    ("certificate", "1 year"),
)
FALLBACK_DURATION = "4 years"

STUDY_FIELD_RULES: tuple[tuple[str, str], ...] = (
    ("engineering", "Engineering"),
    ("computer", "Computer Science & IT"),
    ("software", "Computer Science & IT"),
    ("information technology", "Computer Science & IT"),
    ("technology", "Computer Science & IT"),
    ("data", "Computer Science & IT"),
    ("cyber", "Computer Science & IT"),
    ("medicine", "Medicine & Health"),
    ("health", "Medicine & Health"),
    ("nursing", "Medicine & Health"),
    ("pharmacy", "Medicine & Health"),
    ("medical", "Medicine & Health"),
    ("dental", "Medicine & Health"),
    ("art", "Arts & Humanities"),
    ("design", "Arts & Humanities"),
    ("literature", "Arts & Humanities"),
    ("history", "Arts & Humanities"),
    ("media", "Arts & Humanities"),
)

REQUIREMENTS_BY_DEGREE: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("bachelor", ("High School Certificate", "IELTS 6.0")),
    ("master", ("Bachelor's Degree", "IELTS 6.5", "GPA 3.0")),
    ("phd", ("Master's Degree", "IELTS 7.0", "Research Proposal")),
)
FALLBACK_REQUIREMENTS: tuple[str, ...] = ("High School Certificate", "IELTS 6.0")

_REQUIREMENT_SPLIT_RE = re.compile(r"[,;\n\r]+")
_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")

_SCHOLARSHIP_NEGATIVE_RE = re.compile(r"(?:^|\b)(?:no|none|n/a|false|not|unavailable)(?:\b|$)")
_SCHOLARSHIP_POSITIVE = ("yes", "true", "available", "offered")


def clean_text(value: Any) -> str:
    """Coerce a raw cell to a trimmed string; None/NaN become empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return " ".join(str(value).split())


def pick(raw: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    for key in aliases:
        value = raw.get(key)
        if isinstance(value, (list, tuple)):
            if value:
                return value
            continue
        if isinstance(value, bool):
            return value
        if clean_text(value):
            return value
    return None


def normalize_degree(value: str) -> str:
    text = clean_text(value)
    return DEGREE_SYNONYMS.get(text.lower(), text)


def infer_degree(program_name: str) -> str:
    lowered = clean_text(program_name).lower()
    for pattern, degree in DEGREE_NAME_RULES:
        if pattern.search(lowered):
            return degree
    return BACHELOR


def default_duration(degree: str) -> str:
    lowered = degree.lower()
    for needle, duration in DURATION_BY_DEGREE:
        if needle in lowered:
            return duration
    return FALLBACK_DURATION


def normalize_duration(value: Any, degree: str) -> str:
    text = clean_text(value)
    if not text:
        return default_duration(degree)
    if _NUMBER_RE.match(text):
        number = float(text)
        years = str(int(number)) if number.is_integer() else text
        return "1 year" if years == "1" else f"{years} years"
    return text


def infer_study_field(program_name: str) -> str:
    lowered = clean_text(program_name).lower()
    for keyword, field in STUDY_FIELD_RULES:
        if keyword in lowered:
            return field
    return FALLBACK_STUDY_FIELD


def default_requirements(degree: str) -> list[str]:
    lowered = degree.lower()
    for needle, requirements in REQUIREMENTS_BY_DEGREE:
        if needle in lowered:
            return list(requirements)
    return list(FALLBACK_REQUIREMENTS)


def split_requirements(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items: Iterable[Any] = value
    else:
        items = _REQUIREMENT_SPLIT_RE.split(str(value))
    out: list[str] = []
    for item in items:
        text = clean_text(item)
        if text:
            out.append(text)
    return out


def parse_scholarship(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and not (isinstance(value, float) and math.isnan(value)):
        return value != 0
    text = clean_text(value).lower()
    if not text or text == "0":
        return False
    if _SCHOLARSHIP_NEGATIVE_RE.search(text):
        return False
    if any(pos in text for pos in _SCHOLARSHIP_POSITIVE):
        return True
    # free-text scholarship notes ("25% merit discount") count as offered
    return True


def normalize_program(raw: Mapping[str, Any]) -> ProgramRecord:
    name = clean_text(pick(raw, PROGRAM_FIELD_ALIASES["name"]))
    university_name = clean_text(pick(raw, PROGRAM_FIELD_ALIASES["university_name"]))

    raw_degree = clean_text(pick(raw, PROGRAM_FIELD_ALIASES["degree"]))
    degree = normalize_degree(raw_degree) if raw_degree else infer_degree(name)

    study_field = clean_text(pick(raw, PROGRAM_FIELD_ALIASES["study_field"])) or infer_study_field(name)
    requirements = split_requirements(pick(raw, PROGRAM_FIELD_ALIASES["requirements"])) or default_requirements(degree)

    return ProgramRecord(
        name=name,
        university_name=university_name,
        degree=degree,
        duration=normalize_duration(pick(raw, PROGRAM_FIELD_ALIASES["duration"]), degree),
        tuition=clean_text(pick(raw, PROGRAM_FIELD_ALIASES["tuition"])) or DEFAULT_TUITION,
        intake=clean_text(pick(raw, PROGRAM_FIELD_ALIASES["intake"])) or DEFAULT_INTAKE,
        study_field=study_field,
        requirements=requirements,
        has_scholarship=parse_scholarship(pick(raw, PROGRAM_FIELD_ALIASES["has_scholarship"])),
        image_url=clean_text(pick(raw, PROGRAM_FIELD_ALIASES["image_url"])) or DEFAULT_PROGRAM_IMAGE,
    )


def normalize_university(raw: Mapping[str, Any]) -> UniversityRecord:
    return UniversityRecord(
        name=clean_text(pick(raw, UNIVERSITY_FIELD_ALIASES["name"])),
        location=clean_text(pick(raw, UNIVERSITY_FIELD_ALIASES["location"])) or DEFAULT_LOCATION,
        image_url=clean_text(pick(raw, UNIVERSITY_FIELD_ALIASES["image_url"])) or DEFAULT_UNIVERSITY_IMAGE,
    )


def derive_university_rows(program_rows: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Distinct universities named by flat program rows, in order of first appearance."""
    seen: dict[str, dict[str, str]] = {}
    for row in program_rows:
        name = clean_text(pick(row, PROGRAM_FIELD_ALIASES["university_name"]))
        if not name or name in seen:
            continue
        location = clean_text(pick(row, ("University city", "universityLocation", "city"))) or DEFAULT_LOCATION
        seen[name] = {"name": name, "location": location}
    return list(seen.values())
