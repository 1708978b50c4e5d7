# __init__.py
from uae_catalog.schemas.catalog import ProgramListResponse, ProgramRead, UniversityRead
from uae_catalog.schemas.imports import ImportReport, UniversityProgramCount
from uae_catalog.schemas.records import ProgramRecord, UniversityRecord

__all__ = [
	"ImportReport",
	"ProgramListResponse",
	"ProgramRead",
	"ProgramRecord",
	"UniversityProgramCount",
	"UniversityRead",
	"UniversityRecord",
]
