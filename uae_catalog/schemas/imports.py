from __future__ import annotations

from pydantic import BaseModel, Field


class ImportReport(BaseModel):
    """Counters for one import run, threaded through the pipeline and printed at the end."""

    reset: bool = False
    universities_inserted: int = 0
    universities_existing: int = 0
    universities_incomplete: int = 0
    universities_failed: int = 0
    programs_inserted: int = 0
    programs_skipped_duplicate: int = 0
    programs_unmatched: int = 0
    programs_incomplete: int = 0
    programs_failed: int = 0
    unmatched_universities: list[str] = Field(default_factory=list)

    def record_unmatched(self, university_name: str) -> None:
        self.programs_unmatched += 1
        name = (university_name or "").strip()
        if name not in self.unmatched_universities:
            self.unmatched_universities.append(name)

    def render(self) -> str:
        lines = ["=== Import Summary ==="]
        if self.reset:
            lines.append("Mode: reload (catalog tables were cleared first)")
        else:
            lines.append("Mode: additive")
        lines.append(f"Universities inserted: {self.universities_inserted}")
        lines.append(f"Universities already present: {self.universities_existing}")
        if self.universities_failed:
            lines.append(f"Universities failed to insert: {self.universities_failed}")
        if self.universities_incomplete:
            lines.append(f"Universities skipped (no name): {self.universities_incomplete}")
        lines.append(f"Programs inserted: {self.programs_inserted}")
        lines.append(f"Programs skipped as duplicates: {self.programs_skipped_duplicate}")
        lines.append(f"Programs with unmatched university: {self.programs_unmatched}")
        if self.programs_incomplete:
            lines.append(f"Programs skipped (missing name or university): {self.programs_incomplete}")
        if self.programs_failed:
            lines.append(f"Programs failed to insert: {self.programs_failed}")
        if self.unmatched_universities:
            lines.append("")
            lines.append("Unmatched universities:")
            lines.extend(f"- {name}" for name in self.unmatched_universities)
        return "\n".join(lines)


class UniversityProgramCount(BaseModel):
    university_id: int
    name: str
    program_count: int
