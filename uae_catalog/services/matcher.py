# matcher.py
from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from uae_catalog.models.university import University


def _fold(value: str) -> str:
    return value.strip().lower()


class UniversityIndex:
    """Resolve a declared university name to a stored university id.

    Rules are tried in order and the first hit wins: exact, case-insensitive,
    whitespace-trimmed, then bidirectional case-insensitive containment.
    Containment has no ranking; the first university in id order wins.
    """

    def __init__(self, entries: Iterable[tuple[int, str]] = ()) -> None:
        self._entries: list[tuple[int, str]] = []
        for university_id, name in entries:
            self.add(university_id, name)

    @classmethod
    def from_session(cls, db: Session) -> "UniversityIndex":
        rows = db.query(University.id, University.name).order_by(University.id).all()
        return cls((int(row.id), str(row.name)) for row in rows)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, university_id: int, name: str) -> None:
        if any(existing_id == university_id for existing_id, _ in self._entries):
            return
        self._entries.append((university_id, name or ""))

    def match(self, candidate: str | None) -> int | None:
        if candidate is None or not candidate.strip():
            return None

        for university_id, name in self._entries:
            if name == candidate:
                return university_id

        lowered = candidate.lower()
        for university_id, name in self._entries:
            if name.lower() == lowered:
                return university_id

        trimmed = candidate.strip()
        for university_id, name in self._entries:
            if name.strip() == trimmed:
                return university_id

        folded = _fold(candidate)
        for university_id, name in self._entries:
            stored = _fold(name)
            if not stored:
                continue
            if folded in stored or stored in folded:
                return university_id

        return None
