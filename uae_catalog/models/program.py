from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from uae_catalog.database import Base


DEFAULT_PROGRAM_IMAGE = (
    "https://images.unsplash.com/photo-1523050854058-8df90110c9f1"
    "?ixlib=rb-4.0.3&auto=format&fit=crop&w=1200&q=80"
)


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False, index=True)
    degree = Column(String(100), nullable=False)
    duration = Column(String(100), nullable=False)
    tuition = Column(String(100), nullable=False)
    intake = Column(String(255), nullable=False)
    study_field = Column(String(100), nullable=False, index=True)
    requirements = Column(JSON, nullable=False, default=list)
    has_scholarship = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(1024), nullable=False, default=DEFAULT_PROGRAM_IMAGE)

    university = relationship("University", back_populates="programs")

    __table_args__ = (
        UniqueConstraint("university_id", "name", name="uq_program_university_name"),
    )
