from __future__ import annotations

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from uae_catalog.database import Base


DEFAULT_UNIVERSITY_IMAGE = (
    "https://images.unsplash.com/photo-1541339907198-e08756dedf3f"
    "?ixlib=rb-4.0.3&auto=format&fit=crop&w=1200&q=80"
)


class University(Base):
    __tablename__ = "universities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    location = Column(String(255), nullable=False, default="UAE")
    image_url = Column(String(1024), nullable=False, default=DEFAULT_UNIVERSITY_IMAGE)

    programs = relationship(
        "Program",
        back_populates="university",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
