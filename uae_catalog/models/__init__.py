# __init__.py
from uae_catalog.models.program import Program
from uae_catalog.models.university import University

__all__ = [
	"Program",
	"University",
]
