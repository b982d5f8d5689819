"""Project snapshot persistence."""

from . import project, types

__all__ = ["project", "types"]
