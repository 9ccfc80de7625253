"""Curriculum Manager - Models initialization."""
from curriculum_manager.models.curriculum import (
    Activity,
    ActivityType,
    Book,
    Curriculum,
    Grade,
    Lesson,
    Stage,
    Standard,
    StandardCode,
    Unit,
    generate_id,
)


__all__ = [
    # Content hierarchy
    "Curriculum",
    "Grade",
    "Book",
    "Unit",
    "Lesson",
    "Stage",
    "Activity",
    # Curriculum catalogs
    "Standard",
    "StandardCode",
    "ActivityType",
    "generate_id",
]
