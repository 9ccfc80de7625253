"""
Curriculum Manager - Curriculum Models
SQLAlchemy models for the Curriculum > Grade > Book > Unit > Lesson > Stage > Activity
hierarchy plus the curriculum-level standards and activity type catalogs
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from curriculum_manager.core.database import Base

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


def generate_id() -> str:
    """Generate a node identifier."""
    return str(uuid.uuid4())


class NodeMixin:
    """Columns shared by every curriculum node."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )


class ContentMixin(NodeMixin):
    """Columns shared by the grade-through-activity levels."""

    name: Mapped[str] = mapped_column(String(255))
    learning_objectives: Mapped[list] = mapped_column(JSONList, default=list)
    standard_codes: Mapped[list] = mapped_column(JSONList, default=list)  # StandardCode ids


class Curriculum(NodeMixin, Base):
    """Top-level curriculum (e.g., KG Curriculum)."""

    __tablename__ = "curriculums"

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Grade(ContentMixin, Base):
    """Grade within a curriculum."""

    __tablename__ = "grades"

    curriculum_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("curriculums.id", ondelete="CASCADE"),
        index=True
    )
    duration: Mapped[str] = mapped_column(String(50), default="")


class Book(ContentMixin, Base):
    """Book within a grade."""

    __tablename__ = "books"

    grade_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("grades.id", ondelete="CASCADE"),
        index=True
    )
    duration: Mapped[str] = mapped_column(String(50), default="")


class Unit(ContentMixin, Base):
    """Unit within a book."""

    __tablename__ = "units"

    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        index=True
    )
    total_time: Mapped[str] = mapped_column(String(50), default="")


class Lesson(ContentMixin, Base):
    """Lesson within a unit."""

    __tablename__ = "lessons"

    unit_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("units.id", ondelete="CASCADE"),
        index=True
    )
    duration: Mapped[str] = mapped_column(String(50), default="")


class Stage(ContentMixin, Base):
    """Lesson stage (Play, Lead, Apply, Yield or free text)."""

    __tablename__ = "stages"

    lesson_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        index=True
    )
    duration: Mapped[str] = mapped_column(String(50), default="")


class Activity(ContentMixin, Base):
    """Activity within a stage."""

    __tablename__ = "activities"

    stage_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stages.id", ondelete="CASCADE"),
        index=True
    )
    type: Mapped[str] = mapped_column(String(255), default="")
    duration: Mapped[str] = mapped_column(String(50), default="")


class Standard(NodeMixin, Base):
    """Standards framework attached to a curriculum (e.g., ISTE Standards)."""

    __tablename__ = "standards"

    curriculum_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("curriculums.id", ondelete="CASCADE"),
        index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class StandardCode(NodeMixin, Base):
    """Individual code within a standards framework."""

    __tablename__ = "standard_codes"

    standard_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("standards.id", ondelete="CASCADE"),
        index=True
    )
    code: Mapped[str] = mapped_column(String(50))
    title: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    level: Mapped[str] = mapped_column(String(50), default="")


class ActivityType(NodeMixin, Base):
    """Curriculum-level activity type catalog entry."""

    __tablename__ = "activity_types"

    curriculum_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("curriculums.id", ondelete="CASCADE"),
        index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(100), default="bg-gray-100 text-gray-800")
    icon: Mapped[str] = mapped_column(String(50), default="Target")
