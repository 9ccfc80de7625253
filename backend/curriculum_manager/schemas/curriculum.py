"""
Curriculum Manager - Curriculum Schemas
Pydantic schemas for the nested curriculum tree, REST payloads and CSV uploads.

JSON uses camelCase keys (``learningObjectives``, ``totalTime``); Python code
uses the snake_case field names. Both are accepted on input.
"""
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NameStr = Annotated[str, Field(min_length=1, max_length=255)]

DEFAULT_ACTIVITY_TYPE_COLOR = "bg-gray-100 text-gray-800"
DEFAULT_ACTIVITY_TYPE_ICON = "Target"


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Tree Schemas
# ============================================================================

class StandardCodeNode(CamelModel):
    """A single code of a standards framework."""
    id: str
    code: str
    title: str = ""
    description: str = ""
    level: str = ""


class StandardNode(CamelModel):
    """Standards framework with its codes."""
    id: str
    name: str
    description: str | None = None
    codes: list[StandardCodeNode] = []


class ActivityTypeNode(CamelModel):
    """Activity type catalog entry."""
    id: str
    name: str
    description: str | None = None
    color: str = DEFAULT_ACTIVITY_TYPE_COLOR
    icon: str = DEFAULT_ACTIVITY_TYPE_ICON


class ActivityNode(CamelModel):
    id: str
    name: str
    type: str = ""
    duration: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []


class StageNode(CamelModel):
    id: str
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []
    activities: list[ActivityNode] = []


class LessonNode(CamelModel):
    id: str
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []
    stages: list[StageNode] = []


class UnitNode(CamelModel):
    id: str
    name: str
    total_time: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []
    lessons: list[LessonNode] = []


class BookNode(CamelModel):
    id: str
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []
    units: list[UnitNode] = []


class GradeNode(CamelModel):
    id: str
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []
    books: list[BookNode] = []


class CurriculumNode(CamelModel):
    """Curriculum with its full subtree and catalogs."""
    id: str
    name: str
    description: str | None = None
    grades: list[GradeNode] = []
    standards: list[StandardNode] = []
    activity_types: list[ActivityTypeNode] = []


class CurriculumData(CamelModel):
    """The whole curriculum tree, the unit of persistence."""
    curriculums: list[CurriculumNode] = []


# ============================================================================
# Create / Update Schemas
# ============================================================================

class CurriculumCreate(CamelModel):
    name: NameStr
    description: str | None = None


class CurriculumUpdate(CamelModel):
    name: NameStr | None = None
    description: str | None = None


class ContentFields(CamelModel):
    """Optional fields shared by the grade-through-activity levels."""
    learning_objectives: list[str] = []
    standard_codes: list[str] = []


class GradeCreate(ContentFields):
    curriculum_id: str
    name: NameStr
    duration: str = ""


class BookCreate(ContentFields):
    grade_id: str
    name: NameStr
    duration: str = ""


class UnitCreate(ContentFields):
    book_id: str
    name: NameStr
    total_time: str = ""


class LessonCreate(ContentFields):
    unit_id: str
    name: NameStr
    duration: str = ""


class StageCreate(ContentFields):
    lesson_id: str
    name: NameStr
    duration: str = ""


class ActivityCreate(ContentFields):
    stage_id: str
    name: NameStr
    type: str = ""
    duration: str = ""


class NodeUpdate(CamelModel):
    """Partial update for grades, books, lessons and stages."""
    name: NameStr | None = None
    duration: str | None = None
    learning_objectives: list[str] | None = None
    standard_codes: list[str] | None = None


class UnitUpdate(CamelModel):
    name: NameStr | None = None
    total_time: str | None = None
    learning_objectives: list[str] | None = None
    standard_codes: list[str] | None = None


class ActivityUpdate(NodeUpdate):
    type: str | None = None


class StandardCreate(CamelModel):
    curriculum_id: str
    name: NameStr
    description: str | None = None


class StandardUpdate(CamelModel):
    name: NameStr | None = None
    description: str | None = None


class StandardCodeCreate(CamelModel):
    standard_id: str
    code: Annotated[str, Field(min_length=1, max_length=50)]
    title: str = ""
    description: str = ""
    level: str = ""


class StandardCodeUpdate(CamelModel):
    code: Annotated[str, Field(min_length=1, max_length=50)] | None = None
    title: str | None = None
    description: str | None = None
    level: str | None = None


class ActivityTypeCreate(CamelModel):
    curriculum_id: str
    name: NameStr
    description: str | None = None
    color: str = DEFAULT_ACTIVITY_TYPE_COLOR
    icon: str = DEFAULT_ACTIVITY_TYPE_ICON


class ActivityTypeUpdate(CamelModel):
    name: NameStr | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None


class DeleteResponse(BaseModel):
    message: str


# ============================================================================
# Upload Schemas
# ============================================================================

class ParsedActivity(CamelModel):
    name: str
    duration: str = ""
    type: str = ""
    learning_objectives: list[str] = []


class ParsedStage(CamelModel):
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    activities: list[ParsedActivity] = []


class ParsedLesson(CamelModel):
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    stages: list[ParsedStage] = []


class ParsedUnit(CamelModel):
    """Unit as read from CSV; ``duration`` becomes the unit's total time."""
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    lessons: list[ParsedLesson] = []


class ParsedBook(CamelModel):
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    units: list[ParsedUnit] = []


class ParsedGrade(CamelModel):
    name: str
    duration: str = ""
    learning_objectives: list[str] = []
    books: list[ParsedBook] = []


class ParsedCurriculum(CamelModel):
    name: str
    description: str = ""
    grades: list[ParsedGrade] = []


class CurriculumUpload(CamelModel):
    curriculums: list[ParsedCurriculum]


class UploadResults(CamelModel):
    curriculums_created: int = 0
    grades_created: int = 0
    books_created: int = 0
    units_created: int = 0
    lessons_created: int = 0
    stages_created: int = 0
    activities_created: int = 0
    errors: list[str] = []


class UploadResponse(CamelModel):
    message: str
    results: UploadResults


# ============================================================================
# Standards Report Schemas
# ============================================================================

ElementType = Literal["grade", "book", "unit", "lesson", "stage", "activity"]


class StandardMappingEntry(CamelModel):
    """A curriculum element mapped to a standard code."""
    curriculum_id: str
    curriculum_name: str
    grade_id: str
    grade_name: str
    book_id: str | None = None
    book_name: str | None = None
    unit_id: str | None = None
    unit_name: str | None = None
    lesson_id: str | None = None
    lesson_name: str | None = None
    stage_id: str | None = None
    stage_name: str | None = None
    activity_id: str | None = None
    activity_name: str | None = None
    element_type: ElementType


class StandardMapping(CamelModel):
    """One standard code with every element referencing it."""
    standard_id: str
    standard_name: str
    code_id: str
    code: str
    title: str
    level: str
    mappings: list[StandardMappingEntry] = []
