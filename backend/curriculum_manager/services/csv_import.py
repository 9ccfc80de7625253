"""
Curriculum Manager - CSV Import/Export
Flat CSV rows (one per activity) to parsed curriculum trees and back.
"""
import csv
import io
import logging
import re
from dataclasses import dataclass, field

from curriculum_manager.schemas.curriculum import (
    CurriculumData,
    ParsedActivity,
    ParsedBook,
    ParsedCurriculum,
    ParsedGrade,
    ParsedLesson,
    ParsedStage,
    ParsedUnit,
)

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Curriculum Name",
    "Curriculum Description",
    "Grade Name",
    "Grade Duration",
    "Grade Learning Objectives",
    "Book Name",
    "Book Duration",
    "Book Learning Objectives",
    "Unit Name",
    "Unit Duration",
    "Unit Learning Objectives",
    "Lesson Name",
    "Lesson Duration",
    "Lesson Learning Objectives",
    "Stage Name",
    "Stage Duration",
    "Stage Learning Objectives",
    "Activity Name",
    "Activity Duration",
    "Activity Type",
    "Activity Learning Objectives",
]

REQUIRED_HEADERS = ("Curriculum Name", "Grade Name")

# Levels folded by name under their parent: (column label, model, parent attribute)
_FOLDED_LEVELS = (
    ("Grade", ParsedGrade, "grades"),
    ("Book", ParsedBook, "books"),
    ("Unit", ParsedUnit, "units"),
    ("Lesson", ParsedLesson, "lessons"),
    ("Stage", ParsedStage, "stages"),
)

_OBJECTIVE_SEPARATORS = re.compile(r"[,;|]")


class CsvFormatError(ValueError):
    """The CSV file is unreadable or lacks required columns."""
    pass


@dataclass
class CsvParseResult:
    curriculums: list[ParsedCurriculum] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def parse_learning_objectives(text: str | None) -> list[str]:
    """Split an objectives cell on ``,``, ``;`` or ``|`` and drop empty entries."""
    if not text or not text.strip():
        return []
    return [part.strip() for part in _OBJECTIVE_SEPARATORS.split(text) if part.strip()]


def _cell(row: dict[str, str | None], header: str) -> str:
    return (row.get(header) or "").strip()


def parse_curriculum_csv(text: str) -> CsvParseResult:
    """
    Fold CSV rows into curriculum trees.

    Rows are grouped by name at every level, so repeated parent columns
    merge into one node; the first row to mention a node sets its duration
    and objectives. Rows without a curriculum name are skipped, rows stop
    at the first empty level name, and every row with an activity name
    appends a new activity.

    Raises:
        CsvFormatError: If the file cannot be parsed or lacks required headers
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    try:
        if reader.fieldnames is None:
            raise CsvFormatError("CSV file is empty")
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        missing = [name for name in REQUIRED_HEADERS if name not in reader.fieldnames]
        if missing:
            raise CsvFormatError(f"Missing required columns: {', '.join(missing)}")
        rows = list(reader)
    except csv.Error as e:
        raise CsvFormatError(f"Error parsing CSV file: {e}") from e

    result = CsvParseResult()
    curriculums: dict[str, ParsedCurriculum] = {}

    for line, row in enumerate(rows, start=2):
        if None in row:
            raise CsvFormatError(f"Line {line} has more fields than the header")

        curriculum_name = _cell(row, "Curriculum Name")
        if not curriculum_name:
            continue

        curriculum = curriculums.get(curriculum_name)
        if curriculum is None:
            curriculum = ParsedCurriculum(
                name=curriculum_name,
                description=_cell(row, "Curriculum Description"),
            )
            curriculums[curriculum_name] = curriculum

        parent = curriculum
        for label, model, collection in _FOLDED_LEVELS:
            name = _cell(row, f"{label} Name")
            duration = _cell(row, f"{label} Duration")
            objectives = parse_learning_objectives(row.get(f"{label} Learning Objectives"))
            siblings = getattr(parent, collection)

            node = next((sibling for sibling in siblings if sibling.name == name), None) if name else None
            if node is None:
                if not name:
                    break
                node = model(name=name, duration=duration, learning_objectives=objectives)
                siblings.append(node)
            elif (duration and duration != node.duration) or (
                objectives and objectives != node.learning_objectives
            ):
                message = (
                    f"Line {line}: {label.lower()} \"{name}\" already defined with different "
                    f"duration or learning objectives; keeping the first values"
                )
                logger.warning(message)
                result.warnings.append(message)
            parent = node
        else:
            activity_name = _cell(row, "Activity Name")
            if activity_name:
                parent.activities.append(ParsedActivity(
                    name=activity_name,
                    duration=_cell(row, "Activity Duration"),
                    type=_cell(row, "Activity Type"),
                    learning_objectives=parse_learning_objectives(row.get("Activity Learning Objectives")),
                ))

    result.curriculums = list(curriculums.values())
    logger.info(f"Parsed {len(result.curriculums)} curriculums from {len(rows)} CSV rows")
    return result


def _join(objectives: list[str]) -> str:
    return "; ".join(objectives)


def export_curriculums_csv(data: CurriculumData) -> str:
    """
    Write the tree in the import format.

    One row per activity; a node without children gets a row of its own so
    nothing is lost on re-import.
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_HEADERS, lineterminator="\n")
    writer.writeheader()

    for curriculum in data.curriculums:
        base = {
            "Curriculum Name": curriculum.name,
            "Curriculum Description": curriculum.description or "",
        }
        if not curriculum.grades:
            writer.writerow(base)
        for grade in curriculum.grades:
            grade_row = {
                **base,
                "Grade Name": grade.name,
                "Grade Duration": grade.duration,
                "Grade Learning Objectives": _join(grade.learning_objectives),
            }
            if not grade.books:
                writer.writerow(grade_row)
            for book in grade.books:
                book_row = {
                    **grade_row,
                    "Book Name": book.name,
                    "Book Duration": book.duration,
                    "Book Learning Objectives": _join(book.learning_objectives),
                }
                if not book.units:
                    writer.writerow(book_row)
                for unit in book.units:
                    unit_row = {
                        **book_row,
                        "Unit Name": unit.name,
                        "Unit Duration": unit.total_time,
                        "Unit Learning Objectives": _join(unit.learning_objectives),
                    }
                    if not unit.lessons:
                        writer.writerow(unit_row)
                    for lesson in unit.lessons:
                        lesson_row = {
                            **unit_row,
                            "Lesson Name": lesson.name,
                            "Lesson Duration": lesson.duration,
                            "Lesson Learning Objectives": _join(lesson.learning_objectives),
                        }
                        if not lesson.stages:
                            writer.writerow(lesson_row)
                        for stage in lesson.stages:
                            stage_row = {
                                **lesson_row,
                                "Stage Name": stage.name,
                                "Stage Duration": stage.duration,
                                "Stage Learning Objectives": _join(stage.learning_objectives),
                            }
                            if not stage.activities:
                                writer.writerow(stage_row)
                            for activity in stage.activities:
                                writer.writerow({
                                    **stage_row,
                                    "Activity Name": activity.name,
                                    "Activity Duration": activity.duration,
                                    "Activity Type": activity.type,
                                    "Activity Learning Objectives": _join(activity.learning_objectives),
                                })
    return output.getvalue()
