"""
Curriculum Manager - Standards Report
Which curriculum elements reference which standard codes.
"""
import csv
import io
from collections.abc import Iterator

from curriculum_manager.schemas.curriculum import (
    CurriculumData,
    CurriculumNode,
    StandardCodeNode,
    StandardMapping,
    StandardMappingEntry,
)

REPORT_HEADERS = [
    "Standard",
    "Code",
    "Title",
    "Level",
    "Curriculum",
    "Grade",
    "Book",
    "Unit",
    "Lesson",
    "Stage",
    "Activity",
    "Element Type",
]


def resolve_standard_codes(curriculum: CurriculumNode, code_ids: list[str]) -> list[StandardCodeNode]:
    """Codes referenced by an element, in reference order; dangling ids are skipped."""
    codes = {code.id: code for standard in curriculum.standards for code in standard.codes}
    return [codes[code_id] for code_id in code_ids if code_id in codes]


def _mapped_elements(curriculum: CurriculumNode, grade_id: str | None) -> Iterator[tuple[list[str], StandardMappingEntry]]:
    """Every element below the curriculum with its standard code ids."""
    for grade in curriculum.grades:
        if grade_id is not None and grade.id != grade_id:
            continue
        ids = {
            "curriculum_id": curriculum.id,
            "curriculum_name": curriculum.name,
            "grade_id": grade.id,
            "grade_name": grade.name,
        }
        yield grade.standard_codes, StandardMappingEntry(**ids, element_type="grade")
        for book in grade.books:
            book_ids = {**ids, "book_id": book.id, "book_name": book.name}
            yield book.standard_codes, StandardMappingEntry(**book_ids, element_type="book")
            for unit in book.units:
                unit_ids = {**book_ids, "unit_id": unit.id, "unit_name": unit.name}
                yield unit.standard_codes, StandardMappingEntry(**unit_ids, element_type="unit")
                for lesson in unit.lessons:
                    lesson_ids = {**unit_ids, "lesson_id": lesson.id, "lesson_name": lesson.name}
                    yield lesson.standard_codes, StandardMappingEntry(**lesson_ids, element_type="lesson")
                    for stage in lesson.stages:
                        stage_ids = {**lesson_ids, "stage_id": stage.id, "stage_name": stage.name}
                        yield stage.standard_codes, StandardMappingEntry(**stage_ids, element_type="stage")
                        for activity in stage.activities:
                            yield activity.standard_codes, StandardMappingEntry(
                                **stage_ids,
                                activity_id=activity.id,
                                activity_name=activity.name,
                                element_type="activity",
                            )


def build_standards_report(
    data: CurriculumData,
    curriculum_id: str | None = None,
    grade_id: str | None = None,
    standard_id: str | None = None,
) -> list[StandardMapping]:
    """
    Map every standard code to the elements that reference it.

    Standards from all curriculums are listed; the curriculum and grade
    filters restrict which elements are searched. Codes that no element
    references are left out.
    """
    elements: list[tuple[list[str], StandardMappingEntry]] = []
    for curriculum in data.curriculums:
        if curriculum_id is not None and curriculum.id != curriculum_id:
            continue
        elements.extend(_mapped_elements(curriculum, grade_id))

    report = []
    for curriculum in data.curriculums:
        for standard in curriculum.standards:
            if standard_id is not None and standard.id != standard_id:
                continue
            for code in standard.codes:
                mappings = [entry for code_ids, entry in elements if code.id in code_ids]
                if not mappings:
                    continue
                report.append(StandardMapping(
                    standard_id=standard.id,
                    standard_name=standard.name,
                    code_id=code.id,
                    code=code.code,
                    title=code.title,
                    level=code.level,
                    mappings=mappings,
                ))
    return report


def standards_report_csv(report: list[StandardMapping]) -> str:
    """One row per mapped element, every cell quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(REPORT_HEADERS)
    for mapping in report:
        for entry in mapping.mappings:
            writer.writerow([
                mapping.standard_name,
                mapping.code,
                mapping.title,
                mapping.level,
                entry.curriculum_name,
                entry.grade_name,
                entry.book_name or "",
                entry.unit_name or "",
                entry.lesson_name or "",
                entry.stage_name or "",
                entry.activity_name or "",
                entry.element_type,
            ])
    return output.getvalue()
