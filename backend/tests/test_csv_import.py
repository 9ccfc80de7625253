"""
Curriculum Manager - CSV Import/Export Tests
"""
import pytest

from curriculum_manager.services.csv_import import (
    CSV_HEADERS,
    CsvFormatError,
    export_curriculums_csv,
    parse_curriculum_csv,
    parse_learning_objectives,
)

HEADER = ",".join(CSV_HEADERS)


def _row(**cells: str) -> str:
    """CSV line with the given cells keyed by header name without spaces."""
    values = {header.replace(" ", ""): "" for header in CSV_HEADERS}
    values.update(cells)
    return ",".join(f'"{value}"' for value in values.values())


def test_three_rows_fold_into_one_book_with_three_units():
    text = "\n".join([
        HEADER,
        _row(CurriculumName="Math", GradeName="G1", BookName="B1", UnitName="Numbers"),
        _row(CurriculumName="Math", GradeName="G1", BookName="B1", UnitName="Shapes"),
        _row(CurriculumName="Math", GradeName="G1", BookName="B1", UnitName="Patterns"),
    ])

    result = parse_curriculum_csv(text)

    assert len(result.curriculums) == 1
    grades = result.curriculums[0].grades
    assert len(grades) == 1
    assert len(grades[0].books) == 1
    assert [u.name for u in grades[0].books[0].units] == ["Numbers", "Shapes", "Patterns"]
    assert result.warnings == []


def test_every_row_with_an_activity_adds_one():
    base = dict(
        CurriculumName="Math", GradeName="G1", BookName="B1", UnitName="U1",
        LessonName="L1", StageName="Play",
    )
    text = "\n".join([
        HEADER,
        _row(**base, ActivityName="Sing", ActivityType="Song", ActivityDuration="5 Minutes"),
        _row(**base, ActivityName="Sing", ActivityLearningObjectives="Rhythm; Counting"),
        _row(**base),
    ])

    stage = parse_curriculum_csv(text).curriculums[0].grades[0].books[0].units[0].lessons[0].stages[0]

    assert [a.name for a in stage.activities] == ["Sing", "Sing"]
    assert stage.activities[0].type == "Song"
    assert stage.activities[0].duration == "5 Minutes"
    assert stage.activities[1].learning_objectives == ["Rhythm", "Counting"]


def test_rows_stop_at_first_missing_level():
    text = "\n".join([
        HEADER,
        _row(CurriculumName="Math", GradeName="G1", UnitName="Orphan"),
        _row(GradeName="G2"),
    ])

    result = parse_curriculum_csv(text)

    assert len(result.curriculums) == 1
    assert result.curriculums[0].grades[0].books == []


def test_conflicting_duplicate_names_are_flagged():
    text = "\n".join([
        HEADER,
        _row(CurriculumName="Math", GradeName="G1", GradeDuration="2 Weeks"),
        _row(CurriculumName="Math", GradeName="G1", GradeDuration="3 Weeks"),
        _row(CurriculumName="Math", GradeName="G1"),
    ])

    result = parse_curriculum_csv(text)

    assert result.curriculums[0].grades[0].duration == "2 Weeks"
    assert len(result.warnings) == 1
    assert "Line 3" in result.warnings[0]


def test_missing_required_headers():
    with pytest.raises(CsvFormatError, match="Grade Name"):
        parse_curriculum_csv("Curriculum Name,Book Name\nMath,B1\n")


def test_empty_file():
    with pytest.raises(CsvFormatError):
        parse_curriculum_csv("")


def test_row_with_extra_fields():
    with pytest.raises(CsvFormatError):
        parse_curriculum_csv("Curriculum Name,Grade Name\nMath,G1,extra\n")


def test_parse_learning_objectives():
    assert parse_learning_objectives("Count, Add; Subtract | Compare") == ["Count", "Add", "Subtract", "Compare"]
    assert parse_learning_objectives(" ;, ") == []
    assert parse_learning_objectives("") == []


def test_export_reimports_to_same_structure(sample_tree):
    result = parse_curriculum_csv(export_curriculums_csv(sample_tree))

    curriculum = result.curriculums[0]
    assert curriculum.name == "Math"
    grade = curriculum.grades[0]
    assert (grade.name, grade.duration, grade.learning_objectives) == ("Grade 1", "2 Weeks", ["Count to 100"])
    unit = grade.books[0].units[0]
    assert unit.duration == "3 Hours"
    activity = unit.lessons[0].stages[0].activities[0]
    assert (activity.name, activity.type) == ("Number Song", "Song")
