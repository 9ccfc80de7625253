"""
Curriculum Manager - Path Navigator Tests
"""
import pytest

from curriculum_manager.services.navigator import (
    breadcrumbs,
    child_path,
    parent_path,
    resolve_path,
    view_for_path,
)

STAGE_PATH = ("curriculum", "c1", "grade", "g1", "book", "b1", "unit", "u1", "lesson", "l1", "stage", "s1")


@pytest.mark.parametrize(
    "length, view",
    [(0, "home"), (2, "curriculum"), (4, "grade"), (6, "book"), (8, "unit"), (10, "lesson"), (12, "stage")],
)
def test_view_for_path(length, view):
    assert view_for_path(STAGE_PATH[:length]) == view


def test_resolve_path_returns_addressed_node(sample_tree):
    assert resolve_path(sample_tree, ()) is sample_tree
    assert resolve_path(sample_tree, STAGE_PATH[:4]).name == "Grade 1"
    assert resolve_path(sample_tree, STAGE_PATH).name == "Play"


@pytest.mark.parametrize(
    "path",
    [
        ("curriculum",),
        ("grade", "g1"),
        ("curriculum", "c1", "book", "b1"),
        ("curriculum", "c1", "grade", "nope"),
        STAGE_PATH + ("activity", "a1"),
    ],
)
def test_resolve_path_not_found(sample_tree, path):
    assert resolve_path(sample_tree, path) is None


def test_breadcrumbs_carry_truncated_paths(sample_tree):
    crumbs = breadcrumbs(sample_tree, STAGE_PATH[:6])
    assert [crumb.name for crumb in crumbs] == ["Math", "Grade 1", "Book 1"]
    assert crumbs[1].path == ("curriculum", "c1", "grade", "g1")
    assert crumbs[-1].path == STAGE_PATH[:6]


def test_parent_path(sample_tree):
    assert parent_path(sample_tree, STAGE_PATH[:6]) == STAGE_PATH[:4]
    assert parent_path(sample_tree, STAGE_PATH[:2]) == ()
    assert parent_path(sample_tree, ()) == ()


def test_child_path():
    assert child_path(STAGE_PATH[:2], "grade", "g9") == ("curriculum", "c1", "grade", "g9")
    with pytest.raises(ValueError):
        child_path(STAGE_PATH[:2], "book", "b1")
    with pytest.raises(ValueError):
        child_path(STAGE_PATH, "activity", "a1")
