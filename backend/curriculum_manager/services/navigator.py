"""
Curriculum Manager - Path Navigator
Flat navigation paths ``[kind, id, kind, id, ...]`` to nested nodes and back.

The path length selects the view: 0 home, 2 curriculum, 4 grade, 6 book,
8 unit, 10 lesson, 12 stage.
"""
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel

from curriculum_manager.schemas.curriculum import CurriculumData

Path = tuple[str, ...]

PATH_KINDS = ("curriculum", "grade", "book", "unit", "lesson", "stage")

VIEWS = {0: "home", **{2 * (depth + 1): kind for depth, kind in enumerate(PATH_KINDS)}}

# Attribute holding the children of the previous level
_COLLECTIONS = {
    "curriculum": "curriculums",
    "grade": "grades",
    "book": "books",
    "unit": "units",
    "lesson": "lessons",
    "stage": "stages",
}


@dataclass(frozen=True)
class Breadcrumb:
    """Named ancestor and the path that jumps back to it."""
    kind: str
    name: str
    path: Path


def is_valid_path(path: Sequence[str]) -> bool:
    """Even length, at most stage depth, kinds in hierarchy order."""
    if len(path) % 2 or len(path) > 2 * len(PATH_KINDS):
        return False
    return tuple(path[0::2]) == PATH_KINDS[: len(path) // 2]


def view_for_path(path: Sequence[str]) -> str | None:
    """Detail view to render for a path, None for malformed paths."""
    if not is_valid_path(path):
        return None
    return VIEWS[len(path)]


def resolve_chain(data: CurriculumData, path: Sequence[str]) -> list[BaseModel]:
    """Nodes named by the path, stopping at the first id that does not resolve."""
    chain: list[BaseModel] = []
    if not is_valid_path(path):
        return chain

    parent: BaseModel = data
    for index in range(0, len(path), 2):
        kind, node_id = path[index], path[index + 1]
        children = getattr(parent, _COLLECTIONS[kind])
        node = next((child for child in children if child.id == node_id), None)
        if node is None:
            break
        chain.append(node)
        parent = node
    return chain


def resolve_path(data: CurriculumData, path: Sequence[str]) -> BaseModel | None:
    """
    Node addressed by a path.

    The empty path resolves to the whole tree (home view). Returns None
    ("not found") when the path is malformed or any id is absent.
    """
    if not is_valid_path(path):
        return None
    if not path:
        return data
    chain = resolve_chain(data, path)
    if len(chain) * 2 != len(path):
        return None
    return chain[-1]


def breadcrumbs(data: CurriculumData, path: Sequence[str]) -> list[Breadcrumb]:
    """Named ancestors along the path, each with its truncated path."""
    return [
        Breadcrumb(
            kind=path[2 * depth],
            name=node.name,
            path=tuple(path[: 2 * (depth + 1)]),
        )
        for depth, node in enumerate(resolve_chain(data, path))
    ]


def parent_path(data: CurriculumData, path: Sequence[str]) -> Path:
    """Back navigation: the previous breadcrumb, or home."""
    crumbs = breadcrumbs(data, path)
    if len(crumbs) > 1:
        return crumbs[-2].path
    return ()


def child_path(path: Sequence[str], kind: str, node_id: str) -> Path:
    """
    Path for navigating from the current view into one of its children.

    Raises:
        ValueError: If ``kind`` is not the level below the current path
    """
    depth = len(path) // 2
    if not is_valid_path(path) or depth >= len(PATH_KINDS) or PATH_KINDS[depth] != kind:
        raise ValueError(f"Cannot navigate to {kind} from {list(path)}")
    return tuple(path) + (kind, node_id)
