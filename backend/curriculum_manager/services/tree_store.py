"""
Curriculum Manager - Curriculum Tree
In-memory arena of the curriculum hierarchy with path-addressed mutations.

Nodes live in flat per-kind maps keyed by their address: the chain of
ancestor ids ending with the node's own id, e.g. ``(curriculum_id, grade_id)``
for a grade. Each node keeps an ordered list of child ids per child kind, so
an update touches a single record and a delete only walks the removed subtree.
Ids are unique among siblings; the same id may appear under different parents.
"""
import copy
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from curriculum_manager.schemas.curriculum import (
    DEFAULT_ACTIVITY_TYPE_COLOR,
    DEFAULT_ACTIVITY_TYPE_ICON,
    ActivityNode,
    ActivityTypeNode,
    BookNode,
    CurriculumData,
    CurriculumNode,
    GradeNode,
    LessonNode,
    ParsedCurriculum,
    StageNode,
    StandardCodeNode,
    StandardNode,
    UnitNode,
    UploadResults,
)

logger = logging.getLogger(__name__)

Address = tuple[str, ...]


class NodeKind(str, Enum):
    """Entity kinds stored in the tree."""
    CURRICULUM = "curriculum"
    GRADE = "grade"
    BOOK = "book"
    UNIT = "unit"
    LESSON = "lesson"
    STAGE = "stage"
    ACTIVITY = "activity"
    STANDARD = "standard"
    STANDARD_CODE = "standard_code"
    ACTIVITY_TYPE = "activity_type"


_CONTENT_FIELDS = {"learning_objectives": [], "standard_codes": []}


@dataclass(frozen=True)
class LevelShape:
    """How one entity kind hangs off its parent."""
    kind: NodeKind
    parent: NodeKind | None
    collection: str  # attribute holding these nodes on the parent schema
    fields: dict[str, Any]  # editable fields and their defaults
    schema: type[BaseModel]
    children: tuple[NodeKind, ...] = ()


LEVELS: dict[NodeKind, LevelShape] = {
    shape.kind: shape
    for shape in (
        LevelShape(
            NodeKind.CURRICULUM, None, "curriculums",
            {"name": "", "description": None},
            CurriculumNode,
            (NodeKind.GRADE, NodeKind.STANDARD, NodeKind.ACTIVITY_TYPE),
        ),
        LevelShape(
            NodeKind.GRADE, NodeKind.CURRICULUM, "grades",
            {"name": "", "duration": "", **_CONTENT_FIELDS},
            GradeNode,
            (NodeKind.BOOK,),
        ),
        LevelShape(
            NodeKind.BOOK, NodeKind.GRADE, "books",
            {"name": "", "duration": "", **_CONTENT_FIELDS},
            BookNode,
            (NodeKind.UNIT,),
        ),
        LevelShape(
            NodeKind.UNIT, NodeKind.BOOK, "units",
            {"name": "", "total_time": "", **_CONTENT_FIELDS},
            UnitNode,
            (NodeKind.LESSON,),
        ),
        LevelShape(
            NodeKind.LESSON, NodeKind.UNIT, "lessons",
            {"name": "", "duration": "", **_CONTENT_FIELDS},
            LessonNode,
            (NodeKind.STAGE,),
        ),
        LevelShape(
            NodeKind.STAGE, NodeKind.LESSON, "stages",
            {"name": "", "duration": "", **_CONTENT_FIELDS},
            StageNode,
            (NodeKind.ACTIVITY,),
        ),
        LevelShape(
            NodeKind.ACTIVITY, NodeKind.STAGE, "activities",
            {"name": "", "type": "", "duration": "", **_CONTENT_FIELDS},
            ActivityNode,
        ),
        LevelShape(
            NodeKind.STANDARD, NodeKind.CURRICULUM, "standards",
            {"name": "", "description": None},
            StandardNode,
            (NodeKind.STANDARD_CODE,),
        ),
        LevelShape(
            NodeKind.STANDARD_CODE, NodeKind.STANDARD, "codes",
            {"code": "", "title": "", "description": "", "level": ""},
            StandardCodeNode,
        ),
        LevelShape(
            NodeKind.ACTIVITY_TYPE, NodeKind.CURRICULUM, "activity_types",
            {
                "name": "",
                "description": None,
                "color": DEFAULT_ACTIVITY_TYPE_COLOR,
                "icon": DEFAULT_ACTIVITY_TYPE_ICON,
            },
            ActivityTypeNode,
        ),
    )
}

# Kinds along the main content chain, in depth order
CONTENT_CHAIN = (
    NodeKind.CURRICULUM,
    NodeKind.GRADE,
    NodeKind.BOOK,
    NodeKind.UNIT,
    NodeKind.LESSON,
    NodeKind.STAGE,
    NodeKind.ACTIVITY,
)


def lineage(kind: NodeKind) -> tuple[NodeKind, ...]:
    """Kinds from the root down to ``kind``, one per id of its address."""
    kinds = [kind]
    while LEVELS[kinds[-1]].parent is not None:
        kinds.append(LEVELS[kinds[-1]].parent)
    return tuple(reversed(kinds))


def depth_of(kind: NodeKind) -> int:
    """Number of ids in a node address of this kind."""
    return len(lineage(kind))


def find_node(data: CurriculumData, kind: NodeKind, address: Address) -> BaseModel | None:
    """Node at an address in a nested tree, or None when any id along it does not resolve."""
    kinds = lineage(kind)
    if len(address) != len(kinds):
        return None
    node: BaseModel = data
    for level, node_id in zip(kinds, address):
        node = next((n for n in getattr(node, LEVELS[level].collection) if n.id == node_id), None)
        if node is None:
            return None
    return node


def duration_field(kind: NodeKind) -> str | None:
    """Name of the free-text duration field for a kind, if it has one."""
    fields = LEVELS[kind].fields
    if "total_time" in fields:
        return "total_time"
    if "duration" in fields:
        return "duration"
    return None


def normalize_fields(kind: NodeKind, fields: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    """
    Map a partial-fields object onto the kind's snake_case field names.

    Accepts snake_case or camelCase keys, or a pydantic model (only the
    fields explicitly set are kept).

    Raises:
        ValueError: If a key is not an editable field of this kind
    """
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(exclude_unset=True)

    allowed = LEVELS[kind].fields
    camel = {to_camel(name): name for name in allowed}
    normalized = {}
    for key, value in fields.items():
        name = key if key in allowed else camel.get(key)
        if name is None:
            raise ValueError(f"Unknown {kind.value} field: {key}")
        normalized[name] = value
    return normalized


def _checked(kind: NodeKind, record: dict[str, Any]) -> dict[str, Any]:
    """Validate a node record against its schema and return the coerced values."""
    try:
        node = LEVELS[kind].schema.model_validate(record)
    except ValidationError as e:
        raise ValueError(f"Invalid {kind.value} fields: {e}") from e
    return {name: getattr(node, name) for name in record}


class CurriculumTree:
    """Arena storage for the whole curriculum tree."""

    def __init__(self, data: CurriculumData | None = None):
        self._records: dict[NodeKind, dict[Address, dict[str, Any]]] = {}
        self._children: dict[tuple[NodeKind, Address], dict[NodeKind, list[str]]] = {}
        self._roots: list[str] = []
        self.clear()
        if data is not None:
            self.load(data)

    def clear(self) -> None:
        self._records = {kind: {} for kind in NodeKind}
        self._children = {}
        self._roots = []

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def contains(self, kind: NodeKind, address: Address) -> bool:
        return tuple(address) in self._records[kind]

    def get(self, kind: NodeKind, address: Address) -> dict[str, Any] | None:
        """Copy of a node's own fields (no children), or None."""
        record = self._records[kind].get(tuple(address))
        return copy.deepcopy(record) if record is not None else None

    def _siblings(self, kind: NodeKind, parent_address: Address) -> list[str] | None:
        parent = LEVELS[kind].parent
        if parent is None:
            return self._roots
        children = self._children.get((parent, parent_address))
        if children is None:
            return None
        return children[kind]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        kind: NodeKind,
        parent_address: Address,
        fields: Mapping[str, Any] | BaseModel | None = None,
        node_id: str | None = None,
    ) -> str | None:
        """
        Append a new node under the addressed parent.

        Returns:
            The new node id, or None when the parent address does not resolve

        Raises:
            ValueError: If a field is unknown or has the wrong type
        """
        parent_address = tuple(parent_address)
        if len(parent_address) != depth_of(kind) - 1:
            raise ValueError(f"{kind.value} needs {depth_of(kind) - 1} ancestor ids")

        siblings = self._siblings(kind, parent_address)
        if siblings is None:
            logger.debug(f"Parent of {kind.value} not found at {parent_address}, skipping add")
            return None

        shape = LEVELS[kind]
        values = normalize_fields(kind, fields or {})

        if node_id is None or node_id in siblings:
            if node_id is not None:
                logger.warning(f"Duplicate {kind.value} id {node_id!r} under {parent_address}, reassigning")
            node_id = self._new_id(siblings)

        record = _checked(kind, {"id": node_id, **copy.deepcopy(shape.fields), **copy.deepcopy(values)})
        address = parent_address + (node_id,)
        self._records[kind][address] = record
        self._children[(kind, address)] = {child: [] for child in shape.children}
        siblings.append(node_id)
        return node_id

    def update(
        self,
        kind: NodeKind,
        address: Address,
        changes: Mapping[str, Any] | BaseModel,
    ) -> bool:
        """
        Shallow-merge the named fields into the addressed node.

        Returns:
            False (and changes nothing) when the address does not resolve

        Raises:
            ValueError: If a field is unknown or has the wrong type; the
                node is left unchanged
        """
        values = normalize_fields(kind, changes)
        address = tuple(address)
        record = self._records[kind].get(address)
        if record is None:
            logger.debug(f"{kind.value} not found at {address}, skipping update")
            return False
        self._records[kind][address] = _checked(kind, {**record, **copy.deepcopy(values)})
        return True

    def delete(self, kind: NodeKind, address: Address) -> bool:
        """
        Remove the addressed node and its entire subtree.

        Returns:
            False when the address does not resolve
        """
        address = tuple(address)
        if address not in self._records[kind]:
            logger.debug(f"{kind.value} not found at {address}, skipping delete")
            return False
        self._siblings(kind, address[:-1]).remove(address[-1])
        self._drop(kind, address)
        return True

    def _drop(self, kind: NodeKind, address: Address) -> None:
        del self._records[kind][address]
        for child_kind, ids in self._children.pop((kind, address)).items():
            for child_id in ids:
                self._drop(child_kind, address + (child_id,))

    @staticmethod
    def _new_id(siblings: list[str]) -> str:
        node_id = str(uuid.uuid4())
        while node_id in siblings:
            node_id = str(uuid.uuid4())
        return node_id

    # ------------------------------------------------------------------
    # Nested snapshots
    # ------------------------------------------------------------------

    def load(self, data: CurriculumData) -> None:
        """Replace the arena contents with a nested tree."""
        self.clear()
        for curriculum in data.curriculums:
            self._load_node(NodeKind.CURRICULUM, (), curriculum)

    def _load_node(self, kind: NodeKind, parent_address: Address, node: BaseModel) -> None:
        shape = LEVELS[kind]
        fields = {name: getattr(node, name) for name in shape.fields}
        node_id = self.add(kind, parent_address, fields, node_id=node.id)
        address = parent_address + (node_id,)
        for child_kind in shape.children:
            for child in getattr(node, LEVELS[child_kind].collection):
                self._load_node(child_kind, address, child)

    def snapshot(self) -> CurriculumData:
        """Build the nested tree from the arena."""
        curriculums = [
            self._build(NodeKind.CURRICULUM, (curriculum_id,))
            for curriculum_id in self._roots
        ]
        return CurriculumData.model_validate({"curriculums": curriculums})

    def _build(self, kind: NodeKind, address: Address) -> dict[str, Any]:
        node = copy.deepcopy(self._records[kind][address])
        for child_kind, ids in self._children[(kind, address)].items():
            node[LEVELS[child_kind].collection] = [
                self._build(child_kind, address + (child_id,)) for child_id in ids
            ]
        return node

    # ------------------------------------------------------------------
    # Bulk import
    # ------------------------------------------------------------------

    def import_parsed(self, curriculums: list[ParsedCurriculum]) -> UploadResults:
        """Add parsed (CSV) curriculums as new subtrees, one per entry."""
        results = UploadResults()
        for parsed in curriculums:
            self._import_node(NodeKind.CURRICULUM, (), parsed, results)
        return results

    def _import_node(
        self, kind: NodeKind, parent_address: Address, parsed: BaseModel, results: UploadResults
    ) -> None:
        node_id = self.add(kind, parent_address, parsed_fields(kind, parsed))
        count_created(results, kind)
        child_kind = next_level(kind)
        if child_kind is None:
            return
        for child in getattr(parsed, LEVELS[child_kind].collection):
            self._import_node(child_kind, parent_address + (node_id,), child, results)


def next_level(kind: NodeKind) -> NodeKind | None:
    """Kind one level below along the content chain."""
    index = CONTENT_CHAIN.index(kind)
    return CONTENT_CHAIN[index + 1] if index + 1 < len(CONTENT_CHAIN) else None


def parsed_fields(kind: NodeKind, parsed: BaseModel) -> dict[str, Any]:
    """Node fields for a parsed upload entry; a unit's duration is its total time."""
    if kind is NodeKind.CURRICULUM:
        return {"name": parsed.name, "description": parsed.description}
    fields = {
        "name": parsed.name,
        duration_field(kind): parsed.duration,
        "learning_objectives": list(parsed.learning_objectives),
    }
    if kind is NodeKind.ACTIVITY:
        fields["type"] = parsed.type
    return fields


def count_created(results: UploadResults, kind: NodeKind) -> None:
    counter = f"{LEVELS[kind].collection}_created"
    setattr(results, counter, getattr(results, counter) + 1)
