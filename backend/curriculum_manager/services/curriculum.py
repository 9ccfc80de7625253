"""
Curriculum Manager - Curriculum Service
Database-backed CRUD for the curriculum hierarchy behind the REST API
"""
import logging
from collections import defaultdict
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

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
)
from curriculum_manager.schemas.curriculum import (
    CurriculumData,
    ParsedCurriculum,
    UploadResults,
)
from curriculum_manager.services.tree_store import (
    LEVELS,
    NodeKind,
    count_created,
    next_level,
    parsed_fields,
)

logger = logging.getLogger(__name__)

MODELS = {
    NodeKind.CURRICULUM: Curriculum,
    NodeKind.GRADE: Grade,
    NodeKind.BOOK: Book,
    NodeKind.UNIT: Unit,
    NodeKind.LESSON: Lesson,
    NodeKind.STAGE: Stage,
    NodeKind.ACTIVITY: Activity,
    NodeKind.STANDARD: Standard,
    NodeKind.STANDARD_CODE: StandardCode,
    NodeKind.ACTIVITY_TYPE: ActivityType,
}

# Foreign key column pointing at the parent row
PARENT_COLUMNS = {
    NodeKind.GRADE: "curriculum_id",
    NodeKind.BOOK: "grade_id",
    NodeKind.UNIT: "book_id",
    NodeKind.LESSON: "unit_id",
    NodeKind.STAGE: "lesson_id",
    NodeKind.ACTIVITY: "stage_id",
    NodeKind.STANDARD: "curriculum_id",
    NodeKind.STANDARD_CODE: "standard_id",
    NodeKind.ACTIVITY_TYPE: "curriculum_id",
}


class ParentNotFoundError(LookupError):
    """The parent a new node should attach to does not exist."""
    pass


def node_to_dict(kind: NodeKind, row: Any) -> dict[str, Any]:
    """Own fields of a row with camelCase keys, as sent over the API."""
    node = {"id": row.id}
    for name in LEVELS[kind].fields:
        node[to_camel(name)] = getattr(row, name)
    return node


class CurriculumService:
    """Service for curriculum tree persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_tree(self) -> CurriculumData:
        """
        Load every table and fold the rows into the nested tree.

        Children are ordered by ``display_order`` (insertion order).
        """
        rows: dict[NodeKind, list[Any]] = {}
        for kind, model in MODELS.items():
            result = await self.db.execute(
                select(model).order_by(model.display_order, model.created_at)
            )
            rows[kind] = list(result.scalars().all())

        by_parent: dict[NodeKind, dict[str, list[Any]]] = defaultdict(lambda: defaultdict(list))
        for kind, column in PARENT_COLUMNS.items():
            for row in rows[kind]:
                by_parent[kind][getattr(row, column)].append(row)

        def build(kind: NodeKind, row: Any) -> dict[str, Any]:
            node = node_to_dict(kind, row)
            for child_kind in LEVELS[kind].children:
                node[LEVELS[child_kind].collection] = [
                    build(child_kind, child) for child in by_parent[child_kind][row.id]
                ]
            return node

        return CurriculumData.model_validate({
            "curriculums": [build(NodeKind.CURRICULUM, row) for row in rows[NodeKind.CURRICULUM]]
        })

    async def _next_display_order(self, kind: NodeKind, parent_id: str | None) -> int:
        model = MODELS[kind]
        query = select(func.max(model.display_order))
        if parent_id is not None:
            query = query.where(getattr(model, PARENT_COLUMNS[kind]) == parent_id)
        result = await self.db.execute(query)
        current = result.scalar()
        return 0 if current is None else current + 1

    async def _insert(self, kind: NodeKind, fields: dict[str, Any], parent_id: str | None = None) -> Any:
        model = MODELS[kind]
        if parent_id is not None:
            fields[PARENT_COLUMNS[kind]] = parent_id
        row = model(**fields, display_order=await self._next_display_order(kind, parent_id))
        self.db.add(row)
        await self.db.flush()
        return row

    async def create_node(self, kind: NodeKind, payload: BaseModel) -> dict[str, Any]:
        """
        Create a node from a ``*Create`` schema.

        Raises:
            ParentNotFoundError: If the referenced parent does not exist
        """
        fields = payload.model_dump()
        parent_id = None
        if kind in PARENT_COLUMNS:
            parent_id = fields.pop(PARENT_COLUMNS[kind])
            parent_kind = LEVELS[kind].parent
            if await self.db.get(MODELS[parent_kind], parent_id) is None:
                raise ParentNotFoundError(f"{parent_kind.value.capitalize()} not found")

        row = await self._insert(kind, fields, parent_id)
        logger.info(f"Created {kind.value} {row.id}")
        node = node_to_dict(kind, row)
        if parent_id is not None:
            node[to_camel(PARENT_COLUMNS[kind])] = parent_id
        return node

    async def update_node(self, kind: NodeKind, node_id: str, payload: BaseModel) -> dict[str, Any] | None:
        """
        Apply only the fields present in the payload.

        Returns:
            The updated node, or None when no such node exists
        """
        row = await self.db.get(MODELS[kind], node_id)
        if row is None:
            logger.debug(f"{kind.value} {node_id} not found, skipping update")
            return None

        for name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, name, value)
        await self.db.flush()
        return node_to_dict(kind, row)

    async def delete_node(self, kind: NodeKind, node_id: str) -> bool:
        """
        Delete a node and its whole subtree.

        Returns:
            False when no such node exists
        """
        if await self.db.get(MODELS[kind], node_id) is None:
            logger.debug(f"{kind.value} {node_id} not found, skipping delete")
            return False
        await self._delete_subtree(kind, [node_id])
        logger.info(f"Deleted {kind.value} {node_id}")
        return True

    async def _delete_subtree(self, kind: NodeKind, ids: list[str]) -> None:
        for child_kind in LEVELS[kind].children:
            child_model = MODELS[child_kind]
            result = await self.db.execute(
                select(child_model.id).where(getattr(child_model, PARENT_COLUMNS[child_kind]).in_(ids))
            )
            child_ids = list(result.scalars().all())
            if child_ids:
                await self._delete_subtree(child_kind, child_ids)

        model = MODELS[kind]
        await self.db.execute(delete(model).where(model.id.in_(ids)))

    async def upload(self, curriculums: list[ParsedCurriculum]) -> UploadResults:
        """
        Import parsed curriculums, each as a brand new subtree.

        Every entry runs in its own savepoint: a failing entry is rolled back
        completely and reported in ``errors`` while the others are kept.
        """
        results = UploadResults()
        for parsed in curriculums:
            counts = UploadResults()
            try:
                async with self.db.begin_nested():
                    await self._import_node(NodeKind.CURRICULUM, None, parsed, counts)
            except SQLAlchemyError as e:
                logger.error(f"Error processing curriculum {parsed.name}: {e}")
                results.errors.append(f'Failed to process curriculum "{parsed.name}": {e}')
                continue

            for field, value in counts.model_dump(exclude={"errors"}).items():
                setattr(results, field, getattr(results, field) + value)
        return results

    async def _import_node(
        self, kind: NodeKind, parent_id: str | None, parsed: BaseModel, counts: UploadResults
    ) -> None:
        row = await self._insert(kind, parsed_fields(kind, parsed), parent_id)
        count_created(counts, kind)
        child_kind = next_level(kind)
        if child_kind is None:
            return
        for child in getattr(parsed, LEVELS[child_kind].collection):
            await self._import_node(child_kind, row.id, child, counts)

    async def restore(self, data: CurriculumData) -> None:
        """Insert a nested tree keeping its ids (used for seeding)."""
        for curriculum in data.curriculums:
            await self._restore_node(NodeKind.CURRICULUM, None, curriculum)

    async def _restore_node(self, kind: NodeKind, parent_id: str | None, node: BaseModel) -> None:
        fields = {name: getattr(node, name) for name in LEVELS[kind].fields}
        fields["id"] = node.id
        await self._insert(kind, fields, parent_id)
        for child_kind in LEVELS[kind].children:
            for child in getattr(node, LEVELS[child_kind].collection):
                await self._restore_node(child_kind, node.id, child)
