"""
Curriculum Manager - Remote Curriculum Store
Async tree store proxied to the REST API.

Each mutation sends the minimal payload (ids plus changed fields) and then
reloads the whole tree from ``GET /curriculums``; the local copy is never
patched optimistically. Failures end up in ``error`` instead of raising.
The server addresses nodes by their own id, so the full ancestor chain is
checked against the loaded tree first: an address that does not resolve
is a no-op, as in the local store, and no request is sent.
"""
import logging
from collections.abc import Awaitable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from curriculum_manager.schemas.curriculum import (
    CurriculumData,
    ParsedCurriculum,
    UploadResults,
)
from curriculum_manager.services.api_client import ApiError, CurriculumApiClient
from curriculum_manager.services.tree_store import (
    LEVELS,
    Address,
    NodeKind,
    find_node,
    normalize_fields,
)

logger = logging.getLogger(__name__)

Updates = Mapping[str, Any] | BaseModel


def _payload(kind: NodeKind, fields: Updates) -> dict[str, Any]:
    """Camel-cased request body with only the given fields."""
    return {to_camel(name): value for name, value in normalize_fields(kind, fields).items()}


def _label(kind: NodeKind) -> str:
    return kind.value.replace("_", " ")


class RemoteCurriculumStore:
    """Curriculum tree store backed by the REST API."""

    def __init__(self, client: CurriculumApiClient | None = None):
        self.client = client or CurriculumApiClient()
        self.data = CurriculumData()
        self.loading = False
        self.error: str | None = None

    async def load_curriculums(self) -> None:
        """Replace the local tree with the server's. Also the retry action."""
        self.loading = True
        self.error = None
        try:
            self.data = await self.client.get_curriculums()
        except (ApiError, ValidationError) as e:
            logger.error(f"Error loading curriculum data: {e}")
            self.error = f"Failed to load curriculum data: {getattr(e, 'message', e)}"
        finally:
            self.loading = False

    def _resolves(self, kind: NodeKind, address: Address) -> bool:
        if find_node(self.data, kind, address) is None:
            logger.debug(f"{_label(kind)} not found at {address}, skipping request")
            return False
        return True

    async def _mutate(self, action: str, call: Awaitable[Any]) -> Any | None:
        try:
            result = await call
        except (ApiError, ValidationError) as e:
            logger.error(f"Error trying to {action}: {e}")
            self.error = f"Failed to {action}: {getattr(e, 'message', e)}"
            return None
        await self.load_curriculums()
        return result

    async def _add(self, kind: NodeKind, parent_address: Address, fields: Updates) -> str | None:
        payload = _payload(kind, fields)
        parent = LEVELS[kind].parent
        if parent is not None:
            if not self._resolves(parent, parent_address):
                return None
            payload[f"{to_camel(parent.value)}Id"] = parent_address[-1]

        action = f"add {_label(kind)}"
        created = await self._mutate(action, self.client.create(kind.value, payload))
        if created is None:
            return None
        node_id = created.get("id") if isinstance(created, dict) else None
        if not isinstance(node_id, str):
            logger.error(f"Error trying to {action}: response has no id: {created!r}")
            self.error = f"Failed to {action}: Invalid response"
            return None
        return node_id

    async def _update(self, kind: NodeKind, address: Address, updates: Updates) -> bool:
        payload = _payload(kind, updates)
        if not self._resolves(kind, address):
            return False
        result = await self._mutate(
            f"update {_label(kind)}",
            self.client.update(kind.value, address[-1], payload),
        )
        return result is not None

    async def _delete(self, kind: NodeKind, address: Address) -> bool:
        if not self._resolves(kind, address):
            return False
        result = await self._mutate(
            f"delete {_label(kind)}",
            self.client.delete(kind.value, address[-1]),
        )
        return result is not None

    async def import_curriculums(self, curriculums: list[ParsedCurriculum]) -> UploadResults | None:
        """Send parsed curriculums to the bulk upload endpoint."""
        response = await self._mutate(
            "upload curriculum",
            self.client.upload_curriculums(curriculums),
        )
        return response.results if response else None

    # Curriculum operations
    async def add_curriculum(self, name: str, description: str | None = None) -> str | None:
        return await self._add(NodeKind.CURRICULUM, (), {"name": name, "description": description})

    async def update_curriculum(self, curriculum_id: str, updates: Updates) -> bool:
        return await self._update(NodeKind.CURRICULUM, (curriculum_id,), updates)

    async def delete_curriculum(self, curriculum_id: str) -> bool:
        return await self._delete(NodeKind.CURRICULUM, (curriculum_id,))

    # Grade operations
    async def add_grade(self, curriculum_id: str, name: str, **fields) -> str | None:
        return await self._add(NodeKind.GRADE, (curriculum_id,), {"name": name, **fields})

    async def update_grade(self, curriculum_id: str, grade_id: str, updates: Updates) -> bool:
        return await self._update(NodeKind.GRADE, (curriculum_id, grade_id), updates)

    async def delete_grade(self, curriculum_id: str, grade_id: str) -> bool:
        return await self._delete(NodeKind.GRADE, (curriculum_id, grade_id))

    # Book operations
    async def add_book(self, curriculum_id: str, grade_id: str, name: str, **fields) -> str | None:
        return await self._add(NodeKind.BOOK, (curriculum_id, grade_id), {"name": name, **fields})

    async def update_book(self, curriculum_id: str, grade_id: str, book_id: str, updates: Updates) -> bool:
        return await self._update(NodeKind.BOOK, (curriculum_id, grade_id, book_id), updates)

    async def delete_book(self, curriculum_id: str, grade_id: str, book_id: str) -> bool:
        return await self._delete(NodeKind.BOOK, (curriculum_id, grade_id, book_id))

    # Unit operations
    async def add_unit(
        self, curriculum_id: str, grade_id: str, book_id: str, name: str, **fields
    ) -> str | None:
        return await self._add(NodeKind.UNIT, (curriculum_id, grade_id, book_id), {"name": name, **fields})

    async def update_unit(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, updates: Updates
    ) -> bool:
        return await self._update(NodeKind.UNIT, (curriculum_id, grade_id, book_id, unit_id), updates)

    async def delete_unit(self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str) -> bool:
        return await self._delete(NodeKind.UNIT, (curriculum_id, grade_id, book_id, unit_id))

    # Lesson operations
    async def add_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, name: str, **fields
    ) -> str | None:
        return await self._add(
            NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id), {"name": name, **fields}
        )

    async def update_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        updates: Updates,
    ) -> bool:
        return await self._update(
            NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id, lesson_id), updates
        )

    async def delete_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str
    ) -> bool:
        return await self._delete(NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id, lesson_id))

    # Stage operations
    async def add_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        name: str, **fields,
    ) -> str | None:
        return await self._add(
            NodeKind.STAGE,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id),
            {"name": name, **fields},
        )

    async def update_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, updates: Updates,
    ) -> bool:
        return await self._update(
            NodeKind.STAGE, (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id), updates
        )

    async def delete_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str,
    ) -> bool:
        return await self._delete(
            NodeKind.STAGE, (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id)
        )

    # Activity operations
    async def add_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, name: str, type: str = "", **fields,
    ) -> str | None:
        return await self._add(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id),
            {"name": name, "type": type, **fields},
        )

    async def update_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, activity_id: str, updates: Updates,
    ) -> bool:
        return await self._update(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id, activity_id),
            updates,
        )

    async def delete_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, activity_id: str,
    ) -> bool:
        return await self._delete(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id, activity_id),
        )

    # Standard operations
    async def add_standard(self, curriculum_id: str, name: str, description: str | None = None) -> str | None:
        return await self._add(
            NodeKind.STANDARD, (curriculum_id,), {"name": name, "description": description}
        )

    async def update_standard(self, curriculum_id: str, standard_id: str, updates: Updates) -> bool:
        return await self._update(NodeKind.STANDARD, (curriculum_id, standard_id), updates)

    async def delete_standard(self, curriculum_id: str, standard_id: str) -> bool:
        return await self._delete(NodeKind.STANDARD, (curriculum_id, standard_id))

    # Standard code operations
    async def add_standard_code(
        self, curriculum_id: str, standard_id: str, code: str,
        title: str = "", description: str = "", level: str = "",
    ) -> str | None:
        return await self._add(
            NodeKind.STANDARD_CODE, (curriculum_id, standard_id),
            {"code": code, "title": title, "description": description, "level": level},
        )

    async def update_standard_code(
        self, curriculum_id: str, standard_id: str, code_id: str, updates: Updates
    ) -> bool:
        return await self._update(NodeKind.STANDARD_CODE, (curriculum_id, standard_id, code_id), updates)

    async def delete_standard_code(self, curriculum_id: str, standard_id: str, code_id: str) -> bool:
        return await self._delete(NodeKind.STANDARD_CODE, (curriculum_id, standard_id, code_id))

    # Activity type operations
    async def add_activity_type(
        self, curriculum_id: str, name: str, description: str | None = None,
        color: str | None = None, icon: str | None = None,
    ) -> str | None:
        fields = {"name": name, "description": description}
        if color:
            fields["color"] = color
        if icon:
            fields["icon"] = icon
        return await self._add(NodeKind.ACTIVITY_TYPE, (curriculum_id,), fields)

    async def update_activity_type(self, curriculum_id: str, activity_type_id: str, updates: Updates) -> bool:
        return await self._update(NodeKind.ACTIVITY_TYPE, (curriculum_id, activity_type_id), updates)

    async def delete_activity_type(self, curriculum_id: str, activity_type_id: str) -> bool:
        return await self._delete(NodeKind.ACTIVITY_TYPE, (curriculum_id, activity_type_id))
