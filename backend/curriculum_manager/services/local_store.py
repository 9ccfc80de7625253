"""
Curriculum Manager - Local Curriculum Store
Synchronous tree store mirrored to a local key-value storage file.

Every mutation is applied in memory and the whole tree is then written as
one JSON blob under a single key. Storage failures are logged and the
in-memory tree stays authoritative.
"""
import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from curriculum_manager.core.config import settings
from curriculum_manager.schemas.curriculum import (
    DEFAULT_ACTIVITY_TYPE_COLOR,
    DEFAULT_ACTIVITY_TYPE_ICON,
    CurriculumData,
    ParsedCurriculum,
    UploadResults,
)
from curriculum_manager.scripts.seed_curriculum import initial_curriculum_data
from curriculum_manager.services.tree_store import CurriculumTree, NodeKind

logger = logging.getLogger(__name__)

Updates = Mapping[str, Any] | BaseModel


class StorageError(Exception):
    """Local storage could not be read or written."""
    pass


class StorageQuotaExceededError(StorageError):
    """Writing would exceed the storage quota."""
    pass


class JsonFileStorage:
    """
    String key-value storage kept as one JSON object on disk.

    Mirrors the browser local-storage contract: ``get_item`` / ``set_item`` /
    ``remove_item`` on string values, with an optional quota on the total
    serialized size.
    """

    def __init__(self, path: str | Path, quota_bytes: int | None = None):
        self.path = Path(path)
        self.quota_bytes = quota_bytes

    def _read_all(self) -> dict[str, str]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not content.strip():
            return {}
        try:
            items = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt storage file {self.path}: {e}") from e
        if not isinstance(items, dict):
            raise StorageError(f"Corrupt storage file {self.path}: expected an object")
        return items

    def _write_all(self, items: dict[str, str]) -> None:
        content = json.dumps(items)
        size = len(content.encode("utf-8"))
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Storage quota exceeded ({size} > {self.quota_bytes} bytes)"
            )

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


def default_storage() -> JsonFileStorage:
    """Storage configured from settings."""
    return JsonFileStorage(settings.LOCAL_STORE_PATH, quota_bytes=settings.STORAGE_QUOTA_BYTES)


class LocalCurriculumStore:
    """Curriculum tree store backed by local key-value storage."""

    def __init__(
        self,
        storage: JsonFileStorage | None = None,
        key: str | None = None,
        initial_data: CurriculumData | None = None,
    ):
        self.storage = storage or default_storage()
        self.key = key or settings.LOCAL_STORE_KEY
        self.tree = CurriculumTree(self._read(initial_data))

    @property
    def data(self) -> CurriculumData:
        """Nested snapshot of the current tree."""
        return self.tree.snapshot()

    def _read(self, initial_data: CurriculumData | None) -> CurriculumData:
        fallback = initial_data if initial_data is not None else initial_curriculum_data()
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as e:
            logger.error(f"Error loading curriculum data from local storage: {e}")
            return fallback
        if not raw:
            return fallback

        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict) or not isinstance(payload.get("curriculums"), list):
                logger.warning("Stored curriculum data has no curriculums list, using defaults")
                return fallback
            # Missing standards / activityTypes default to empty lists
            return CurriculumData.model_validate(payload)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error loading curriculum data from local storage: {e}")
            return fallback

    def _persist(self) -> None:
        try:
            self.storage.set_item(self.key, self.tree.snapshot().model_dump_json(by_alias=True))
        except (StorageError, ValueError) as e:
            logger.error(f"Error saving curriculum data to local storage: {e}")

    def _add(self, kind: NodeKind, parent_address: tuple[str, ...], fields: Updates) -> str | None:
        node_id = self.tree.add(kind, parent_address, fields)
        if node_id is not None:
            self._persist()
        return node_id

    def _update(self, kind: NodeKind, address: tuple[str, ...], updates: Updates) -> bool:
        changed = self.tree.update(kind, address, updates)
        if changed:
            self._persist()
        return changed

    def _delete(self, kind: NodeKind, address: tuple[str, ...]) -> bool:
        deleted = self.tree.delete(kind, address)
        if deleted:
            self._persist()
        return deleted

    def import_curriculums(self, curriculums: list[ParsedCurriculum]) -> UploadResults:
        """Bulk-add parsed curriculums, persisting once."""
        results = self.tree.import_parsed(curriculums)
        self._persist()
        return results

    # Curriculum operations
    def add_curriculum(self, name: str, description: str | None = None) -> str:
        return self._add(NodeKind.CURRICULUM, (), {"name": name, "description": description})

    def update_curriculum(self, curriculum_id: str, updates: Updates) -> bool:
        return self._update(NodeKind.CURRICULUM, (curriculum_id,), updates)

    def delete_curriculum(self, curriculum_id: str) -> bool:
        return self._delete(NodeKind.CURRICULUM, (curriculum_id,))

    # Grade operations
    def add_grade(self, curriculum_id: str, name: str, **fields) -> str | None:
        return self._add(NodeKind.GRADE, (curriculum_id,), {"name": name, **fields})

    def update_grade(self, curriculum_id: str, grade_id: str, updates: Updates) -> bool:
        return self._update(NodeKind.GRADE, (curriculum_id, grade_id), updates)

    def delete_grade(self, curriculum_id: str, grade_id: str) -> bool:
        return self._delete(NodeKind.GRADE, (curriculum_id, grade_id))

    # Book operations
    def add_book(self, curriculum_id: str, grade_id: str, name: str, **fields) -> str | None:
        return self._add(NodeKind.BOOK, (curriculum_id, grade_id), {"name": name, **fields})

    def update_book(self, curriculum_id: str, grade_id: str, book_id: str, updates: Updates) -> bool:
        return self._update(NodeKind.BOOK, (curriculum_id, grade_id, book_id), updates)

    def delete_book(self, curriculum_id: str, grade_id: str, book_id: str) -> bool:
        return self._delete(NodeKind.BOOK, (curriculum_id, grade_id, book_id))

    # Unit operations
    def add_unit(self, curriculum_id: str, grade_id: str, book_id: str, name: str, **fields) -> str | None:
        return self._add(NodeKind.UNIT, (curriculum_id, grade_id, book_id), {"name": name, **fields})

    def update_unit(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, updates: Updates
    ) -> bool:
        return self._update(NodeKind.UNIT, (curriculum_id, grade_id, book_id, unit_id), updates)

    def delete_unit(self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str) -> bool:
        return self._delete(NodeKind.UNIT, (curriculum_id, grade_id, book_id, unit_id))

    # Lesson operations
    def add_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, name: str, **fields
    ) -> str | None:
        return self._add(
            NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id), {"name": name, **fields}
        )

    def update_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        updates: Updates,
    ) -> bool:
        return self._update(
            NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id, lesson_id), updates
        )

    def delete_lesson(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str
    ) -> bool:
        return self._delete(NodeKind.LESSON, (curriculum_id, grade_id, book_id, unit_id, lesson_id))

    # Stage operations
    def add_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        name: str, **fields,
    ) -> str | None:
        return self._add(
            NodeKind.STAGE,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id),
            {"name": name, **fields},
        )

    def update_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, updates: Updates,
    ) -> bool:
        return self._update(
            NodeKind.STAGE, (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id), updates
        )

    def delete_stage(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str,
    ) -> bool:
        return self._delete(
            NodeKind.STAGE, (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id)
        )

    # Activity operations
    def add_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, name: str, type: str = "", **fields,
    ) -> str | None:
        return self._add(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id),
            {"name": name, "type": type, **fields},
        )

    def update_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, activity_id: str, updates: Updates,
    ) -> bool:
        return self._update(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id, activity_id),
            updates,
        )

    def delete_activity(
        self, curriculum_id: str, grade_id: str, book_id: str, unit_id: str, lesson_id: str,
        stage_id: str, activity_id: str,
    ) -> bool:
        return self._delete(
            NodeKind.ACTIVITY,
            (curriculum_id, grade_id, book_id, unit_id, lesson_id, stage_id, activity_id),
        )

    # Standard operations
    def add_standard(self, curriculum_id: str, name: str, description: str | None = None) -> str | None:
        return self._add(NodeKind.STANDARD, (curriculum_id,), {"name": name, "description": description})

    def update_standard(self, curriculum_id: str, standard_id: str, updates: Updates) -> bool:
        return self._update(NodeKind.STANDARD, (curriculum_id, standard_id), updates)

    def delete_standard(self, curriculum_id: str, standard_id: str) -> bool:
        return self._delete(NodeKind.STANDARD, (curriculum_id, standard_id))

    # Standard code operations
    def add_standard_code(
        self, curriculum_id: str, standard_id: str, code: str,
        title: str = "", description: str = "", level: str = "",
    ) -> str | None:
        return self._add(
            NodeKind.STANDARD_CODE,
            (curriculum_id, standard_id),
            {"code": code, "title": title, "description": description, "level": level},
        )

    def update_standard_code(
        self, curriculum_id: str, standard_id: str, code_id: str, updates: Updates
    ) -> bool:
        return self._update(NodeKind.STANDARD_CODE, (curriculum_id, standard_id, code_id), updates)

    def delete_standard_code(self, curriculum_id: str, standard_id: str, code_id: str) -> bool:
        return self._delete(NodeKind.STANDARD_CODE, (curriculum_id, standard_id, code_id))

    # Activity type operations
    def add_activity_type(
        self, curriculum_id: str, name: str, description: str | None = None,
        color: str | None = None, icon: str | None = None,
    ) -> str | None:
        return self._add(NodeKind.ACTIVITY_TYPE, (curriculum_id,), {
            "name": name,
            "description": description,
            "color": color or DEFAULT_ACTIVITY_TYPE_COLOR,
            "icon": icon or DEFAULT_ACTIVITY_TYPE_ICON,
        })

    def update_activity_type(self, curriculum_id: str, activity_type_id: str, updates: Updates) -> bool:
        return self._update(NodeKind.ACTIVITY_TYPE, (curriculum_id, activity_type_id), updates)

    def delete_activity_type(self, curriculum_id: str, activity_type_id: str) -> bool:
        return self._delete(NodeKind.ACTIVITY_TYPE, (curriculum_id, activity_type_id))
