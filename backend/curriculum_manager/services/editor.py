"""
Curriculum Manager - Editor Session
Selected-path state and debounced duration editing on top of a tree store.

Works with the synchronous local store and the asynchronous remote store:
store results that are awaitable are awaited (or scheduled, for debounced
commits).
"""
import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel

from curriculum_manager.core.config import settings
from curriculum_manager.schemas.curriculum import CurriculumData
from curriculum_manager.services import navigator
from curriculum_manager.services.duration import (
    DurationUnit,
    change_duration_unit,
    normalize_duration_input,
    unit_of,
)
from curriculum_manager.services.tree_store import NodeKind, duration_field

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run a callback once input has been quiet for ``delay`` seconds.

    Each ``trigger`` restarts the timer with the latest arguments. Coroutine
    results are scheduled as a task, kept in ``task``.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self.task: asyncio.Future | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        result = self.callback(*args)
        if inspect.isawaitable(result):
            self.task = asyncio.ensure_future(result)


class EditorSession:
    """Navigation state of the content editor plus its duration inputs."""

    def __init__(self, store: Any, debounce_seconds: float | None = None):
        self.store = store
        self.debounce_seconds = (
            settings.DURATION_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.path: navigator.Path = ()
        # One timer per edited node, keyed by (kind, ids)
        self._debouncers: dict[tuple[str, tuple[str, ...]], Debouncer] = {}

    @property
    def data(self) -> CurriculumData:
        return self.store.data

    @property
    def view(self) -> str | None:
        return navigator.view_for_path(self.path)

    @property
    def current_node(self) -> BaseModel | None:
        return navigator.resolve_path(self.data, self.path)

    @property
    def breadcrumbs(self) -> list[navigator.Breadcrumb]:
        return navigator.breadcrumbs(self.data, self.path)

    def select_path(self, path: Sequence[str]) -> None:
        """
        Navigate to a path. Pending duration commits are dropped.

        Raises:
            ValueError: If the path is malformed
        """
        if not navigator.is_valid_path(path):
            raise ValueError(f"Invalid path: {list(path)}")
        self.cancel_pending()
        self.path = tuple(path)

    def open_child(self, kind: str, node_id: str) -> None:
        self.select_path(navigator.child_path(self.path, kind, node_id))

    def go_back(self) -> None:
        self.select_path(navigator.parent_path(self.data, self.path))

    def cancel_pending(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        # Only commits still in flight need their debouncer kept
        self._debouncers = {
            target: debouncer
            for target, debouncer in self._debouncers.items()
            if debouncer.task is not None and not debouncer.task.done()
        }

    def pending_tasks(self) -> list[asyncio.Future]:
        """Commits already handed to an async store and not yet finished."""
        return [d.task for d in self._debouncers.values() if d.task is not None and not d.task.done()]

    def _target(self, activity_id: str | None) -> tuple[str, tuple[str, ...]]:
        if not self.path:
            raise ValueError("No node selected")
        kind, ids = self.path[-2], tuple(self.path[1::2])
        if activity_id is not None:
            if kind != NodeKind.STAGE.value:
                raise ValueError("Activities are edited from their stage")
            kind, ids = NodeKind.ACTIVITY.value, ids + (activity_id,)
        if duration_field(NodeKind(kind)) is None:
            raise ValueError(f"A {kind} has no duration")
        return kind, ids

    def _update_duration(self, kind: str, ids: tuple[str, ...], value: str) -> Any:
        field = duration_field(NodeKind(kind))
        logger.debug(f"Setting {kind} {ids[-1]} {field} to {value!r}")
        return getattr(self.store, f"update_{kind}")(*ids, {field: value})

    def type_duration(self, text: str, unit: DurationUnit, activity_id: str | None = None) -> None:
        """
        Record typed duration input; the normalized value is committed after
        the debounce delay unless more input (or navigation) comes first.

        Must be called from a running event loop.
        """
        target = self._target(activity_id)
        debouncer = self._debouncers.get(target)
        if debouncer is None:
            debouncer = Debouncer(self.debounce_seconds, self._commit_typed)
            self._debouncers[target] = debouncer
        debouncer.trigger(target, text, unit)

    def _commit_typed(self, target: tuple[str, tuple[str, ...]], text: str, unit: DurationUnit) -> Any:
        kind, ids = target
        return self._update_duration(kind, ids, normalize_duration_input(text, unit))

    def selected_unit(self, activity_id: str | None = None) -> DurationUnit:
        """Unit the selector shows for the stored duration (Minutes when unset)."""
        kind, ids = self._target(activity_id)
        node = self._find(kind, ids)
        return unit_of(getattr(node, duration_field(NodeKind(kind))) if node else None)

    async def change_duration_unit(self, unit: DurationUnit, activity_id: str | None = None) -> bool:
        """
        Convert the stored duration to another unit right away.

        Returns:
            False when there is no parsable duration to convert
        """
        kind, ids = self._target(activity_id)
        node = self._find(kind, ids)
        if node is None:
            return False
        value = change_duration_unit(getattr(node, duration_field(NodeKind(kind))), unit)
        if not value:
            return False
        result = self._update_duration(kind, ids, value)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    def _find(self, kind: str, ids: tuple[str, ...]) -> BaseModel | None:
        if kind == NodeKind.ACTIVITY.value:
            stage = self.current_node
            if stage is None:
                return None
            return next((a for a in stage.activities if a.id == ids[-1]), None)
        return self.current_node
