"""
Curriculum Manager - Portal Settings
Branding and theme preferences kept in local key-value storage.
"""
import json
import logging
from typing import Any, Literal

from pydantic import ValidationError

from curriculum_manager.core.config import settings
from curriculum_manager.schemas.curriculum import CamelModel
from curriculum_manager.services.local_store import JsonFileStorage, StorageError, default_storage

logger = logging.getLogger(__name__)


class PortalSettings(CamelModel):
    portal_logo: str = ""
    portal_name: str = "Curriculum Manager"
    theme: Literal["light", "dark"] = "light"


class SettingsStore:
    """Loads portal settings once and writes them back on every update."""

    def __init__(self, storage: JsonFileStorage | None = None, key: str | None = None):
        self.storage = storage or default_storage()
        self.key = key or settings.SETTINGS_STORE_KEY
        self.settings = self._load()

    def _load(self) -> PortalSettings:
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as e:
            logger.error(f"Error loading portal settings: {e}")
            return PortalSettings()
        if not raw:
            return PortalSettings()

        try:
            saved = json.loads(raw)
            if not isinstance(saved, dict):
                raise ValueError("expected an object")
            # Saved values override the defaults key by key
            return PortalSettings.model_validate({**PortalSettings().model_dump(by_alias=True), **saved})
        except (ValueError, ValidationError) as e:
            logger.error(f"Error loading portal settings: {e}")
            return PortalSettings()

    def update(self, **updates: Any) -> PortalSettings:
        """
        Merge the given fields (snake_case or camelCase) and save.

        Raises:
            ValidationError: If a value is invalid, e.g. an unknown theme
        """
        aliases = {info.alias: name for name, info in PortalSettings.model_fields.items()}
        merged = self.settings.model_dump()
        merged.update({aliases.get(key, key): value for key, value in updates.items()})
        new_settings = PortalSettings.model_validate(merged)
        if new_settings != self.settings:
            self.settings = new_settings
            try:
                self.storage.set_item(self.key, new_settings.model_dump_json(by_alias=True))
            except StorageError as e:
                logger.error(f"Error saving portal settings: {e}")
        return self.settings
