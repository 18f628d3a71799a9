from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from focusflow.models import Settings, TaskFilters
from focusflow.records import camel_key
from storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
FILTERS_KEY = "filters"


class PreferencesStore:
    """Settings (theme, sort order, current view ...) and the active filters."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def initialize_defaults(self) -> None:
        if self.kv.get(SETTINGS_KEY) is None:
            self.save(Settings())

    def _record(self, key: str) -> dict:
        data = self.kv.get(key, {})
        return data if isinstance(data, dict) else {}

    def load(self) -> Settings:
        data = self._record(SETTINGS_KEY)
        try:
            return Settings.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid settings in storage, using defaults: {e}")
            return Settings()

    def save(self, settings: Settings) -> bool:
        return self.kv.set(SETTINGS_KEY, settings.to_record())

    def get_setting(self, key: str, default: Any = None) -> Any:
        value = self._record(SETTINGS_KEY).get(camel_key(key))
        return default if value is None else value

    def update_setting(self, key: str, value: Any) -> bool:
        data = self._record(SETTINGS_KEY)
        data[camel_key(key)] = getattr(value, "value", value)
        try:
            Settings.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Rejected setting {key}={value!r}: {e}")
            return False
        return self.kv.set(SETTINGS_KEY, data)

    def get_filters(self) -> TaskFilters:
        data = self._record(FILTERS_KEY)
        try:
            return TaskFilters.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid filters in storage, using defaults: {e}")
            return TaskFilters()

    def set_filters(self, filters: TaskFilters) -> bool:
        return self.kv.set(FILTERS_KEY, filters.to_record())

    def update_filter(self, key: str, value: Any) -> bool:
        filters = self.get_filters().to_record()
        filters[camel_key(key)] = value
        return self.set_filters(TaskFilters.model_validate(filters))

    def clear_filters(self) -> bool:
        return self.set_filters(TaskFilters())
