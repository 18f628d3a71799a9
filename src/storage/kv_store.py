from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

from focusflow import config

logger = logging.getLogger(__name__)


class KeyValueStore:
    """JSON-file key-value store: one ``<prefix><key>.json`` file per key.

    Reads never raise: a missing or corrupted file yields the default.
    Writes report failure through their boolean result.
    """

    def __init__(self, directory: str = config.DATA_DIR, prefix: str = config.KEY_PREFIX):
        self.directory = Path(directory)
        self.prefix = prefix

    def path_for(self, key: str) -> Path:
        return self.directory / f"{self.prefix}{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        try:
            if not path.exists():
                return default
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {key} from storage: {e}")
            return default
        return default if value is None else value

    def set(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(value, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write {key} to storage: {e}")
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove {key} from storage: {e}")
            return False
        return True

    def usage(self, keys: Iterable[str]) -> Dict[str, int]:
        """Size in bytes of each stored key (0 when absent)."""
        sizes = {}
        for key in keys:
            path = self.path_for(key)
            sizes[key] = path.stat().st_size if path.exists() else 0
        return sizes
