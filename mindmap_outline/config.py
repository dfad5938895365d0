"""Conversion settings.

Settings are stored as a JSON object. Keys may use either the snake_case
attribute names or the camelCase names written by `save_settings`:

    {
        "imageStorageStrategy": "adjacent",
        "customAssetFolder": "mindmap-assets",
        "cleanupOldImages": true,
        "useWikiLinks": true
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class StorageStrategy(Enum):
    """Where extracted images are written."""
    ADJACENT = "adjacent"  # {parent}/{basename}.assets
    CENTRAL = "central"    # _mindmap-assets/{basename}
    CUSTOM = "custom"      # {custom_asset_folder}/{basename}


@dataclass
class Settings:
    image_storage_strategy: StorageStrategy = StorageStrategy.ADJACENT
    custom_asset_folder: str = "mindmap-assets"
    cleanup_old_images: bool = True
    use_wiki_links: bool = True

    def __post_init__(self):
        if not isinstance(self.image_storage_strategy, StorageStrategy):
            self.image_storage_strategy = StorageStrategy(self.image_storage_strategy)


_CAMEL_KEYS = {
    "imageStorageStrategy": "image_storage_strategy",
    "customAssetFolder": "custom_asset_folder",
    "cleanupOldImages": "cleanup_old_images",
    "useWikiLinks": "use_wiki_links",
}


def settings_from_dict(data: dict) -> Settings:
    """Overlay a settings mapping on the defaults.

    Raises:
        ValueError: If the storage strategy is not a known value.
    """
    known = {f.name for f in fields(Settings)}
    values = {}
    for key, val in data.items():
        name = _CAMEL_KEYS.get(key, key)
        if name in known:
            values[name] = val
        else:
            logger.debug("Ignoring unknown setting %r", key)
    return Settings(**values)


def load_settings(path: Union[str, Path, None]) -> Settings:
    """Load settings from a JSON file, falling back to defaults.

    A missing file yields the default settings.
    """
    if path is None:
        return Settings()
    path = Path(path)
    if not path.exists():
        logger.info("No settings file at %s, using defaults", path)
        return Settings()

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {path}")
    return settings_from_dict(data)


def save_settings(settings: Settings, path: Union[str, Path]) -> Path:
    """Write settings as camelCase JSON."""
    path = Path(path)
    plain = asdict(settings)
    plain["image_storage_strategy"] = settings.image_storage_strategy.value
    by_attr = {attr: camel for camel, attr in _CAMEL_KEYS.items()}
    data = {by_attr[name]: val for name, val in plain.items()}
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
