"""
User settings for the tunings subsystem.

Stored as JSON in ~/.tunings/settings.json. Missing keys are filled from
defaults and written back so the file always lists every setting.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tunings.constants import DEFAULT_DATA_DIR, SETTINGS_FILENAME
from tunings.models import SortType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TuningSettings:
    """
    Attributes:
        data_dir: Folder holding the tunings files
        sort_type: Initial bank sort ("npo", "name" or "order")
    """
    data_dir: str = DEFAULT_DATA_DIR
    sort_type: str = SortType.NOTE_COUNT.value

    def __post_init__(self):
        """Validate settings."""
        valid = [s.value for s in SortType]
        if self.sort_type not in valid:
            raise ValueError(f"Invalid sort_type: {self.sort_type}. Expected one of {valid}")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def sort(self) -> SortType:
        return SortType(self.sort_type)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TuningSettings":
        defaults = cls()
        return cls(
            data_dir=str(data.get("data_dir", defaults.data_dir)),
            sort_type=data.get("sort_type", defaults.sort_type),
        )


def default_settings_path() -> Path:
    return Path(DEFAULT_DATA_DIR).expanduser() / SETTINGS_FILENAME


def load_settings(path: Optional[Union[str, Path]] = None) -> TuningSettings:
    """
    Load settings, merging the file over defaults.

    The file is (re)written when it is missing or lacks keys. Read and
    write failures are logged and defaults are used.

    Args:
        path: Settings file (defaults to ~/.tunings/settings.json)

    Returns:
        Loaded settings
    """
    config_path = Path(path) if path is not None else default_settings_path()
    defaults = TuningSettings().to_dict()
    merged = dict(defaults)
    needs_write = True

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                merged.update({k: v for k, v in loaded.items() if k in defaults})
                needs_write = any(k not in loaded for k in defaults)
            else:
                logger.warning("Ignoring settings file %s: not a JSON object", config_path)
                needs_write = False
        except (OSError, ValueError) as e:
            logger.error("Failed to load settings from %s: %s", config_path, e)
            needs_write = False

    try:
        settings = TuningSettings.from_dict(merged)
    except ValueError as e:
        logger.error("Invalid settings in %s, using defaults: %s", config_path, e)
        return TuningSettings()

    if needs_write:
        save_settings(settings, config_path)

    return settings


def save_settings(settings: TuningSettings, path: Optional[Union[str, Path]] = None) -> bool:
    """
    Save settings to disk.

    Returns:
        True if the file was written
    """
    config_path = Path(path) if path is not None else default_settings_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except OSError as e:
        logger.error("Failed to save settings to %s: %s", config_path, e)
        return False
