from typing import Any, Dict, List, Optional
import json
import os
from pydantic import BaseModel, Field, ValidationError
from loguru import logger
from .events import Signal
from .plugins.settings import HostSettings

# --- Settings Models ---
class LoggingSettings(BaseModel):
    debug_mode: bool = True
    log_dir: Optional[str] = "logs"

class MongoSettings(BaseModel):
    host: str = 'localhost'
    port: int = 27017
    database_name: str = "plugin_host"
    objects_collection: str = "objects"
    states_collection: str = "states"

class AppConfig(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    host: HostSettings = Field(default_factory=HostSettings)
    # plugin name -> plugin configuration
    plugins: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    resolve_dirs: List[str] = Field(default_factory=list)
    # package configuration of the adapter/controller, e.g. {"common": {"name": ..., "host": ...}}
    parent_config: Dict[str, Any] = Field(default_factory=dict)

# --- Manager ---
class ConfigManager:
    """
    Manages host configuration with persistence and reactivity.
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = Signal("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        if not hasattr(self._data, section):
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if not isinstance(section_obj, BaseModel) or key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        updated = section_obj.model_validate({**section_obj.model_dump(), key: value})
        setattr(self._data, section, updated)
        self._save()
        self.on_changed.emit(section, key, getattr(updated, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    import tomllib
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if self.filepath.endswith('.toml'):
            # TOML files are read-only for the manager
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(mode="json"), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
