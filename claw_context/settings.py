"""Settings loading for context limits.

Reads claw.yaml from two scopes, first file found wins:
- Local (nearest .claw/claw.yaml searching upward from the working directory)
- Global (~/.config/claw/claw.yaml)

Falls back to the built-in ContextLimits defaults when neither exists.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import SettingsError
from .models import ContextLimits

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".claw"
CONFIG_FILE_NAME = "claw.yaml"

LIMIT_KEYS = tuple(ContextLimits.model_fields)


class ContextSettingsManager:
    """Resolves the claw.yaml cascade into ContextLimits."""

    def __init__(self, start_dir: Path | None = None, global_config_dir: Path | None = None):
        """Initialize settings manager.

        Args:
            start_dir: Directory the local search starts from (default: CWD)
            global_config_dir: Global config directory (default: ~/.config/claw).
                Overridable for testing.
        """
        self.start_dir = (start_dir or Path.cwd()).resolve()
        self.global_config_dir = global_config_dir or Path.home() / ".config" / "claw"

    def find_local_config_dir(self) -> Path | None:
        """Search upward from start_dir for a .claw directory."""
        for directory in (self.start_dir, *self.start_dir.parents):
            candidate = directory / CONFIG_DIR_NAME
            if candidate.is_dir():
                return candidate
        return None

    def config_files(self) -> list[Path]:
        """Candidate config files in priority order."""
        files = []
        local_dir = self.find_local_config_dir()
        if local_dir is not None:
            files.append(local_dir / CONFIG_FILE_NAME)
        files.append(self.global_config_dir / CONFIG_FILE_NAME)
        return files

    def active_config_file(self) -> Path | None:
        for path in self.config_files():
            if path.is_file():
                return path
        return None

    def get_settings(self) -> dict[str, Any]:
        """Read the active config file, or an empty dict when there is none."""
        path = self.active_config_file()
        if path is None:
            logger.debug("No claw.yaml found, using built-in context limits")
            return {}
        logger.debug(f"Loading context settings from {path}")
        return self._read_settings(path)

    def load_limits(self, **overrides: Any) -> ContextLimits:
        """Build ContextLimits from the active config file and overrides.

        Args:
            **overrides: ContextLimits fields that win over file values.
                None values are skipped.

        Returns:
            Validated ContextLimits

        Raises:
            SettingsError: Config file unreadable or values invalid
        """
        path = self.active_config_file()
        settings = self._read_settings(path) if path else {}
        values = {key: settings[key] for key in LIMIT_KEYS if settings.get(key) is not None}
        values.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return ContextLimits(**values)
        except ValidationError as e:
            raise SettingsError(path or Path(CONFIG_FILE_NAME), _summarize(e)) from e

    def _read_settings(self, path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(path, str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SettingsError(path, "top level must be a mapping")
        return data


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "value"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
