"""Three-tier settings loader.

Configuration priority (highest to lowest):
1. Explicit overrides
2. Environment (DOK_STORAGE_STRATEGY, DOK_DB_PATH, DOK_LOG_LEVEL, DOK_PORT)
3. Project config (.dok/settings.json in workspace)
4. User config (~/.dok/settings.json)
5. System defaults (config/defaults/settings.json)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from config.schema import DokSettings

logger = logging.getLogger(__name__)

# (group, field) pairs holding filesystem paths; only these get ${VAR} and ~ expansion
_PATH_FIELDS: tuple[tuple[str, str], ...] = (("storage", "db_path"),)

# env var -> (group, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DOK_STORAGE_STRATEGY": ("storage", "strategy"),
    "DOK_DB_PATH": ("storage", "db_path"),
    "DOK_LOG_LEVEL": ("logging", "level"),
    "DOK_PORT": ("server", "port"),
}


class SettingsLoader:
    """Loads ``DokSettings`` from defaults, user, project and environment layers."""

    def __init__(self, workspace_root: str | Path | None = None):
        self.workspace_root = Path(workspace_root).resolve() if workspace_root else None
        self._system_defaults_dir = Path(__file__).parent / "defaults"

    def load(
        self,
        overrides: dict[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> DokSettings:
        merged = self._deep_merge(
            self._load_system_defaults(),
            self._load_user_config(),
            self._load_project_config(),
            self._env_config(env if env is not None else os.environ),
        )
        if overrides:
            merged = self._deep_merge(merged, overrides)

        merged = self._expand_path_fields(merged)
        merged = self._remove_none_values(merged)
        return DokSettings(**merged)

    def _load_system_defaults(self) -> dict[str, Any]:
        return self._load_json(self._system_defaults_dir / "settings.json")

    def _load_user_config(self) -> dict[str, Any]:
        """Load user config from ~/.dok/settings.json."""
        return self._load_json(Path.home() / ".dok" / "settings.json")

    def _load_project_config(self) -> dict[str, Any]:
        """Load project config from .dok/settings.json."""
        if not self.workspace_root:
            return {}
        return self._load_json(self.workspace_root / ".dok" / "settings.json")

    @staticmethod
    def _env_config(env: Mapping[str, str]) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for var, (group, field) in _ENV_OVERRIDES.items():
            value = env.get(var)
            if value is None or not value.strip():
                continue
            config.setdefault(group, {})[field] = value.strip()
        return config

    @staticmethod
    def _load_json(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", path)
            return {}
        return data

    def _deep_merge(self, *dicts: dict[str, Any]) -> dict[str, Any]:
        """Deep merge multiple dictionaries. Later dicts override earlier ones."""
        result: dict[str, Any] = {}
        for d in dicts:
            for key, value in d.items():
                if key not in result:
                    result[key] = value
                elif value is None:
                    continue
                elif isinstance(value, dict) and isinstance(result[key], dict):
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = value
        return result

    @staticmethod
    def _expand_path_fields(merged: dict[str, Any]) -> dict[str, Any]:
        """Expand ${VAR} and ~ in path fields; other strings are kept verbatim."""
        for group, field in _PATH_FIELDS:
            section = merged.get(group)
            if isinstance(section, dict) and isinstance(section.get(field), str):
                merged[group] = {**section, field: os.path.expandvars(os.path.expanduser(section[field]))}
        return merged

    def _remove_none_values(self, obj: Any) -> Any:
        """Recursively remove None values to allow Pydantic defaults."""
        if isinstance(obj, dict):
            return {k: self._remove_none_values(v) for k, v in obj.items() if v is not None}
        if isinstance(obj, list):
            return [self._remove_none_values(v) for v in obj if v is not None]
        return obj


def load_settings(
    workspace_root: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> DokSettings:
    """Convenience function to load settings."""
    return SettingsLoader(workspace_root=workspace_root).load(overrides=overrides, env=env)
