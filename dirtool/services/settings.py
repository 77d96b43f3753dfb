"""
Tool settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Mapping, Optional

from dirtool.core.models import DEFAULT_TASK_TIMEOUT, WorkerPoolConfig
from dirtool.services.comparison import DEFAULT_CHUNK_SIZE


ENV_POOL_SIZE = 'DIRTOOL_POOL_SIZE'
ENV_TASK_TIMEOUT = 'DIRTOOL_TASK_TIMEOUT'


@dataclass
class OperationSettings:
    """Settings for directory operations."""
    pool_size: int = 0                  # 0 = number of processors
    task_timeout: float = DEFAULT_TASK_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"


@dataclass
class ToolSettings:
    """Main settings container."""
    operation: OperationSettings = field(default_factory=OperationSettings)

    def to_pool_config(self) -> WorkerPoolConfig:
        return WorkerPoolConfig.create(self.operation.pool_size, self.operation.task_timeout)


class SettingsManager:
    """Manager for loading/saving tool settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ToolSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'dirtool' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'dirtool' / 'settings.json'

    @property
    def settings(self) -> ToolSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self, environ: Optional[Mapping[str, str]] = None) -> ToolSettings:
        """
        Load settings from disk, then apply environment overrides.

        A missing file gives the defaults. So does an unreadable one, with a
        warning.
        """
        settings = ToolSettings()

        if self.settings_path.exists():
            try:
                with open(self.settings_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                settings = self._from_dict(data)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logging.warning(f"SettingsManager - Ignoring unreadable settings file {self.settings_path}: {e}")
                settings = ToolSettings()

        self._apply_environment(settings, os.environ if environ is None else environ)
        self._settings = settings
        return settings

    def save(self, settings: Optional[ToolSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Failed to save settings to {self.settings_path}: {e}")
            return False

    def reset(self) -> ToolSettings:
        """Reset to default settings."""
        self._settings = ToolSettings()
        self.save()
        return self._settings

    @staticmethod
    def _apply_environment(settings: ToolSettings, environ: Mapping[str, str]) -> None:
        pool_size = environ.get(ENV_POOL_SIZE)
        if pool_size:
            try:
                settings.operation.pool_size = int(pool_size)
            except ValueError:
                logging.warning(f"SettingsManager - Ignoring invalid {ENV_POOL_SIZE}: {pool_size!r}")

        task_timeout = environ.get(ENV_TASK_TIMEOUT)
        if task_timeout:
            try:
                settings.operation.task_timeout = float(task_timeout)
            except ValueError:
                logging.warning(f"SettingsManager - Ignoring invalid {ENV_TASK_TIMEOUT}: {task_timeout!r}")

    def _to_dict(self, settings: ToolSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return asdict(settings)

    def _from_dict(self, data: dict) -> ToolSettings:
        """Convert dictionary back to settings objects."""
        operation_data: dict[str, Any] = data.get('operation', {})
        defaults = OperationSettings()

        operation = OperationSettings(
            pool_size=int(operation_data.get('pool_size', defaults.pool_size)),
            task_timeout=float(operation_data.get('task_timeout', defaults.task_timeout)),
            chunk_size=int(operation_data.get('chunk_size', defaults.chunk_size)),
            log_level=str(operation_data.get('log_level', defaults.log_level)),
        )

        return ToolSettings(operation=operation)
