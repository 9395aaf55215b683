"""Configuration service for loading and saving .gantt/config.yml."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..models import GanttConfig
from ..repositories.filesystem import GANTT_DIR

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The project configuration is missing or invalid."""

    pass


class ConfigService:
    """Service for loading and caching the project configuration.

    Unlike the task and sync-state stores, a missing configuration is always
    fatal: without it there is no project to sync with.
    """

    CONFIG_FILE = "config.yml"

    def __init__(self, project_root: Path) -> None:
        """Initialize the config service.

        Args:
            project_root: Directory containing .gantt/
        """
        self.project_root = project_root
        self.config_path = project_root / GANTT_DIR / self.CONFIG_FILE
        self._config: GanttConfig | None = None

    def exists(self) -> bool:
        return self.config_path.exists()

    def get_config(self) -> GanttConfig:
        """Get configuration, loading from file if not cached."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def reload(self) -> None:
        """Clear cached configuration, forcing reload on next access."""
        self._config = None

    def save(self, config: GanttConfig) -> None:
        """Write the configuration and cache it."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", exclude_none=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        self._config = config
        logger.info("Wrote %s", self.config_path)

    def _load_config(self) -> GanttConfig:
        if not self.config_path.exists():
            raise ConfigError(
                f"{self.config_path} not found. Run 'ghgantt init' to set up this project."
            )

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("Invalid YAML in %s: %s", self.CONFIG_FILE, e)
            raise ConfigError(f"Invalid YAML in {self.CONFIG_FILE}: {e}") from e

        if not data:
            raise ConfigError(f"{self.CONFIG_FILE} is empty")

        try:
            config = GanttConfig(**data)
        except ValidationError as e:
            logger.error("Invalid %s: %s", self.CONFIG_FILE, e)
            raise ConfigError(f"Invalid {self.CONFIG_FILE}:\n{e}") from e

        logger.info(
            "Loaded %s for %s (project #%d)",
            self.CONFIG_FILE,
            config.project.github.repo_full_name,
            config.project.github.project_number,
        )
        return config
