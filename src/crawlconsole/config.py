from pathlib import Path
import yaml
import logging
from typing import Optional
from pydantic import ValidationError
from crawlconsole.exceptions import SettingsError
from crawlconsole.models import ConsoleSettings

logger = logging.getLogger("crawlconsole.config")

SETTINGS_FILE = "settings.yaml"


class SettingsManager:
    """Manages the console's YAML settings file."""

    def __init__(self, base_path: Path | None = None):
        # Default to ~/.crawlconsole if no path provided
        self.base_path = base_path or Path.home() / ".crawlconsole"

    @property
    def settings_path(self) -> Path:
        return self.base_path / SETTINGS_FILE

    def save(self, settings: ConsoleSettings):
        """Saves settings as a human-readable YAML file."""
        self.base_path.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.settings_path, "w", encoding="utf-8") as f:
                yaml.dump(
                    settings.model_dump(mode="json"),
                    f,
                    allow_unicode=True,
                    sort_keys=False,
                )
        except OSError as e:
            raise SettingsError(f"Cannot write {self.settings_path}: {e}") from e

    def _read(self) -> Optional[ConsoleSettings]:
        if not self.settings_path.exists():
            return None

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(f"Cannot read {self.settings_path}: {e}") from e

        if data is None:
            return None
        try:
            return ConsoleSettings.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {self.settings_path}: {e}") from e

    def load(self) -> ConsoleSettings:
        """Retrieves settings or writes and returns defaults."""
        settings = self._read()
        if not settings:
            settings = ConsoleSettings()
            self.save(settings)
            logger.info(f"Created default settings at {self.settings_path}")
        return settings
