"""Local preference persistence for the search front end."""

import json
from pathlib import Path
from typing import Any, Literal

import aiofiles
import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()

KEYWORDS_KEY = "hive_keywords"
PLATFORM_KEY = "hive_platform"
THEME_KEY = "hive_theme"

PLATFORMS: dict[str, str] = {
    "peakd": "https://peakd.com",
    "ecency": "https://ecency.com",
    "hive.blog": "https://hive.blog",
}

Platform = Literal["peakd", "ecency", "hive.blog"]
Theme = Literal["light", "dark"]


class Preferences(BaseModel):
    """Last keyword set, preferred display platform and theme."""

    keywords: list[str] = Field(default_factory=list)
    platform: Platform = "peakd"
    theme: Theme = "light"

    @property
    def platform_url(self) -> str:
        return PLATFORMS[self.platform]

    def to_storage(self) -> dict[str, Any]:
        return {
            KEYWORDS_KEY: self.keywords,
            PLATFORM_KEY: self.platform,
            THEME_KEY: self.theme,
        }

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> "Preferences":
        """Read stored values, ignoring any that are missing or unusable."""
        prefs = cls()

        keywords = data.get(KEYWORDS_KEY)
        if isinstance(keywords, list) and all(isinstance(k, str) for k in keywords):
            prefs.keywords = keywords

        if data.get(PLATFORM_KEY) in PLATFORMS:
            prefs.platform = data[PLATFORM_KEY]

        if data.get(THEME_KEY) in ("light", "dark"):
            prefs.theme = data[THEME_KEY]

        return prefs


class PreferencesStore:
    """Reads and writes preferences as a small JSON file."""

    def __init__(self, path: str = "~/.hive_fetcher/preferences.json"):
        """Initialize preferences store.

        Args:
            path: Location of the preferences file
        """
        self.path = Path(path).expanduser()

    async def load(self) -> Preferences:
        """Load saved preferences, falling back to defaults.

        Returns:
            Preferences from disk, or defaults when the file is absent or corrupt
        """
        if not self.path.exists():
            return Preferences()

        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            raw = await f.read()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("preferences_unreadable", path=str(self.path), error=str(e))
            return Preferences()

        if not isinstance(data, dict):
            logger.warning("preferences_unreadable", path=str(self.path), error="not an object")
            return Preferences()

        return Preferences.from_storage(data)

    async def save(self, preferences: Preferences) -> str:
        """Write preferences to disk.

        Args:
            preferences: Preferences to persist

        Returns:
            Path to the saved file
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(preferences.to_storage(), indent=2, ensure_ascii=False))

        logger.debug("saved_preferences", path=str(self.path))
        return str(self.path)
