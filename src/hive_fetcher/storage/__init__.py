"""Content store pool and local preferences."""

from .content_store import ContentStore
from .preferences import Preferences, PreferencesStore

__all__ = ["ContentStore", "Preferences", "PreferencesStore"]
