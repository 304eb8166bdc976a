"""Profile and AI settings persistence."""

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from snapplate.domain.profile import AISettings, UserProfile
from snapplate.services.storage import AI_SETTINGS_KEY, PROFILE_KEY, KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class PreferencesStore:
    """Service for the profile and AI settings documents."""

    storage: KeyValueStorage

    def get_profile(self) -> UserProfile | None:
        """Return the saved profile, if any."""
        raw = self.storage.get(PROFILE_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored profile is unreadable")
            return None

    def save_profile(self, profile: UserProfile) -> None:
        """Persist the profile."""
        self.storage.set(PROFILE_KEY, profile.model_dump_json())

    def get_ai_settings(self) -> AISettings:
        """Return saved AI settings merged over the defaults."""
        raw = self.storage.get(AI_SETTINGS_KEY)
        if not raw:
            return AISettings()
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored AI settings are unreadable, using defaults")
            return AISettings()
        if not isinstance(stored, dict):
            return AISettings()
        merged = AISettings().model_dump(mode="json") | stored
        try:
            return AISettings.model_validate(merged)
        except ValidationError:
            logger.warning("Stored AI settings are invalid, using defaults")
            return AISettings()

    def save_ai_settings(self, settings: AISettings) -> None:
        """Persist AI settings."""
        self.storage.set(AI_SETTINGS_KEY, settings.model_dump_json())
