"""Persistence of game state and player settings.

Both stores sit on a KeyValueStore and namespace their keys by player, so a
store for one player never sees another player's data. Stored values are
JSON produced by pydantic. The game state key carries a version suffix:
changing the snapshot shape means moving to a new key, not migrating.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import aiosqlite
from pydantic import ValidationError

from bot.services.errors import StorageCorruptError
from config import Config
from db.database import KeyValueStore
from models import PersistedGameState, PlayerSettings
from utils.daytime import as_utc, utc_now

logger = logging.getLogger(__name__)

GAME_STATE_KEY = "game-state-v1"
LAST_PLAYED_KEY = "last-played"
SETTINGS_KEY = "settings"


def scoped_key(scope: str, name: str) -> str:
    """Build a storage key such as 'ski-o-guessr:1234:settings'."""
    return f"{Config.STORAGE_KEY_PREFIX}:{scope}:{name}"


def scope_prefix(scope: str) -> str:
    return f"{Config.STORAGE_KEY_PREFIX}:{scope}:"


class GameStateStore:
    """Saves and restores one player's game snapshot."""

    def __init__(self, kv: KeyValueStore, scope: str = "local"):
        self.kv = kv
        self.state_key = scoped_key(scope, GAME_STATE_KEY)
        self.last_played_key = scoped_key(scope, LAST_PLAYED_KEY)

    async def save(self, state: PersistedGameState, now: datetime | None = None) -> bool:
        """Write the snapshot and the last-played time together.

        Returns False if the write failed; nothing is written in that case.
        """
        played_at = as_utc(now) if now else utc_now()
        try:
            await self.kv.set_many(
                {
                    self.state_key: state.model_dump_json(),
                    self.last_played_key: played_at.isoformat(),
                }
            )
        except aiosqlite.Error as e:
            logger.warning(f"Failed to save game state under {self.state_key}: {e}")
            return False
        return True

    async def load(self) -> Optional[PersistedGameState]:
        """Return the saved snapshot, or None if absent or unreadable."""
        try:
            raw = await self.kv.get(self.state_key)
            if not raw:
                return None
            return self._decode(raw)
        except (aiosqlite.Error, StorageCorruptError) as e:
            logger.warning(f"Discarding unreadable game state under {self.state_key}: {e}")
            return None

    def _decode(self, raw: str) -> PersistedGameState:
        try:
            return PersistedGameState.model_validate_json(raw)
        except ValidationError as e:
            raise StorageCorruptError(f"invalid game state: {e.error_count()} error(s)") from e

    async def last_played(self) -> Optional[datetime]:
        """When the snapshot was last written, or None."""
        try:
            raw = await self.kv.get(self.last_played_key)
        except aiosqlite.Error as e:
            logger.warning(f"Failed to read last played time: {e}")
            return None
        if not raw:
            return None

        try:
            return as_utc(datetime.fromisoformat(raw))
        except ValueError:
            logger.warning(f"Ignoring malformed last played time: {raw!r}")
            return None

    async def clear(self) -> None:
        """Remove the snapshot. Clearing an empty store is fine."""
        try:
            await self.kv.remove_many([self.state_key, self.last_played_key])
        except aiosqlite.Error as e:
            logger.warning(f"Failed to clear game state under {self.state_key}: {e}")


SettingsListener = Callable[[], None]


class SettingsStore:
    """Player preferences with change notification.

    Listeners are called synchronously, with no arguments, after every
    successful save; they re-read the settings themselves.
    """

    def __init__(self, kv: KeyValueStore, scope: str = "local"):
        self.kv = kv
        self.key = scoped_key(scope, SETTINGS_KEY)
        self._listeners: list[SettingsListener] = []

    async def load(self) -> PlayerSettings:
        """Return saved settings, or defaults if none are stored or they can't be read."""
        try:
            raw = await self.kv.get(self.key)
        except aiosqlite.Error as e:
            logger.warning(f"Failed to read settings: {e}")
            return PlayerSettings()
        if not raw:
            return PlayerSettings()

        try:
            return PlayerSettings.model_validate_json(raw)
        except ValidationError:
            logger.error(f"Failed to parse settings under {self.key}, using defaults")
            return PlayerSettings()

    async def save(self, settings: PlayerSettings) -> bool:
        """Store settings and notify listeners. Returns False if the write failed."""
        try:
            await self.kv.set(self.key, settings.model_dump_json())
        except aiosqlite.Error as e:
            logger.warning(f"Failed to save settings under {self.key}: {e}")
            return False
        self._notify()
        return True

    async def update(self, **changes: bool | None) -> PlayerSettings:
        """Change some settings, keeping the rest. Returns the settings now in effect."""
        current = await self.load()
        updated = current.model_copy(update={k: v for k, v in changes.items() if v is not None})
        if not await self.save(updated):
            return current
        return updated

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Settings listener failed")
