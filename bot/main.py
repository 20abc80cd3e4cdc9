"""Main entry point for the Ski-O-Guessr bot."""

import asyncio
import logging
import sys
import time
from pathlib import Path

import discord
from discord.ext import commands

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bot.services.catalog import ResortCatalog
from bot.services.errors import CatalogEmptyError
from bot.services.game_service import GameSession
from bot.services.state_store import GameStateStore, SettingsStore
from config import Config
from db.database import Database

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class SkioguessrBot(commands.Bot):
    """Custom bot class with database, catalog and per-player sessions."""

    def __init__(self, catalog: ResortCatalog):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix="!",  # Fallback prefix, using slash commands primarily
            intents=intents,
            help_command=None,
        )

        self.catalog = catalog
        self.db: Database = None
        self.sessions: dict[str, GameSession] = {}
        self.settings_stores: dict[str, SettingsStore] = {}
        self._session_locks: dict[str, asyncio.Lock] = {}
        self._last_used: dict[str, float] = {}

    async def setup_hook(self):
        """Called when the bot is starting up."""
        # Initialize database
        self.db = Database(Config.DATABASE_PATH)
        await self.db.connect()
        logger.info(f"Connected to database: {Config.DATABASE_PATH}")

        # Load cogs
        cogs = [
            "bot.commands.game",
        ]

        for cog in cogs:
            try:
                await self.load_extension(cog)
                logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                logger.error(f"Failed to load cog {cog}: {e}")

        # Sync slash commands
        logger.info("Syncing slash commands...")
        await self.tree.sync()
        logger.info("Slash commands synced!")

    async def on_ready(self):
        """Called when the bot is fully ready."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Serving {len(self.catalog)} resorts to {len(self.guilds)} guild(s)")

        activity = discord.Activity(
            type=discord.ActivityType.playing,
            name="/daily",
        )
        await self.change_presence(activity=activity)

    async def get_session(self, player_id: str) -> GameSession:
        """Get a player's session, loading it from storage on first use."""
        self.evict_idle_sessions()
        self._last_used[player_id] = time.monotonic()

        lock = self._session_locks.setdefault(player_id, asyncio.Lock())
        async with lock:
            session = self.sessions.get(player_id)
            if session is None:
                session = GameSession(self.catalog, GameStateStore(self.db, scope=player_id))
                await session.load()
                session.start_rollover_watch()
                self.sessions[player_id] = session
        return session

    def evict_idle_sessions(self, max_idle_seconds: float | None = None) -> int:
        """Drop sessions unused for longer than `max_idle_seconds`. Returns how many."""
        max_idle = max_idle_seconds if max_idle_seconds is not None else Config.SESSION_IDLE_SECONDS
        cutoff = time.monotonic() - max_idle
        idle = [pid for pid in self.sessions if self._last_used.get(pid, 0) < cutoff]
        for player_id in idle:
            self.drop_session(player_id)
        if idle:
            logger.info(f"Evicted {len(idle)} idle session(s)")
        return len(idle)

    def get_settings_store(self, player_id: str) -> SettingsStore:
        store = self.settings_stores.get(player_id)
        if store is None:
            store = SettingsStore(self.db, scope=player_id)
            self.settings_stores[player_id] = store
        return store

    def drop_session(self, player_id: str) -> None:
        """Forget a player's in-memory session and stop its rollover watch."""
        self.settings_stores.pop(player_id, None)
        self._last_used.pop(player_id, None)
        lock = self._session_locks.get(player_id)
        if lock is not None and not lock.locked():
            del self._session_locks[player_id]
        session = self.sessions.pop(player_id, None)
        if session:
            session.stop_rollover_watch()

    async def close(self):
        """Clean up resources."""
        for player_id in list(self.sessions):
            self.drop_session(player_id)
        if self.db:
            await self.db.close()
        await super().close()


async def main():
    """Main entry point."""
    if not Config.DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN not set! Please set it in your .env file.")
        sys.exit(1)

    try:
        catalog = ResortCatalog.from_directory(Config.DATA_DIR)
    except CatalogEmptyError as e:
        logger.error(f"Cannot start without resorts: {e}")
        sys.exit(1)

    bot = SkioguessrBot(catalog)

    try:
        await bot.start(Config.DISCORD_TOKEN)
    except discord.LoginFailure:
        logger.error("Invalid Discord token! Please check your .env file.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        await bot.close()


if __name__ == "__main__":
    asyncio.run(main())
