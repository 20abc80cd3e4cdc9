"""Game commands for Ski-O-Guessr."""

import contextlib
import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands, ui
from discord.ext import commands

from bot.services.catalog import format_resort_name
from bot.services.game_service import GameSession
from bot.services.state_store import scope_prefix
from utils.daytime import formatted_date, utc_now
from utils.formatting import format_guesses_table, format_puzzle_message, truncate_message

if TYPE_CHECKING:
    from bot.main import SkioguessrBot

logger = logging.getLogger(__name__)

# Discord allows at most 25 autocomplete choices
MAX_CHOICES = 25


class ClearDataConfirmView(ui.View):
    """Confirmation view for clearing user data."""

    def __init__(self, user_id: int, bot: "SkioguessrBot"):
        super().__init__(timeout=60)
        self.user_id = user_id
        self.bot = bot
        self.confirmed = False
        self.cancelled = False

    @ui.button(label="Yes, delete my data", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: ui.Button):
        if interaction.user.id != self.user_id:
            await interaction.response.send_message("This confirmation is not for you.", ephemeral=True)
            return

        self.confirmed = True
        self.stop()

        player_id = str(self.user_id)
        self.bot.drop_session(player_id)
        removed = await self.bot.db.delete_prefix(scope_prefix(player_id))

        await interaction.response.edit_message(
            content=f"Your data has been deleted ({removed} stored item(s) removed).",
            view=None,
        )

    @ui.button(label="Cancel", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: ui.Button):
        if interaction.user.id != self.user_id:
            await interaction.response.send_message("This confirmation is not for you.", ephemeral=True)
            return

        self.cancelled = True
        self.stop()
        await interaction.response.edit_message(content="Data deletion cancelled.", view=None)


class GameCommands(commands.Cog):
    """Cog containing all game commands."""

    bot: "SkioguessrBot"

    def __init__(self, bot: "SkioguessrBot"):
        self.bot = bot

    async def _session(self, interaction: discord.Interaction) -> GameSession:
        session = await self.bot.get_session(str(interaction.user.id))
        await session.check_rollover()
        return session

    async def _render_puzzle(self, interaction: discord.Interaction, session: GameSession) -> str:
        settings = await self.bot.get_settings_store(str(interaction.user.id)).load()
        now = utc_now()

        solved_name = None
        if session.revealed_metadata is not None:
            solved_name = session.revealed_metadata.name
        if session.guessed_correctly and not solved_name:
            solved_name = format_resort_name(session.target.resort_id)

        puzzle = format_puzzle_message(
            puzzle_number=session.puzzle_number,
            date_label=formatted_date(now),
            image_url=session.image_url,
            reveal_percentage=session.reveal_percentage,
            focal_point=session.focal_point,
            countdown=session.countdown(now),
            solved_name=solved_name,
        )
        table = format_guesses_table(session.guess_history, session.feedback, settings)
        return truncate_message(f"{puzzle}\n\n{table}")

    @app_commands.command(name="daily", description="Show today's Ski-O-Guessr puzzle")
    async def daily(self, interaction: discord.Interaction):
        """Show the daily puzzle and your guesses so far."""
        logger.info(f"Daily command invoked by {interaction.user}")
        await interaction.response.defer(ephemeral=True)

        session = await self._session(interaction)
        await interaction.followup.send(await self._render_puzzle(interaction, session), ephemeral=True)

    @app_commands.command(name="guess", description="Guess which resort today's trail map shows")
    @app_commands.describe(resort="The ski resort you think it is")
    async def guess(self, interaction: discord.Interaction, resort: str):
        """Submit a guess for today's puzzle."""
        logger.info(f"Guess command invoked by {interaction.user}: resort='{resort}'")
        await interaction.response.defer(ephemeral=True)

        session = await self._session(interaction)
        success, message = await session.submit_guess(resort)

        if not success:
            await interaction.followup.send(message, ephemeral=True)
            return

        board = await self._render_puzzle(interaction, session)
        await interaction.followup.send(truncate_message(f"{message}\n\n{board}"), ephemeral=True)

    @guess.autocomplete("resort")
    async def guess_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        """Suggest resorts that haven't been guessed yet."""
        session = await self.bot.get_session(str(interaction.user.id))
        query = current.strip().lower()

        choices = []
        for resort_id in session.remaining_resorts():
            name = format_resort_name(resort_id)
            if query and query not in name.lower() and query not in resort_id:
                continue
            choices.append(app_commands.Choice(name=name, value=resort_id))
            if len(choices) >= MAX_CHOICES:
                break
        return choices

    @app_commands.command(name="share", description="Share your result for today's puzzle")
    @app_commands.describe(public="Post your result to the channel instead of just showing it to you")
    async def share(self, interaction: discord.Interaction, public: bool = False):
        """Show the emoji summary of today's game."""
        await interaction.response.defer(ephemeral=not public)

        session = await self._session(interaction)
        if not session.guess_history:
            await interaction.followup.send("Make a guess with `/guess` first!", ephemeral=True)
            return

        settings = await self.bot.get_settings_store(str(interaction.user.id)).load()
        await interaction.followup.send(session.share_text(settings), ephemeral=not public)

    @app_commands.command(name="settings", description="Change your Ski-O-Guessr display settings")
    @app_commands.describe(
        show_country_names="Show country names in your guesses and shared results",
        metric="Use kilometers and meters instead of miles and feet",
    )
    async def settings(
        self,
        interaction: discord.Interaction,
        show_country_names: bool | None = None,
        metric: bool | None = None,
    ):
        """Update display preferences."""
        store = self.bot.get_settings_store(str(interaction.user.id))
        updated = await store.update(show_country_names=show_country_names, use_metric_units=metric)

        await interaction.response.send_message(
            "**Settings saved**\n"
            f"- Show country names: {'on' if updated.show_country_names else 'off'}\n"
            f"- Units: {'metric' if updated.use_metric_units else 'imperial'}",
            ephemeral=True,
        )

    @app_commands.command(name="skioguessr", description="Show help for Ski-O-Guessr")
    async def help(self, interaction: discord.Interaction):
        """Show help information."""
        help_text = """
**Ski-O-Guessr**

Identify the ski resort from a partially hidden trail map. Everyone gets the same resort each day, and a new puzzle unlocks at midnight Eastern Time.

**How to Play:**
1. Use `/daily` to see today's map
2. Use `/guess` to pick a resort
3. Each guess compares country, region, continent, acreage, lifts and parent company with the answer
4. Wrong guesses reveal more of the map and show how far away you are

**Markers:**
- ✅ match, ❌ no match, ❔ unknown
- 🔽 your guess is too high, 🔼 your guess is too low

**Commands:**
- `/daily` - Show today's puzzle
- `/guess <resort>` - Submit a guess
- `/share` - Share your result
- `/settings` - Country names and units
- `/cleardata` - Delete your saved games and settings
"""
        await interaction.response.send_message(help_text, ephemeral=True)

    @app_commands.command(
        name="cleardata",
        description="Delete your saved Ski-O-Guessr games and settings",
    )
    async def cleardata(self, interaction: discord.Interaction):
        """Delete all user data with confirmation."""
        logger.info(f"Cleardata command invoked by {interaction.user}")

        view = ClearDataConfirmView(interaction.user.id, self.bot)

        await interaction.response.send_message(
            "**Are you sure you want to delete all your Ski-O-Guessr data?**\n\n"
            "This will permanently delete:\n"
            "- Today's guesses\n"
            "- Your display settings\n\n"
            "This action cannot be undone.",
            view=view,
            ephemeral=True,
        )

        # Only a timeout leaves the prompt without an answer
        timed_out = await view.wait()
        if timed_out and not interaction.is_expired():
            with contextlib.suppress(discord.NotFound):
                await interaction.edit_original_response(content="Data deletion timed out.", view=None)


async def setup(bot: "SkioguessrBot"):
    """Load the cog."""
    await bot.add_cog(GameCommands(bot))
