"""Message formatting utilities for the game display."""

from collections.abc import Sequence

from bot.services.catalog import format_resort_name
from bot.services.geo_metrics import bearing_to_arrow, bearing_to_compass, format_distance
from bot.services.reveal_service import FULL_REVEAL
from bot.services.scoring_service import build_guess_feedback
from config import Config
from models import FocalPoint, GuessFeedback, GuessRecord, PlayerSettings, ResortRecord, Verdict

# Discord message limit
DISCORD_MAX_LENGTH = 2000

SHARE_MARKERS = {
    Verdict.MATCH: "🟩",
    Verdict.MISMATCH: "🟥",
    Verdict.TOO_HIGH: "⬇️",
    Verdict.TOO_LOW: "⬆️",
    Verdict.UNKNOWN: "⬜",
}

TABLE_MARKERS = {
    Verdict.MATCH: "✅",
    Verdict.MISMATCH: "❌",
    Verdict.TOO_HIGH: "🔽",
    Verdict.TOO_LOW: "🔼",
    Verdict.UNKNOWN: "❔",
}

UNKNOWN_VALUE = "Unknown"


def share_markers(feedback: GuessFeedback) -> list[str]:
    """Emoji markers for one guess, resort first, parent company last."""
    return [
        SHARE_MARKERS[Verdict.MATCH] if feedback.resort_correct else SHARE_MARKERS[Verdict.MISMATCH],
        SHARE_MARKERS[feedback.country],
        SHARE_MARKERS[feedback.region],
        SHARE_MARKERS[feedback.continent],
        SHARE_MARKERS[feedback.skiable_acreage],
        SHARE_MARKERS[feedback.lifts],
        SHARE_MARKERS[feedback.parent_company],
    ]


def format_direction(feedback: GuessFeedback, use_metric: bool) -> str:
    """Distance and arrow toward the target, or '' when not applicable."""
    if feedback.resort_correct or feedback.distance is None:
        return ""
    distance = feedback.distance
    return f"{format_distance(distance.distance_km, use_metric)} {bearing_to_arrow(distance.bearing_degrees)}"


def render_share_text(
    guess_history: Sequence[GuessRecord],
    target: ResortRecord,
    puzzle_number: int,
    date_label: str,
    show_country: bool = False,
    use_metric: bool = False,
    share_url: str | None = None,
) -> str:
    """Emoji summary of a game for sharing, one line per guess.

    With `show_country`, each line also names the guessed resort's country.
    Wrong guesses with known coordinates get a distance and direction suffix.
    """
    text = f"{share_url or Config.SHARE_URL} #{puzzle_number}\n"
    text += f"{date_label}\n\n"

    for guess in guess_history:
        feedback = build_guess_feedback(guess, target)
        line = " ".join(share_markers(feedback))

        if show_country:
            country = guess.metadata.country if guess.metadata else None
            line += f" {country or UNKNOWN_VALUE}"

        direction = format_direction(feedback, use_metric)
        if direction:
            line += f" {direction}"

        text += line + "\n"

    return text


def _format_number(value: float | None) -> str:
    if value is None:
        return UNKNOWN_VALUE
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.1f}"


def format_guess_line(guess: GuessRecord, feedback: GuessFeedback, settings: PlayerSettings) -> str:
    """One row of the guesses table."""
    meta = guess.metadata
    name = meta.name if meta and meta.name else format_resort_name(guess.resort_id)
    resort_marker = TABLE_MARKERS[Verdict.MATCH] if feedback.resort_correct else TABLE_MARKERS[Verdict.MISMATCH]

    country = TABLE_MARKERS[feedback.country]
    if settings.show_country_names:
        country = f"{(meta.country if meta else None) or UNKNOWN_VALUE} {country}"

    parts = [
        f"{resort_marker} **{name}**",
        f"Country: {country}",
        f"Region: {(meta.region if meta else None) or UNKNOWN_VALUE} {TABLE_MARKERS[feedback.region]}",
        f"Continent: {(meta.continent if meta else None) or UNKNOWN_VALUE} {TABLE_MARKERS[feedback.continent]}",
        f"Acreage: {_format_number(meta.skiable_acreage if meta else None)} "
        f"{TABLE_MARKERS[feedback.skiable_acreage]}",
        f"Lifts: {_format_number(meta.lifts if meta else None)} {TABLE_MARKERS[feedback.lifts]}",
        f"Parent: {(meta.parent_company if meta else None) or UNKNOWN_VALUE} "
        f"{TABLE_MARKERS[feedback.parent_company]}",
    ]

    direction = format_direction(feedback, settings.use_metric_units)
    if direction:
        heading = bearing_to_compass(feedback.distance.bearing_degrees)
        parts.append(f"{direction} ({heading})")

    return " · ".join(parts)


def format_guesses_table(
    guesses: Sequence[GuessRecord],
    feedback: Sequence[GuessFeedback],
    settings: PlayerSettings,
) -> str:
    """Format the player's guesses, oldest first."""
    if not guesses:
        return "*No guesses yet!*"

    lines = ["**Your Guesses**"]
    for i, (guess, verdict) in enumerate(zip(guesses, feedback), 1):
        lines.append(f"{i}. {format_guess_line(guess, verdict, settings)}")
    return "\n".join(lines)


def format_countdown(countdown: tuple[int, int, int]) -> str:
    hours, minutes, seconds = countdown
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_puzzle_message(
    puzzle_number: int,
    date_label: str,
    image_url: str,
    reveal_percentage: int,
    focal_point: FocalPoint,
    countdown: tuple[int, int, int],
    solved_name: str | None = None,
) -> str:
    """Format the daily puzzle display."""
    lines = [
        f"# SKI-O-GUESSR #{puzzle_number}",
        f"*{date_label}*",
        "",
    ]

    if solved_name:
        lines.append(f"🎉 **Correct!** You identified **{solved_name}**.")
    elif reveal_percentage >= FULL_REVEAL:
        lines.append("🗺️ The whole map is visible now. Which resort is it?")
    else:
        lines.append(
            f"🗺️ Showing **{reveal_percentage}%** of the trail map around "
            f"({focal_point.x}%, {focal_point.y}%). Which resort is it?"
        )

    lines.extend(
        [
            f"**Map:** {image_url}",
            "",
            f"⏰ Next puzzle in **{format_countdown(countdown)}**",
        ]
    )
    return "\n".join(lines)


def truncate_message(text: str) -> str:
    """Trim text to Discord's message limit."""
    if len(text) <= DISCORD_MAX_LENGTH:
        return text
    return text[: DISCORD_MAX_LENGTH - 3] + "..."
