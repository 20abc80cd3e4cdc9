"""Pydantic models for game data structures."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Resort(BaseModel):
    """A catalog entry. Identity only; descriptive data lives in ResortMetadata."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    folder_name: str = Field(alias="folderName")


class ResortMetadata(BaseModel):
    """Descriptive record for a resort, loaded from its metadata.json."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    continent: Optional[str] = None
    skiable_acreage: Optional[float] = None
    lifts: Optional[int] = None
    parent_company: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    boxes: list[list[float]] = Field(default_factory=list)


class ResortRecord(BaseModel):
    """A resort identifier paired with its metadata, if it could be loaded."""

    model_config = ConfigDict(frozen=True)

    resort_id: str
    metadata: Optional[ResortMetadata] = None


class GuessRecord(ResortRecord):
    """One submitted guess with the metadata snapshot taken at guess time."""


class FocalPoint(BaseModel):
    """Point on the trail map, in percent of width/height, the reveal is centered on."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0, le=100)
    y: int = Field(ge=0, le=100)


class RevealRegion(BaseModel):
    """Visible clip box on the trail map, in percent."""

    left: float
    top: float
    right: float
    bottom: float


class DistanceAndBearing(BaseModel):
    """Great-circle distance and compass heading between two coordinates."""

    model_config = ConfigDict(frozen=True)

    distance_km: float
    distance_miles: float
    bearing_degrees: float


class Verdict(str, Enum):
    """Per-field comparison outcome."""

    MATCH = "match"
    MISMATCH = "mismatch"
    TOO_HIGH = "too_high"
    TOO_LOW = "too_low"
    UNKNOWN = "unknown"


class GuessFeedback(BaseModel):
    """Field-by-field verdict for one guess against the target."""

    model_config = ConfigDict(frozen=True)

    resort_id: str
    resort_correct: bool
    country: Verdict
    region: Verdict
    continent: Verdict
    skiable_acreage: Verdict
    lifts: Verdict
    parent_company: Verdict
    distance: Optional[DistanceAndBearing] = None


class PersistedGameState(BaseModel):
    """Durable session snapshot, rewritten whole on every change."""

    current_resort_id: str
    guessed_correctly: bool = False
    previous_guesses: list[str] = Field(default_factory=list)
    guess_results: list[GuessRecord] = Field(default_factory=list)
    reveal_percentage: int = Field(default=33, ge=0, le=100)
    center_coordinates: FocalPoint


class PlayerSettings(BaseModel):
    """A player's display preferences."""

    show_country_names: bool = False
    use_metric_units: bool = False
