"""Resort catalog and metadata loading.

The catalog lives on disk as `<data_dir>/index.json`:

    {"skiResorts": [{"folderName": "whistler-blackcomb"}, ...]}

with one `<data_dir>/<folderName>/metadata.json` per resort. Metadata is read
lazily on first use and cached for the life of the catalog.
"""

import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from bot.services.errors import CatalogEmptyError, MetadataUnavailableError
from config import Config
from models import Resort, ResortMetadata

logger = logging.getLogger(__name__)


def load_catalog(data_dir: str | Path | None = None) -> list[Resort]:
    """Read the ordered resort list. Raises CatalogEmptyError if there are none."""
    index_path = Path(data_dir or Config.DATA_DIR) / "index.json"

    try:
        with open(index_path, "r", encoding="utf-8") as f:
            index = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogEmptyError(f"Could not read resort catalog at {index_path}: {e}") from e

    resorts = [Resort.model_validate(entry) for entry in index.get("skiResorts", [])]
    if not resorts:
        raise CatalogEmptyError(f"No resorts listed in {index_path}")

    logger.info(f"Loaded {len(resorts)} resorts from {index_path}")
    return resorts


def format_resort_name(folder_name: str) -> str:
    """Turn a folder slug into a display name ('mount-snow' -> 'Mount Snow')."""
    return " ".join(word[:1].upper() + word[1:] for word in folder_name.replace("-", " ").split())


class ResortCatalog:
    """The fixed resort list plus on-demand metadata."""

    def __init__(
        self,
        resorts: list[Resort],
        data_dir: str | Path | None = None,
        image_base_url: str | None = None,
    ):
        if not resorts:
            raise CatalogEmptyError("Resort catalog is empty")
        self.resorts = tuple(resorts)
        self.data_dir = Path(data_dir or Config.DATA_DIR)
        self.image_base_url = (image_base_url or Config.IMAGE_BASE_URL).rstrip("/")
        self._ids = {resort.folder_name for resort in self.resorts}
        self._metadata: dict[str, ResortMetadata] = {}

    @classmethod
    def from_directory(cls, data_dir: str | Path | None = None) -> "ResortCatalog":
        return cls(load_catalog(data_dir), data_dir=data_dir)

    def __len__(self) -> int:
        return len(self.resorts)

    def __contains__(self, resort_id: str) -> bool:
        return resort_id in self._ids

    @property
    def resort_ids(self) -> list[str]:
        return [resort.folder_name for resort in self.resorts]

    def image_url(self, resort_id: str) -> str:
        return f"{self.image_base_url}/{resort_id}/ski_map_original.png"

    def redacted_image_url(self, resort_id: str) -> str:
        return f"{self.image_base_url}/{resort_id}/ski_map_redacted.png"

    async def get_metadata(self, resort_id: str) -> ResortMetadata:
        """Load a resort's metadata. Raises MetadataUnavailableError on failure."""
        cached = self._metadata.get(resort_id)
        if cached is not None:
            return cached

        if resort_id not in self._ids:
            raise MetadataUnavailableError(resort_id, "not in catalog")

        metadata_path = self.data_dir / resort_id / "metadata.json"
        try:
            raw = await asyncio.to_thread(metadata_path.read_text, encoding="utf-8")
            metadata = ResortMetadata.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            raise MetadataUnavailableError(resort_id, str(e)) from e

        self._metadata[resort_id] = metadata
        return metadata

    async def get_metadata_or_none(self, resort_id: str) -> ResortMetadata | None:
        """Like get_metadata, but logs and returns None on failure."""
        try:
            return await self.get_metadata(resort_id)
        except MetadataUnavailableError as e:
            logger.error(f"Failed to load metadata for {resort_id}: {e}")
            return None

    async def display_name(self, resort_id: str) -> str:
        """The resort's name from metadata, falling back to its folder name."""
        metadata = await self.get_metadata_or_none(resort_id)
        if metadata and metadata.name:
            return metadata.name
        return format_resort_name(resort_id)
