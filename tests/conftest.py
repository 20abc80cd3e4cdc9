"""Pytest configuration and shared fixtures."""

import json
from datetime import date, datetime, timezone

import aiosqlite
import pytest
import pytest_asyncio

from bot.services.catalog import ResortCatalog, load_catalog
from db.database import Database
from models import ResortMetadata

TIME_ZONE = "America/New_York"
START_DATE = date(2024, 3, 1)

RESORTS = {
    "whistler-blackcomb": {
        "name": "Whistler Blackcomb",
        "country": "Canada",
        "region": "British Columbia",
        "continent": "North America",
        "skiable_acreage": 8171,
        "lifts": 37,
        "parent_company": "Vail Resorts",
        "latitude": 50.115,
        "longitude": -122.9486,
    },
    "vail": {
        "name": "Vail",
        "country": "United States",
        "region": "Colorado",
        "continent": "North America",
        "skiable_acreage": 5317,
        "lifts": 31,
        "parent_company": "Vail Resorts",
        "latitude": 39.6403,
        "longitude": -106.3742,
    },
    "zermatt": {
        "name": "Zermatt",
        "country": "Switzerland",
        "region": "Valais",
        "continent": "Europe",
        "skiable_acreage": 5436,
        "lifts": 52,
        "parent_company": "Zermatt Bergbahnen",
        "latitude": 46.0207,
        "longitude": 7.7491,
    },
    # Listed in the index but has no metadata file
    "mystery-mountain": None,
}


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def make_metadata():
    """Build ResortMetadata with sensible defaults."""

    def _make(**overrides) -> ResortMetadata:
        fields = {
            "name": "Test Resort",
            "country": "Canada",
            "region": "Alberta",
            "continent": "North America",
            "skiable_acreage": 3000,
            "lifts": 10,
            "parent_company": "Resorts of the Canadian Rockies",
            "latitude": 51.0,
            "longitude": -115.0,
        }
        fields.update(overrides)
        return ResortMetadata(**fields)

    return _make


@pytest.fixture
def ski_data_dir(tmp_path):
    """A catalog directory with a few resorts, one missing its metadata."""
    index = {"skiResorts": [{"folderName": name} for name in RESORTS]}
    (tmp_path / "index.json").write_text(json.dumps(index), encoding="utf-8")

    for name, metadata in RESORTS.items():
        if metadata is None:
            continue
        resort_dir = tmp_path / name
        resort_dir.mkdir()
        (resort_dir / "metadata.json").write_text(json.dumps(metadata), encoding="utf-8")

    return tmp_path


@pytest.fixture
def catalog(ski_data_dir):
    return ResortCatalog(load_catalog(ski_data_dir), data_dir=ski_data_dir, image_base_url="/ski-images")


@pytest_asyncio.fixture
async def db():
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    await database.connect()
    yield database
    await database.close()


class MemoryStore:
    """Dict-backed KeyValueStore."""

    def __init__(self):
        self.values: dict[str, str] = {}

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.values[key] = value

    async def set_many(self, items):
        self.values.update(items)

    async def remove(self, key):
        self.values.pop(key, None)

    async def remove_many(self, keys):
        for key in keys:
            self.values.pop(key, None)


@pytest.fixture
def memory_store():
    return MemoryStore()


class ReadOnlyStore(MemoryStore):
    """A KeyValueStore whose writes fail."""

    async def set(self, key, value):
        raise aiosqlite.OperationalError("database is locked")

    async def set_many(self, items):
        raise aiosqlite.OperationalError("database is locked")

    async def remove_many(self, keys):
        raise aiosqlite.OperationalError("database is locked")
