"""Exceptions raised by the game services."""


class SkioguessrError(Exception):
    """Base class for game errors."""


class InvalidCoordinateError(SkioguessrError, ValueError):
    """A latitude or longitude is outside its valid range."""

    def __init__(self, name: str, value: float):
        super().__init__(f"{name} out of range: {value}")
        self.name = name
        self.value = value


class CatalogEmptyError(SkioguessrError):
    """The resort catalog has no entries, so no puzzle can be chosen."""


class MetadataUnavailableError(SkioguessrError):
    """A resort's metadata file is missing or unreadable."""

    def __init__(self, resort_id: str, reason: str = ""):
        message = f"Metadata unavailable for {resort_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.resort_id = resort_id


class StorageCorruptError(SkioguessrError):
    """A persisted payload could not be decoded."""
