"""Local JSON fixtures describing the default asset packs.

Fixtures live in dated subdirectories of a base directory::

    <base>/2020-09-14/packs.json
    <base>/2020-09-14/<pack-id>.json
    <base>/2020-09-14/<pack-id>.png

Only directories whose names start with an ISO date are considered, and the
lexicographically last one is used, so newer exports simply sit beside older
ones.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DATA_DIR_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
PACKS_FILENAME = "packs.json"
logger = logging.getLogger(__name__)


class FixtureError(Exception):
    """Base class for fixture loading failures."""


class FixtureDirectoryError(FixtureError):
    """Raised when no dated data directory can be found."""


class FixtureFormatError(FixtureError):
    """Raised when a fixture file is not valid JSON or has the wrong shape."""


class _Fixture(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class DefaultAssetPack(_Fixture):
    id: str
    title: str
    url: str
    thumbnail: str


class DefaultAsset(_Fixture):
    id: str
    name: str
    thumbnail: str
    url: str
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    variations: list[str] = Field(default_factory=list)
    contents: dict[str, str] = Field(default_factory=dict)


class _AssetPacksData(_Fixture):
    packs: list[DefaultAssetPack]


class AssetPacksResponse(_Fixture):
    ok: bool
    data: _AssetPacksData


class _AssetPackAssetsData(_Fixture):
    id: str
    version: int | None = None
    title: str | None = None
    assets: list[DefaultAsset]


class AssetPackAssetsResponse(_Fixture):
    ok: bool
    data: _AssetPackAssetsData


def find_latest_data_dir(base_dir: Path) -> Path:
    """Return the newest dated subdirectory of ``base_dir``."""
    if not base_dir.is_dir():
        raise FixtureDirectoryError(f"Seed data directory not found: {base_dir}")

    candidates = sorted(
        entry.name
        for entry in base_dir.iterdir()
        if entry.is_dir() and DATA_DIR_PATTERN.match(entry.name)
    )
    if not candidates:
        raise FixtureDirectoryError(
            f"No dated (YYYY-MM-DD) data directories found in {base_dir}"
        )
    return base_dir / candidates[-1]


class FixtureReader:
    """Reads fixture files from the latest data directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir
        self.data_dir = find_latest_data_dir(base_dir)

    def path_for(self, filename: str) -> Path:
        return self.data_dir / filename

    def read_bytes(self, filename: str) -> bytes:
        path = self.path_for(filename)
        logger.info("Reading file %s", path)
        return path.read_bytes()

    def read_json(self, filename: str) -> Any:
        raw = self.read_bytes(filename)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise FixtureFormatError(f"{self.path_for(filename)} is not valid JSON") from exc

    def _parse(self, filename: str, model: type[_Fixture]) -> Any:
        payload = self.read_json(filename)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise FixtureFormatError(
                f"{self.path_for(filename)} does not match the expected shape"
            ) from exc

    def load_packs(self) -> list[DefaultAssetPack]:
        response: AssetPacksResponse = self._parse(PACKS_FILENAME, AssetPacksResponse)
        return list(response.data.packs)

    def load_pack_assets(self, pack_id: str) -> list[DefaultAsset]:
        response: AssetPackAssetsResponse = self._parse(
            f"{pack_id}.json", AssetPackAssetsResponse
        )
        return list(response.data.assets)
