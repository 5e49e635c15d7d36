"""Seeding services."""

from .content_host import (
    ContentDownloadError,
    ContentHostClient,
    ContentHostUnavailableError,
)
from .fixtures import (
    DefaultAsset,
    DefaultAssetPack,
    FixtureDirectoryError,
    FixtureError,
    FixtureFormatError,
    FixtureReader,
    find_latest_data_dir,
)
from .seeding import AssetPackSeeder, SeedContext, SeedReport, seed
from .storage import (
    ACL,
    AssetPackStorage,
    ContentStorage,
    ObjectStore,
    ensure_bucket,
    get_minio_client,
)

__all__ = [
    "ACL",
    "AssetPackStorage",
    "ContentStorage",
    "ObjectStore",
    "ensure_bucket",
    "get_minio_client",
    "ContentHostClient",
    "ContentDownloadError",
    "ContentHostUnavailableError",
    "DefaultAsset",
    "DefaultAssetPack",
    "FixtureReader",
    "FixtureError",
    "FixtureDirectoryError",
    "FixtureFormatError",
    "find_latest_data_dir",
    "AssetPackSeeder",
    "SeedContext",
    "SeedReport",
    "seed",
]
