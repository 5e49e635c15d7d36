"""SQLModel models package."""

from .asset import Asset
from .asset_pack import AssetPack

__all__ = [
    "AssetPack",
    "Asset",
]
