"""Seed default asset packs, their assets and content into storage.

A run has two phases. Every pack record is upserted first (with its
thumbnail mirrored to the object store), and only once all of them have
settled are the packs' assets processed, one pack at a time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db.upsert import upsert
from models import Asset, AssetPack

from .content_host import ContentHostClient, ContentHostUnavailableError
from .fixtures import DefaultAsset, DefaultAssetPack, FixtureReader
from .storage import ACL, AssetPackStorage, ContentStorage, ObjectStore

ASSET_CONFLICT_TARGET = ("id", "asset_pack_id")
DEFAULT_CONCURRENCY = 16
logger = logging.getLogger(__name__)


@dataclass
class SeedContext:
    session_maker: async_sessionmaker[AsyncSession]
    fixtures: FixtureReader
    store: ObjectStore
    content_host: ContentHostClient
    eth_address: str
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass
class SeedReport:
    packs_upserted: int = 0
    thumbnails_uploaded: int = 0
    thumbnails_existing: int = 0
    assets_upserted: int = 0
    assets_failed: int = 0
    contents_uploaded: int = 0
    contents_existing: int = 0
    contents_skipped: int = 0
    contents_failed: int = 0
    packs_with_errors: int = 0

    def summary(self) -> str:
        return ", ".join(f"{field.name}={getattr(self, field.name)}" for field in fields(self))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def thumbnail_basename(thumbnail: str) -> str:
    """Strip any URL or directory part from a fixture thumbnail reference."""
    return PurePosixPath(urlsplit(thumbnail).path).name


def asset_pack_values(
    pack: DefaultAssetPack, *, thumbnail: str, eth_address: str, now: datetime
) -> dict[str, Any]:
    return {
        "id": pack.id,
        "title": pack.title,
        "thumbnail": thumbnail,
        "eth_address": eth_address,
        "created_at": now,
        "updated_at": now,
    }


def asset_values(asset: DefaultAsset, *, asset_pack_id: str, now: datetime) -> dict[str, Any]:
    return {
        "id": asset.id,
        "asset_pack_id": asset_pack_id,
        "name": asset.name,
        "thumbnail": thumbnail_basename(asset.thumbnail),
        "model": asset.url,
        "category": asset.category,
        "tags": list(asset.tags),
        "contents": dict(asset.contents),
        "created_at": now,
        "updated_at": now,
    }


async def _gather_settled(awaitables: Iterable[Awaitable[Any]]) -> list[BaseException]:
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    return [result for result in results if isinstance(result, BaseException)]


class AssetPackSeeder:
    """Runs one seed pass against the collaborators held by a ``SeedContext``."""

    def __init__(self, context: SeedContext) -> None:
        if context.concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self.context = context
        self.report = SeedReport()
        self.contents = ContentStorage(context.store)
        self._limit = asyncio.Semaphore(context.concurrency)

    async def run(self) -> SeedReport:
        packs = self.context.fixtures.load_packs()

        logger.info("==== Asset packs ====")
        await self.upsert_asset_packs(packs)

        logger.info("==== Assets ====")
        for pack in packs:
            await self.upsert_pack_assets(pack.id)

        return self.report

    async def upsert_asset_packs(self, packs: list[DefaultAssetPack]) -> None:
        now = _utcnow()
        errors = await _gather_settled(self._upsert_asset_pack(pack, now) for pack in packs)
        for error in errors:
            logger.error("Asset pack seeding failed", exc_info=error)
        if errors:
            raise errors[0]

    async def _upsert_asset_pack(self, pack: DefaultAssetPack, now: datetime) -> None:
        async with self._limit:
            thumbnail = await self.upload_pack_thumbnail(pack)
            values = asset_pack_values(
                pack,
                thumbnail=thumbnail,
                eth_address=self.context.eth_address,
                now=now,
            )
            logger.info("Upserting asset pack %s for user %s", pack.id, values["eth_address"])
            async with self.context.session_maker() as session:
                await upsert(session, AssetPack, values)
                await session.commit()
        self.report.packs_upserted += 1

    async def upload_pack_thumbnail(self, pack: DefaultAssetPack) -> str:
        """Mirror the pack thumbnail from the data directory and return its filename."""
        storage = AssetPackStorage(self.context.store, pack.id)
        filename = storage.thumbnail_filename

        if await storage.exists(filename):
            logger.info("Thumbnail %s already exists in storage", filename)
            self.report.thumbnails_existing += 1
            return filename

        payload = self.context.fixtures.read_bytes(filename)
        logger.info("Uploading thumbnail %s", filename)
        await storage.write(filename, payload, ACL.public_read)
        self.report.thumbnails_uploaded += 1
        return filename

    async def upsert_pack_assets(self, pack_id: str) -> None:
        """Upsert a pack's assets and mirror their content, concurrently."""
        assets = self.context.fixtures.load_pack_assets(pack_id)
        now = _utcnow()
        host_down = asyncio.Event()

        operations: list[Awaitable[None]] = [
            self._upsert_asset(asset, pack_id, now) for asset in assets
        ]
        content_ids = dict.fromkeys(
            content_id for asset in assets for content_id in asset.contents.values()
        )
        operations.extend(
            self._mirror_content(content_id, pack_id, host_down) for content_id in content_ids
        )

        errors = await _gather_settled(operations)
        if errors:
            self.report.packs_with_errors += 1
            for error in errors:
                logger.warning(
                    "Error saving assets for asset pack %s: %s",
                    pack_id,
                    error,
                    extra={"asset_pack_id": pack_id},
                )

    async def _upsert_asset(self, asset: DefaultAsset, pack_id: str, now: datetime) -> None:
        values = asset_values(asset, asset_pack_id=pack_id, now=now)
        async with self._limit:
            logger.info("Upserting asset %s for asset pack %s", asset.id, pack_id)
            try:
                async with self.context.session_maker() as session:
                    await upsert(session, Asset, values, conflict_target=ASSET_CONFLICT_TARGET)
                    await session.commit()
            except Exception:
                self.report.assets_failed += 1
                raise
        self.report.assets_upserted += 1

    async def _mirror_content(
        self, content_id: str, pack_id: str, host_down: asyncio.Event
    ) -> None:
        async with self._limit:
            if host_down.is_set():
                self.report.contents_skipped += 1
                return

            try:
                if await self.contents.exists(content_id):
                    logger.info("File %s already exists in storage", content_id)
                    self.report.contents_existing += 1
                    return

                if host_down.is_set():
                    self.report.contents_skipped += 1
                    return

                payload = await self.context.content_host.fetch(content_id)
                logger.info("Uploading file %s", content_id)
                await self.contents.write(content_id, payload, ACL.public_read)
            except ContentHostUnavailableError as exc:
                # Assume the host stays down for the rest of this pack.
                if not host_down.is_set():
                    logger.warning(
                        "Content host unreachable, skipping remaining uploads for asset pack %s: %s",
                        pack_id,
                        exc,
                        extra={"asset_pack_id": pack_id, "content_id": content_id},
                    )
                host_down.set()
                self.report.contents_skipped += 1
                return
            except Exception:
                self.report.contents_failed += 1
                raise

        logger.info("File %s uploaded successfully", content_id)
        self.report.contents_uploaded += 1


async def seed(context: SeedContext) -> SeedReport:
    """Run a full seed pass and return what it did."""
    return await AssetPackSeeder(context).run()
