"""Seed the default asset packs from the latest local fixture export.

Usage:
    uv run python scripts/seed_asset_packs.py

Environment overrides:
    SEED_DATA_DIR=/absolute/path/to/seed_data
    SEED_CONCURRENCY=16
    APP_ENV=production   (download content from the .org asset host)

Data directory layout:
    <seed-data-dir>/<YYYY-MM-DD>/packs.json
    <seed-data-dir>/<YYYY-MM-DD>/<pack-id>.json
    <seed-data-dir>/<YYYY-MM-DD>/<pack-id>.png
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from core import settings  # noqa: E402
from db.session import connect, create_engine, create_session_maker  # noqa: E402
from services.content_host import ContentHostClient  # noqa: E402
from services.fixtures import FixtureReader  # noqa: E402
from services.seeding import SeedContext, SeedReport, seed  # noqa: E402
from services.storage import ObjectStore, ensure_bucket, get_minio_client  # noqa: E402

SEED_DATA_DIR_ENV = "SEED_DATA_DIR"
SEED_CONCURRENCY_ENV = "SEED_CONCURRENCY"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
logger = logging.getLogger("scripts.seed_asset_packs")


def _parse_positive_int(raw_value: str | None, *, default: int, label: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        parsed = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{label} must be an integer") from exc
    if parsed <= 0:
        raise ValueError(f"{label} must be positive")
    return parsed


def _resolve_data_dir(raw_value: str | None) -> Path:
    if raw_value is None or raw_value.strip() == "":
        return settings.seed_data_dir
    return Path(raw_value.strip())


async def run() -> SeedReport:
    data_dir = _resolve_data_dir(os.getenv(SEED_DATA_DIR_ENV))
    concurrency = _parse_positive_int(
        os.getenv(SEED_CONCURRENCY_ENV),
        default=settings.seed_concurrency,
        label=SEED_CONCURRENCY_ENV,
    )

    fixtures = FixtureReader(data_dir)
    logger.info("Using seed data from %s", fixtures.data_dir)

    engine = create_engine()
    try:
        await connect(engine)

        minio_client = get_minio_client()
        await asyncio.to_thread(ensure_bucket, minio_client)
        store = ObjectStore(minio_client, settings.minio_bucket)

        async with ContentHostClient() as content_host:
            context = SeedContext(
                session_maker=create_session_maker(engine),
                fixtures=fixtures,
                store=store,
                content_host=content_host,
                eth_address=settings.default_eth_address,
                concurrency=concurrency,
            )
            return await seed(context)
    finally:
        await engine.dispose()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        report = asyncio.run(run())
    except Exception:
        logger.exception("Asset pack seed failed")
        return 1

    print(f"All done! Asset pack seed complete: {report.summary()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
