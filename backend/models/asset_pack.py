"""Asset pack domain model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, func
from sqlmodel import Field, SQLModel


class AssetPack(SQLModel, table=True):
    """A named collection of assets owned by a single account."""

    __tablename__ = "asset_packs"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    title: str = Field(sa_column=Column(String(255), nullable=False))
    # Storage-relative filename, never the fixture URL.
    thumbnail: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True)
    )
    eth_address: str = Field(
        sa_column=Column(String(42), nullable=False, index=True)
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )
