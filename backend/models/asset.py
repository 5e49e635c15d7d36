"""Asset domain model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text, func
from sqlmodel import Field, SQLModel


class Asset(SQLModel, table=True):
    """A single model with its textures, scoped to the pack that ships it.

    The same asset id may appear in several packs, so the primary key is the
    ``(id, asset_pack_id)`` pair.
    """

    __tablename__ = "assets"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    asset_pack_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("asset_packs.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    name: str = Field(sa_column=Column(String(255), nullable=False))
    thumbnail: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True)
    )
    model: str = Field(sa_column=Column(Text, nullable=False))
    category: str | None = Field(
        default=None, sa_column=Column(String(100), nullable=True)
    )
    tags: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    contents: dict[str, str] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
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
