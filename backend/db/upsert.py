"""Dialect-aware insert-or-update helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

# Columns that keep their first-write value when a row is updated in place.
PRESERVED_ON_UPDATE = frozenset({"created_at"})

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _primary_key_columns(model: type[SQLModel]) -> list[str]:
    return [column.name for column in inspect(model).primary_key]


async def upsert(
    session: AsyncSession,
    model: type[SQLModel],
    values: Mapping[str, Any],
    *,
    conflict_target: Sequence[str] | None = None,
) -> None:
    """Insert ``values`` or update the row that collides on ``conflict_target``.

    The conflict target defaults to the model's primary key. Integrity errors
    unrelated to the target propagate to the caller. The caller commits.
    """
    dialect_name = session.get_bind().dialect.name
    insert_factory = _DIALECT_INSERTS.get(dialect_name)
    if insert_factory is None:
        raise NotImplementedError(f"upsert is not supported for dialect {dialect_name!r}")

    target = list(conflict_target or _primary_key_columns(model))
    table = model.__table__  # type: ignore[attr-defined]
    unknown = [name for name in (*target, *values) if name not in table.c]
    if unknown:
        raise ValueError(f"Unknown columns for {table.name}: {', '.join(unknown)}")

    stmt = insert_factory(table).values(dict(values))
    update_columns = {
        name: stmt.excluded[name]
        for name in values
        if name not in target and name not in PRESERVED_ON_UPDATE
    }
    if update_columns:
        stmt = stmt.on_conflict_do_update(index_elements=target, set_=update_columns)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=target)

    await session.execute(stmt)
