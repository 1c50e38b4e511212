from __future__ import annotations

from typing import Any, Mapping, TypeVar

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opsdeck.domain.models import Base


ModelT = TypeVar("ModelT", bound=Base)


async def find_by_key(session: AsyncSession, model: type[ModelT], key: Mapping[str, Any]) -> ModelT | None:
    stmt = select(model).filter_by(**key)
    return (await session.execute(stmt)).scalar_one_or_none()


async def upsert(
    session: AsyncSession,
    model: type[ModelT],
    key: Mapping[str, Any],
    values: Mapping[str, Any] | None = None,
) -> tuple[ModelT, bool]:
    """Insert or update one row identified by its natural key.

    ``key`` must match a unique constraint on ``model``; ``values`` holds the
    remaining columns. Returns the row and whether it was created.
    """
    values = dict(values or {})
    row = await find_by_key(session, model, key)
    created = row is None
    if row is None:
        row = model(**key, **values)
        session.add(row)
    else:
        for column, value in values.items():
            setattr(row, column, value)
    # Flush so generated ids are available to dependent rows.
    await session.flush()
    return row, created


def hash_password(password: str, *, rounds: int) -> str:
    """Hash ``password`` with bcrypt at the given cost, as the product's login expects."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, stored: str | None) -> bool:
    if not stored:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash; the caller rehashes.
        return False
