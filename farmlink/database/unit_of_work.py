"""Explicit transaction boundary for multi-row writes.

Services wrap every sequence that touches more than one record in
``async with uow.transaction():`` so that all writes land together or none
do. When the session is already inside a transaction (the request-scoped
session from ``get_db`` usually is), the block runs in a SAVEPOINT and the
outer transaction is committed by the caller.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class UnitOfWork:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Open a transaction (or savepoint) that commits on success and rolls back on error."""
        if self.session.in_transaction():
            async with self.session.begin_nested():
                yield self.session
        else:
            async with self.session.begin():
                yield self.session

    async def get_for_update(self, model: type[ModelT], ident: uuid.UUID) -> ModelT | None:
        """Load a row by primary key with ``SELECT ... FOR UPDATE``.

        Concurrent writers on the same row queue behind the lock until the
        surrounding transaction ends. Dialects without row locks (SQLite)
        render the plain SELECT.
        """
        result = await self.session.execute(
            select(model)
            .where(model.id == ident)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
