"""Store access handle: table-style CRUD over the database plus the change feed.

Every mutation publishes a ``ChangeEvent`` once its transaction commits. Use
``atomic()`` to group several writes into one transaction; events from the
group are published together after the commit and dropped on rollback.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Iterable, Optional, Type, TypeVar

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hotshot.core.errors import DuplicateError, StoreError
from hotshot.services.change_feed import INSERT, UPDATE, ChangeEvent, ChangeFeed, Subscription

logger = logging.getLogger("store")

ModelT = TypeVar("ModelT", bound=SQLModel)


def _table(model: Type[SQLModel]) -> str:
    return model.__tablename__


def _event(kind: str, row: SQLModel) -> ChangeEvent:
    return ChangeEvent(table=_table(type(row)), event=kind, record=row.model_dump())


def _where(model: Type[SQLModel], filters: dict[str, Any]) -> list:
    clauses = []
    for name, value in filters.items():
        column = getattr(model, name)
        if isinstance(value, (list, tuple, set, frozenset)):
            clauses.append(column.in_(list(value)))
        else:
            clauses.append(column == value)
    return clauses


class RoomStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed: ChangeFeed,
        *,
        _session: Optional[AsyncSession] = None,
    ):
        self.session_factory = session_factory
        self.feed = feed
        self._session = _session
        self._pending: list[ChangeEvent] = []

    @asynccontextmanager
    async def atomic(self):
        """Yield a store bound to one transaction; nested calls reuse it."""
        if self._session is not None:
            yield self
            return

        session = self.session_factory()
        tx = RoomStore(self.session_factory, self.feed, _session=session)
        try:
            yield tx
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise DuplicateError(f"Unique constraint violated: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Store operation failed")
            raise StoreError("Store operation failed") from exc
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

        for event in tx._pending:
            self.feed.publish(event)

    @asynccontextmanager
    async def _unit(self):
        async with self.atomic() as tx:
            try:
                yield tx._session, tx._pending
                await tx._session.flush()
            except IntegrityError as exc:
                raise DuplicateError(f"Unique constraint violated: {exc.orig}") from exc

    def subscribe(self, table: str, **filters: Any) -> Subscription:
        return self.feed.subscribe(table, **filters)

    async def insert(self, row: ModelT) -> ModelT:
        async with self._unit() as (session, events):
            session.add(row)
            await session.flush()
            events.append(_event(INSERT, row))
        return row

    async def get(self, model: Type[ModelT], ident: str) -> Optional[ModelT]:
        async with self._unit() as (session, _):
            return await session.get(model, ident)

    async def select(
        self,
        model: Type[ModelT],
        *,
        order_by: Iterable = (),
        limit: Optional[int] = None,
        **filters: Any,
    ) -> list[ModelT]:
        statement = select(model).where(*_where(model, filters))
        for clause in order_by:
            statement = statement.order_by(clause)
        if limit is not None:
            statement = statement.limit(limit)
        async with self._unit() as (session, _):
            result = await session.exec(statement.execution_options(populate_existing=True))
            return list(result.all())

    async def first(self, model: Type[ModelT], *, order_by: Iterable = (), **filters: Any) -> Optional[ModelT]:
        rows = await self.select(model, order_by=order_by, limit=1, **filters)
        return rows[0] if rows else None

    async def count(self, model: Type[SQLModel], **filters: Any) -> int:
        statement = select(func.count()).select_from(model).where(*_where(model, filters))
        async with self._unit() as (session, _):
            result = await session.exec(statement)
            return int(result.one())

    async def max(self, model: Type[SQLModel], column: str, **filters: Any) -> Optional[Any]:
        statement = select(func.max(getattr(model, column))).where(*_where(model, filters))
        async with self._unit() as (session, _):
            result = await session.exec(statement)
            return result.one()

    async def update(self, model: Type[ModelT], values: dict[str, Any], **filters: Any) -> list[ModelT]:
        """Apply ``values`` to every row matching ``filters`` and return the updated rows."""
        async with self._unit() as (session, events):
            result = await session.exec(select(model).where(*_where(model, filters)))
            rows = list(result.all())
            for row in rows:
                for name, value in values.items():
                    setattr(row, name, value)
                session.add(row)
            await session.flush()
            events.extend(_event(UPDATE, row) for row in rows)
        return rows

    async def increment(self, model: Type[ModelT], column: str, by: int = 1, **filters: Any) -> list[ModelT]:
        """Server-side ``column = column + by``; never read-modify-write."""
        clauses = _where(model, filters)
        async with self._unit() as (session, events):
            await session.exec(
                update(model)
                .where(*clauses)
                .values({column: getattr(model, column) + by})
                .execution_options(synchronize_session=False)
            )
            result = await session.exec(
                select(model).where(*clauses).execution_options(populate_existing=True)
            )
            rows = list(result.all())
            events.extend(_event(UPDATE, row) for row in rows)
        return rows

