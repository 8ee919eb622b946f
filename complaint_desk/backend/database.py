"""
SQLAlchemy-backed collection client.

Serves the collections from an async engine (SQLite through aiosqlite by
default, any async driver URL otherwise). Every committed insert is
published to the realtime hub so live feeds behave exactly like the
in-memory client.
"""
import logging
from typing import Any, List, Mapping, Optional, Type

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from complaint_desk.backend.client import (
    CASCADES,
    CollectionClient,
    Filters,
    In,
    InsertHandler,
    Record,
    Subscription,
)
from complaint_desk.backend.errors import (
    BackendConstraintError,
    BackendError,
    BackendUnavailableError,
    UnknownCollectionError,
)
from complaint_desk.backend.realtime import RealtimeHub
from complaint_desk.models import MODELS, Base, BaseModel

logger = logging.getLogger(__name__)


class DatabaseCollectionClient(CollectionClient):
    """
    CollectionClient over an async SQLAlchemy engine.

    Features:
    - Equality and membership filters translated to WHERE clauses
    - Child-first cascading deletes
    - Realtime insert echo after commit
    """

    def __init__(self, engine: AsyncEngine, hub: Optional[RealtimeHub] = None):
        self.engine = engine
        self.session_factory = async_sessionmaker(engine, expire_on_commit=False)
        self.hub = hub or RealtimeHub()

    @classmethod
    def from_url(
        cls,
        url: str,
        echo: bool = False,
        hub: Optional[RealtimeHub] = None,
    ) -> "DatabaseCollectionClient":
        """Build a client with its own engine."""
        return cls(create_async_engine(url, echo=echo), hub=hub)

    async def create_schema(self) -> None:
        """Create all tables (development and tests; use migrations in production)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema created")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _model(self, collection: str) -> Type[BaseModel]:
        try:
            return MODELS[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    def _column(self, model: Type[BaseModel], name: str):
        if name not in model.__table__.columns:
            raise BackendConstraintError(
                f"Unknown column '{name}' on {model.__tablename__}",
                details={"collection": model.__tablename__, "column": name},
            )
        return getattr(model, name)

    def _conditions(self, model: Type[BaseModel], filters: Optional[Filters]) -> list:
        conditions = []
        for name, expected in (filters or {}).items():
            column = self._column(model, name)
            if isinstance(expected, In):
                conditions.append(column.in_(list(expected.values)))
            elif expected is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == expected)
        return conditions

    def _translate(self, exc: SQLAlchemyError, operation: str, collection: str) -> BackendError:
        details = {"operation": operation, "collection": collection, "error": str(exc)}
        if isinstance(exc, IntegrityError):
            return BackendConstraintError(f"Constraint violated during {operation} on {collection}", details)
        if isinstance(exc, (OperationalError, InterfaceError)):
            return BackendUnavailableError(f"Database unavailable during {operation} on {collection}", details)
        return BackendError(f"Database error during {operation} on {collection}", details)

    # -------------------------------------------------------------------------
    # CollectionClient
    # -------------------------------------------------------------------------

    async def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        model = self._model(collection)
        stmt = select(model).where(*self._conditions(model, filters))
        if order_by:
            column = self._column(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [row.to_dict() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Query on {collection} failed: {e}", exc_info=True)
            raise self._translate(e, "query", collection) from e

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        model = self._model(collection)
        for name in values:
            self._column(model, name)

        try:
            async with self.session_factory() as session:
                instance = model(**values)
                session.add(instance)
                await session.commit()
                await session.refresh(instance)
                record = instance.to_dict()
        except SQLAlchemyError as e:
            logger.error(f"Insert into {collection} failed: {e}", exc_info=True)
            raise self._translate(e, "insert", collection) from e

        logger.debug(f"Inserted {collection} record {record['id']}")
        self.hub.publish(collection, record)
        return record

    async def update(
        self,
        collection: str,
        filters: Filters,
        values: Mapping[str, Any],
    ) -> List[Record]:
        model = self._model(collection)
        for name in values:
            self._column(model, name)
        stmt = select(model).where(*self._conditions(model, filters))

        try:
            async with self.session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                for row in rows:
                    for name, value in values.items():
                        setattr(row, name, value)
                await session.commit()
                for row in rows:
                    await session.refresh(row)
                return [row.to_dict() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Update on {collection} failed: {e}", exc_info=True)
            raise self._translate(e, "update", collection) from e

    async def delete(self, collection: str, filters: Filters) -> int:
        try:
            async with self.session_factory() as session:
                removed = await self._delete(session, collection, filters)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Delete on {collection} failed: {e}", exc_info=True)
            raise self._translate(e, "delete", collection) from e

        logger.debug(f"Deleted {removed} {collection} record(s)")
        return removed

    async def _delete(self, session: AsyncSession, collection: str, filters: Filters) -> int:
        model = self._model(collection)
        conditions = self._conditions(model, filters)
        ids = list((await session.execute(select(model.id).where(*conditions))).scalars().all())
        if not ids:
            return 0

        for child, column in CASCADES.get(collection, ()):
            await self._delete(session, child, {column: In(ids)})

        await session.execute(sa_delete(model).where(model.id.in_(ids)))
        return len(ids)

    async def subscribe(
        self,
        collection: str,
        filters: Optional[Filters],
        handler: InsertHandler,
    ) -> Subscription:
        model = self._model(collection)
        for name in (filters or {}):
            self._column(model, name)
        return self.hub.register(collection, filters, handler)

    async def close(self) -> None:
        self.hub.clear()
        await self.engine.dispose()
