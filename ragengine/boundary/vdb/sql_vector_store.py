"""
SQL-backed vector store.

Vectors live in the ``vector_records`` table; column filters are pushed
down to SQL and cosine ranking happens in process. Every call runs in its
own transaction and commits before returning, so the caller reads its own
writes. Replicas lag the primary by at most
``VECTOR_STORE_MAX_STALENESS_SECONDS``.

Dependencies: sqlalchemy, tenacity
System role: Durable VectorStore implementation
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ragengine.boundary.db.models.vector_record_model import VectorRecordModel
from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.similarity import rank
from ragengine.boundary.vdb.vector_schemas import RECORD_FILTER_FIELDS, VectorRecord, VectorSearchResult
from ragengine.core.exceptions import TransientUpstreamError, VectorStoreError

logger = logging.getLogger(__name__)

_db_retry = retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(3),
    wait=wait_exponential_jitter(initial=0.2, max=2),
    before_sleep=lambda retry_state: logger.warning(
        f"{__name__} - Retry {retry_state.attempt_number}/3 after database error"
    ),
    reraise=True,
)


def _split_filter(filter: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    column_filter: dict[str, Any] = {}
    metadata_filter: dict[str, Any] = {}
    for key, value in (filter or {}).items():
        (column_filter if key in RECORD_FILTER_FIELDS else metadata_filter)[key] = value
    return column_filter, metadata_filter


def _to_record(row: VectorRecordModel) -> VectorRecord:
    return VectorRecord(
        id=row.id,
        owner_id=row.owner_id,
        document_id=row.document_id,
        text=row.text,
        vector=row.vector,
        metadata=row.record_metadata or {},
        updated_at=row.updated_at,
    )


class SQLVectorStore(VectorStore):
    """VectorStore over the application database."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def upsert_many(self, namespace: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        try:
            await self._upsert_many(namespace, records)
        except OperationalError as e:
            raise TransientUpstreamError(f"Vector upsert failed: {e}", service="vector_store") from e
        except SQLAlchemyError as e:
            raise VectorStoreError(f"Vector upsert failed: {e}", operation="upsert") from e
        logger.info(f"{__name__}:upsert_many - upserted {len(records)} records into {namespace}")

    @_db_retry
    async def _upsert_many(self, namespace: str, records: list[VectorRecord]) -> None:
        now = datetime.now(timezone.utc)
        async with self._session_factory() as session:
            async with session.begin():
                for record in records:
                    await session.merge(
                        VectorRecordModel(
                            namespace=namespace,
                            id=record.id,
                            owner_id=record.owner_id,
                            document_id=record.document_id,
                            text=record.text,
                            vector=list(record.vector),
                            record_metadata=dict(record.metadata),
                            updated_at=now,
                        )
                    )

    async def query(
        self,
        namespace: str,
        vector: list[float],
        k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorSearchResult]:
        column_filter, metadata_filter = _split_filter(filter)
        try:
            rows = await self._select(namespace, column_filter)
        except OperationalError as e:
            raise TransientUpstreamError(f"Vector query failed: {e}", service="vector_store") from e
        except SQLAlchemyError as e:
            raise VectorStoreError(f"Vector query failed: {e}", operation="query") from e

        records = (_to_record(row) for row in rows)
        return rank((r for r in records if r.matches(metadata_filter)), vector, k)

    @_db_retry
    async def _select(self, namespace: str, column_filter: dict[str, Any]) -> list[VectorRecordModel]:
        stmt = select(VectorRecordModel).where(VectorRecordModel.namespace == namespace)
        for key, value in column_filter.items():
            stmt = stmt.where(getattr(VectorRecordModel, key) == value)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def delete(self, namespace: str, ids: Iterable[str]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        stmt = delete(VectorRecordModel).where(
            VectorRecordModel.namespace == namespace,
            VectorRecordModel.id.in_(ids),
        )
        return await self._execute_delete(stmt)

    async def delete_where(
        self,
        namespace: str,
        filter: dict[str, Any],
        keep_ids: Iterable[str] = (),
    ) -> int:
        column_filter, metadata_filter = _split_filter(filter)
        keep = set(keep_ids)

        if metadata_filter:
            rows = await self._select(namespace, column_filter)
            doomed = [row.id for row in rows if row.id not in keep and _to_record(row).matches(metadata_filter)]
            return await self.delete(namespace, doomed)

        stmt = delete(VectorRecordModel).where(VectorRecordModel.namespace == namespace)
        for key, value in column_filter.items():
            stmt = stmt.where(getattr(VectorRecordModel, key) == value)
        if keep:
            stmt = stmt.where(VectorRecordModel.id.not_in(keep))
        removed = await self._execute_delete(stmt)
        if removed:
            logger.info(f"{__name__}:delete_where - pruned {removed} records from {namespace}")
        return removed

    async def _execute_delete(self, stmt) -> int:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.rowcount
        except SQLAlchemyError as e:
            raise VectorStoreError(f"Vector delete failed: {e}", operation="delete") from e

    async def count(self, namespace: str, filter: dict[str, Any] | None = None) -> int:
        column_filter, metadata_filter = _split_filter(filter)
        if metadata_filter:
            rows = await self._select(namespace, column_filter)
            return sum(1 for row in rows if _to_record(row).matches(metadata_filter))

        stmt = select(func.count()).select_from(VectorRecordModel).where(VectorRecordModel.namespace == namespace)
        for key, value in column_filter.items():
            stmt = stmt.where(getattr(VectorRecordModel, key) == value)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())
