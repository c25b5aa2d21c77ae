"""
Vector store indexing task.

Writes embedded chunks to the documents namespace and prunes chunks left
over from earlier ingestion generations.

Dependencies: ragengine.boundary.vdb
System role: Final stage of document ingestion pipeline
"""

import logging

from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.vector_schemas import DOCUMENTS_NAMESPACE, VectorRecord
from ragengine.core.document_processing.models import Chunk

logger = logging.getLogger(__name__)


def chunk_to_record(chunk: Chunk, owner_id: str, document_name: str) -> VectorRecord:
    return VectorRecord(
        id=chunk.id,
        owner_id=owner_id,
        document_id=chunk.document_id,
        text=chunk.text,
        vector=chunk.vector or [],
        metadata={
            "document_name": document_name,
            "source_label": chunk.source_label,
            "ordinal": chunk.ordinal,
            "offset_start": chunk.offset_start,
            "offset_end": chunk.offset_end,
            "embedding_model_version": chunk.embedding_model_version,
        },
    )


def record_to_chunk(record: VectorRecord) -> Chunk:
    metadata = record.metadata
    return Chunk(
        id=record.id,
        document_id=record.document_id or "",
        ordinal=int(metadata.get("ordinal", 0)),
        offset_start=int(metadata.get("offset_start", 0)),
        offset_end=int(metadata.get("offset_end", 0)),
        text=record.text,
        source_label=str(metadata.get("source_label", "")),
        vector=record.vector,
        embedding_model_version=metadata.get("embedding_model_version"),
    )


class VectorStoreTask:
    """Upload document chunks to the vector store."""

    def __init__(self, vector_store: VectorStore) -> None:
        self._vector_store = vector_store

    async def upload(self, chunks: list[Chunk], owner_id: str, document_name: str) -> list[str]:
        """
        Upsert chunks; returns their ids.

        Raises:
            ValueError: A chunk has no vector
        """
        missing = [chunk.id for chunk in chunks if chunk.vector is None]
        if missing:
            raise ValueError(f"{len(missing)} chunks have no embedding")

        records = [chunk_to_record(chunk, owner_id, document_name) for chunk in chunks]
        await self._vector_store.upsert_many(DOCUMENTS_NAMESPACE, records)
        logger.info(f"{__name__}:upload - indexed {len(records)} chunks owner_id={owner_id}")
        return [record.id for record in records]

    async def prune(self, document_id: str, keep_ids: list[str]) -> int:
        """Delete the document's chunks that are not in ``keep_ids``."""
        return await self._vector_store.delete_where(
            DOCUMENTS_NAMESPACE,
            {"document_id": document_id},
            keep_ids=keep_ids,
        )
