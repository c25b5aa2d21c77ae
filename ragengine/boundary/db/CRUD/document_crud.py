"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel
with compare-and-set status transitions for the ingestion pipeline.

Dependencies: sqlalchemy, ragengine.boundary.db.models
System role: Document persistence operations
"""

from typing import Any, Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.base import utcnow
from ragengine.boundary.db.CRUD.base_crud import BaseCRUD
from ragengine.boundary.db.models.document_model import DocumentModel
from ragengine.core.exceptions import ConcurrencyConflictError, DocumentNotFoundError
from ragengine.models.document import DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with owner/status queries and optimistic status
    transitions. Status must never be written through ``update_by_id``.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve all documents owned by a user.

        Args:
            session: Async database session
            owner_id: Owning user id
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels belonging to the user
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.owner_id == owner_id)
            .order_by(DocumentModel.created_at)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_status(
        self,
        session: AsyncSession,
        status: DocumentStatus,
        limit: int | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve documents by processing status.

        Args:
            session: Async database session
            status: Document processing status to filter by
            limit: Maximum number of documents to return

        Returns:
            Sequence of DocumentModels with matching status
        """
        stmt = select(DocumentModel).where(DocumentModel.status == status)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def transition_status(
        self,
        session: AsyncSession,
        id: str,
        expected_version: int,
        status: DocumentStatus,
        from_statuses: Iterable[DocumentStatus] | None = None,
        **fields: Any,
    ) -> DocumentModel:
        """
        Compare-and-set the document status.

        Issues ``UPDATE ... WHERE id = :id AND version = :expected`` (and
        optionally ``status IN :from_statuses``) and bumps the version.

        Args:
            session: Async database session
            id: Document id
            expected_version: Version the caller last observed
            status: Target status
            from_statuses: Statuses the document must currently be in
            **fields: Extra columns written in the same statement

        Returns:
            The refreshed DocumentModel

        Raises:
            ConcurrencyConflictError: If another writer moved the document first
            DocumentNotFoundError: If the document vanished after the update
        """
        conditions = [DocumentModel.id == id, DocumentModel.version == expected_version]
        if from_statuses is not None:
            conditions.append(DocumentModel.status.in_(list(from_statuses)))

        stmt = (
            update(DocumentModel)
            .where(*conditions)
            .values(status=status, version=expected_version + 1, updated_at=utcnow(), **fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrencyConflictError("Document", id, expected_version)

        document = await self.get_by_id(session, id)
        if document is None:
            raise DocumentNotFoundError(id)
        return document


# Singleton instance for convenience
document_crud = DocumentCRUD()
