"""
Document service orchestrator.

Registers stored objects as documents, triggers background ingestion and
reports ingestion status. Processing itself happens in the
IngestionPipeline, reached through an IngestionDispatcher.

Dependencies: ragengine.boundary.db, ragengine.core.document_processing
System role: Document management orchestration
"""

import logging
import posixpath
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from ragengine.boundary.db.CRUD.document_crud import document_crud
from ragengine.boundary.db.models.document_model import DocumentModel
from ragengine.core.document_processing.dispatcher import IngestionDispatcher
from ragengine.core.document_processing.entrypoint import REINGESTABLE_STATUSES
from ragengine.core.exceptions import DocumentNotFoundError, ValidationError
from ragengine.models.document import (
    DocumentStatus,
    DocumentStatusResponse,
    FailureKind,
    IngestAcceptedResponse,
    RegisterDocumentRequest,
)

logger = logging.getLogger(__name__)

SUPPORTED_URI_SCHEMES = ("s3", "file")


def default_document_name(source_uri: str) -> str:
    """Last path segment of the source URI."""
    parsed = urlparse(source_uri)
    return posixpath.basename(parsed.path.rstrip("/")) or source_uri


def to_status_response(document: DocumentModel) -> DocumentStatusResponse:
    return DocumentStatusResponse(
        document_id=document.id,
        name=document.name,
        status=document.status,
        failure_kind=document.failure_kind,
        error_message=document.error_message,
        chunk_count=document.chunk_count,
        attempts=document.attempts,
        updated_at=document.updated_at,
    )


class DocumentService:
    """
    Document service orchestrator.

    Handles the document lifecycle up to the hand-off to ingestion workers.
    """

    def __init__(self, db: AsyncSession, dispatcher: IngestionDispatcher) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document metadata
            dispatcher: Schedules background ingestion
        """
        self.db = db
        self._dispatcher = dispatcher

    async def register_document(self, request: RegisterDocumentRequest) -> DocumentStatusResponse:
        """
        Create a document row in ``uploaded`` status.

        Raises:
            ValidationError: Unsupported source URI scheme
        """
        scheme = urlparse(request.source_uri).scheme
        if scheme not in SUPPORTED_URI_SCHEMES:
            raise ValidationError(
                f"Unsupported source URI scheme '{scheme}', expected one of {SUPPORTED_URI_SCHEMES}",
                field="source_uri",
            )

        document = await document_crud.create(
            self.db,
            owner_id=request.owner_id,
            source_uri=request.source_uri,
            name=request.name or default_document_name(request.source_uri),
            mime_type=request.mime_type,
            status=DocumentStatus.UPLOADED,
        )
        await self.db.commit()
        logger.info(f"{__name__}:register_document - document_id={document.id}, owner_id={request.owner_id}")
        return to_status_response(document)

    async def request_ingest(self, document_id: str, reingest: bool = False) -> IngestAcceptedResponse:
        """
        Trigger ingestion and return immediately.

        A document already being processed, already processed (unless
        ``reingest``) or terminally failed (unless ``reingest``) is not
        dispatched; the response reports ``accepted=False`` with its current
        status.

        Raises:
            DocumentNotFoundError: Unknown document
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        if reingest:
            accepted = document.status in REINGESTABLE_STATUSES
        else:
            accepted = document.status == DocumentStatus.UPLOADED or (
                document.status == DocumentStatus.FAILED and document.failure_kind == FailureKind.RETRYABLE
            )

        if accepted:
            await self._dispatcher.dispatch(document_id, reingest=reingest)
        logger.info(
            f"{__name__}:request_ingest - document_id={document_id}, status={document.status.value}, "
            f"reingest={reingest}, accepted={accepted}"
        )
        return IngestAcceptedResponse(document_id=document_id, status=document.status, accepted=accepted)

    async def get_status(self, document_id: str) -> DocumentStatusResponse:
        """
        Current ingestion status.

        Raises:
            DocumentNotFoundError: Unknown document
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return to_status_response(document)

    async def list_documents(self, owner_id: str) -> list[DocumentStatusResponse]:
        documents = await document_crud.get_by_owner(self.db, owner_id)
        return [to_status_response(d) for d in documents]
