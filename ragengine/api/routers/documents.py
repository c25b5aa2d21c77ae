"""
Document API endpoints.

Routes:
- POST /documents - Register a stored object as a document
- POST /documents/{id}/ingest - Trigger background ingestion (202)
- GET /documents/{id} - Poll ingestion status
- GET /documents?owner_id= - List a user's documents

Dependencies: ragengine.application.services, ragengine.models
System role: Document HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from ragengine.api.deps import get_document_service
from ragengine.application.services.document_service import DocumentService
from ragengine.models.document import DocumentStatusResponse, IngestAcceptedResponse, RegisterDocumentRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentStatusResponse, status_code=status.HTTP_201_CREATED)
async def register_document(
    request: RegisterDocumentRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    """
    Register an uploaded object so it can be ingested.

    Args:
        request: Owner, source URI and MIME type
        document_service: Injected DocumentService

    Returns:
        DocumentStatusResponse: The new document in ``uploaded`` status
    """
    return await document_service.register_document(request)


@router.post(
    "/{document_id}/ingest",
    response_model=IngestAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def ingest_document(
    document_id: str,
    reingest: bool = Query(default=False, description="Reset a processed or failed document first"),
    document_service: DocumentService = Depends(get_document_service),
) -> IngestAcceptedResponse:
    """
    Trigger ingestion and return immediately.

    Poll ``GET /documents/{document_id}`` for progress.
    """
    return await document_service.request_ingest(document_id, reingest=reingest)


@router.get("/{document_id}", response_model=DocumentStatusResponse)
async def get_document_status(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    return await document_service.get_status(document_id)


@router.get("", response_model=list[DocumentStatusResponse])
async def list_documents(
    owner_id: str = Query(min_length=1),
    document_service: DocumentService = Depends(get_document_service),
) -> list[DocumentStatusResponse]:
    return await document_service.list_documents(owner_id)
