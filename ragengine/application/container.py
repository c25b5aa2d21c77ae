"""
Application service container.

Every long-lived collaborator (engine, vector store, embedding client,
model services, pipeline, planner, memory job) is built once here and
passed explicitly to the components that need it. The API lifespan and
the Celery worker both build their components through this module.

Dependencies: ragengine.configs, ragengine.boundary, ragengine.core
System role: Composition root
"""

import logging
import os
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from ragengine.boundary.db.connection import get_async_engine, get_async_session_factory
from ragengine.boundary.embeddings.backend import EmbeddingBackend, LangChainEmbeddingBackend
from ragengine.boundary.embeddings.embedding_client import EmbeddingClient
from ragengine.boundary.embeddings.embeddings_wrapper import FixedDimensionEmbeddings
from ragengine.boundary.llm.model_service import ChatModelService, ModelService, build_chat_model
from ragengine.boundary.llm.vision_ocr import GeminiVisionOcr, OcrAdapter
from ragengine.boundary.object_store import ObjectStore, get_object_store
from ragengine.boundary.vdb.base import VectorStore
from ragengine.boundary.vdb.vector_store_factory import get_vector_store
from ragengine.configs import Settings
from ragengine.core.agentic_system.agent.rag_agent import RAGAgent
from ragengine.core.agentic_system.planner import AgentPlanner, ToolRegistry
from ragengine.core.agentic_system.planner.tools import CsvExportTool, DocumentSearchTool, ReadOnlyQueryTool
from ragengine.core.citation_builder import CitationBuilder
from ragengine.core.document_processing.dispatcher import CeleryDispatcher, IngestionDispatcher, LocalDispatcher
from ragengine.core.document_processing.entrypoint import IngestionPipeline
from ragengine.core.document_processing.tasks import ChunkingTask, EmbeddingTask, ExtractionTask, VectorStoreTask
from ragengine.core.exceptions import ConfigurationError
from ragengine.core.memory import MemoryScheduler, MemorySummarizer
from ragengine.core.retriever import Retriever

logger = logging.getLogger(__name__)


@dataclass
class ModelServices:
    """Model seams, one per workload."""

    chat: ModelService
    summary: ModelService
    planner: ModelService
    ocr: OcrAdapter | None = None


@dataclass
class ServiceContainer:
    """Shared application components."""

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker
    vector_store: VectorStore
    embedding_client: EmbeddingClient
    retriever: Retriever
    pipeline: IngestionPipeline
    dispatcher: IngestionDispatcher
    rag_agent: RAGAgent
    planner: AgentPlanner
    summarizer: MemorySummarizer
    scheduler: MemoryScheduler

    async def aclose(self) -> None:
        await self.scheduler.stop()
        await self.dispatcher.aclose()
        await self.engine.dispose()
        logger.info(f"{__name__}:aclose - container closed")


def assemble_container(
    settings: Settings,
    engine: AsyncEngine,
    models: ModelServices,
    embedding_backend: EmbeddingBackend,
    object_store: ObjectStore,
    vector_store: VectorStore | None = None,
) -> ServiceContainer:
    """
    Wire every component from its external seams.

    Args:
        settings: Application settings
        engine: Database engine
        models: Model services
        embedding_backend: Embedding provider
        object_store: Raw document source
        vector_store: Vector store (built from settings when omitted)

    Returns:
        ServiceContainer
    """
    session_factory = get_async_session_factory(engine)
    vs_settings = settings.vector_store
    vector_store = vector_store or get_vector_store(vs_settings, session_factory)

    embedding_client = EmbeddingClient(
        embedding_backend,
        dimension=vs_settings.embedding_dimension,
        batch_size=vs_settings.embedding_batch_size,
        max_concurrent_requests=vs_settings.embedding_max_concurrent_requests,
        max_attempts=vs_settings.embedding_max_attempts,
        backoff_initial=vs_settings.embedding_backoff_initial,
        backoff_max=vs_settings.embedding_backoff_max,
    )
    retriever = Retriever(
        embedding_client,
        vector_store,
        citation_builder=CitationBuilder(),
        min_similarity=vs_settings.similarity_threshold,
        default_k=vs_settings.top_k,
    )

    ingestion = settings.ingestion
    pipeline = IngestionPipeline(
        session_factory=session_factory,
        object_store=object_store,
        extraction_task=ExtractionTask(models.ocr, ingestion.max_document_bytes),
        chunking_task=ChunkingTask(ingestion.chunk_size_tokens, ingestion.chunk_overlap_tokens),
        embedding_task=EmbeddingTask(embedding_client),
        vector_store_task=VectorStoreTask(vector_store),
        settings=ingestion,
    )
    if settings.celery.dispatch_mode.lower() == "celery":
        dispatcher: IngestionDispatcher = CeleryDispatcher()
    else:
        dispatcher = LocalDispatcher(pipeline)

    registry = ToolRegistry(
        [
            ReadOnlyQueryTool(session_factory, row_limit=settings.agent.query_row_limit),
            DocumentSearchTool(retriever),
            CsvExportTool(),
        ]
    )
    summarizer = MemorySummarizer(
        session_factory,
        models.summary,
        embedding_client,
        vector_store,
        settings.memory,
    )

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        vector_store=vector_store,
        embedding_client=embedding_client,
        retriever=retriever,
        pipeline=pipeline,
        dispatcher=dispatcher,
        rag_agent=RAGAgent(models.chat, retriever, settings.chat),
        planner=AgentPlanner(models.planner, registry, settings.agent),
        summarizer=summarizer,
        scheduler=MemoryScheduler(summarizer, settings.memory.interval_seconds),
    )


def build_container(settings: Settings) -> ServiceContainer:
    """
    Build the production container (Gemini models and embeddings).

    Raises:
        ConfigurationError: Missing Google API key
    """
    llm = settings.llm
    api_key = llm.google_api_key or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ConfigurationError("Google API key missing: set LLM_GOOGLE_API_KEY or GOOGLE_API_KEY")

    models = ModelServices(
        chat=ChatModelService(build_chat_model(llm, llm.chat_model), llm.chat_model),
        summary=ChatModelService(build_chat_model(llm, llm.summary_model), llm.summary_model),
        planner=ChatModelService(build_chat_model(llm, llm.planner_model), llm.planner_model),
        ocr=GeminiVisionOcr(build_chat_model(llm, llm.vision_model)),
    )
    embeddings = FixedDimensionEmbeddings(
        model=settings.vector_store.embedding_model,
        output_dimensionality=settings.vector_store.embedding_dimension,
        google_api_key=api_key,
    )
    backend = LangChainEmbeddingBackend(
        embeddings,
        model_version=f"{settings.vector_store.embedding_model}@{settings.vector_store.embedding_dimension}",
    )
    return assemble_container(
        settings,
        engine=get_async_engine(settings.database),
        models=models,
        embedding_backend=backend,
        object_store=get_object_store(settings.object_store),
    )
