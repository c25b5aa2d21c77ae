"""
RAG chat agent.

Assembles per-turn context (history, retrieved sources, recalled memories)
and streams the model's answer as a FragmentStream.

Dependencies: langchain_core, ragengine.core.retriever, ragengine.boundary.llm
System role: RAG Q&A agent orchestration
"""

import logging

from langchain_core.messages import BaseMessage

from ragengine.boundary.llm.model_service import ModelService
from ragengine.configs.chat import ChatSettings
from ragengine.core.agentic_system.agent.fragment_stream import FragmentStream
from ragengine.core.agentic_system.agent.rag_agent_prompt import (
    CONVERSATIONAL_PROMPT,
    GROUNDED_PROMPT,
    NO_MEMORIES,
    UNGROUNDED_PROMPT,
)
from ragengine.core.agentic_system.agent.rag_agent_schema import TurnContext
from ragengine.core.exceptions import TransientUpstreamError
from ragengine.core.request_context import RequestContext
from ragengine.core.retriever import RecalledMemory, Retriever, RetrievalResult
from ragengine.models.chat import ChatMode

logger = logging.getLogger(__name__)


def format_sources(result: RetrievalResult) -> str:
    blocks = []
    for number, hit in enumerate(result.hits, start=1):
        name = result.citations[number - 1].document_name
        blocks.append(f"[{number}] {name}, {hit.chunk.source_label}\n{hit.chunk.text}")
    return "\n\n".join(blocks)


def format_memories(memories: list[RecalledMemory]) -> str:
    if not memories:
        return NO_MEMORIES
    return "\n".join(f"- {memory.summary_text}" for memory in memories)


class RAGAgent:
    """
    RAG Q&A agent with citation support.

    Retrieval happens once per turn in ``assemble_context``; ``generate``
    only talks to the model.
    """

    def __init__(
        self,
        model_service: ModelService,
        retriever: Retriever,
        settings: ChatSettings | None = None,
    ) -> None:
        """
        Initialize RAG agent.

        Args:
            model_service: Model provider
            retriever: Retrieval engine for sources and memories
            settings: Context sizing (defaults if None)
        """
        self._model_service = model_service
        self._retriever = retriever
        self._settings = settings or ChatSettings()

    async def assemble_context(
        self,
        user_id: str,
        question: str,
        history: list[BaseMessage],
        mode: ChatMode,
        ctx: RequestContext,
    ) -> TurnContext:
        """
        Build the prompt for one turn.

        Grounded mode retrieves top-k sources and instructs the model to
        answer only from them with ``[n]`` markers. Memories are recalled in
        both modes.

        Raises:
            TransientUpstreamError: Retrieval failed
            ValidationError: Empty question
        """
        ctx.raise_if_cancelled()

        if mode == ChatMode.GROUNDED:
            retrieval = await self._retriever.retrieve(
                question, user_id, k=self._settings.grounded_top_k, ctx=ctx
            )
            query_vector = retrieval.query_vector
        else:
            retrieval = None
            query_vector = await self._embed_for_memories(question, ctx)

        memories = await self._recall(user_id, query_vector)
        variables = {"question": question, "history": history, "memories": format_memories(memories)}

        if retrieval is not None and retrieval.grounded:
            prompt = GROUNDED_PROMPT
            variables["sources"] = format_sources(retrieval)
        elif retrieval is not None:
            prompt = UNGROUNDED_PROMPT
        else:
            prompt = CONVERSATIONAL_PROMPT

        messages = prompt.invoke(variables).to_messages()
        grounded = retrieval is not None and retrieval.grounded
        logger.info(
            f"{__name__}:assemble_context - mode={mode.value}, grounded={grounded}, "
            f"hits={len(retrieval.hits) if retrieval else 0}, memories={len(memories)}, history={len(history)}"
        )
        return TurnContext(
            mode=mode,
            messages=messages,
            grounded=grounded,
            hits=retrieval.hits if grounded else [],
            citations=retrieval.citations if grounded else [],
            memories=memories,
        )

    def generate(self, context: TurnContext, ctx: RequestContext) -> FragmentStream:
        """Start streaming the answer for an assembled context."""
        return FragmentStream(self._model_service.stream(context.messages, ctx), ctx)

    async def _embed_for_memories(self, question: str, ctx: RequestContext) -> list[float]:
        if self._settings.memory_top_k <= 0:
            return []
        try:
            return await self._retriever.embed_query(question, ctx)
        except TransientUpstreamError as e:
            logger.warning(f"{__name__}:_embed_for_memories - memory recall skipped: {e.message}")
            return []

    async def _recall(self, user_id: str, query_vector: list[float]) -> list[RecalledMemory]:
        if self._settings.memory_top_k <= 0 or not query_vector:
            return []
        try:
            return await self._retriever.recall_memories(user_id, query_vector, k=self._settings.memory_top_k)
        except TransientUpstreamError as e:
            logger.warning(f"{__name__}:_recall - memory recall skipped: {e.message}")
            return []
