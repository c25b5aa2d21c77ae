"""
RAG agent schemas.

Context assembled for one chat turn.

Dependencies: langchain_core, pydantic
System role: Agent data structures
"""

from dataclasses import dataclass, field

from langchain_core.messages import BaseMessage

from ragengine.core.retriever import RecalledMemory, RetrievedChunk
from ragengine.models.chat import ChatMode
from ragengine.models.citation import Citation


@dataclass
class TurnContext:
    """
    Prompt messages plus the grounding that produced them.

    ``citations`` is empty whenever ``grounded`` is False.
    """

    mode: ChatMode
    messages: list[BaseMessage]
    grounded: bool
    hits: list[RetrievedChunk] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    memories: list[RecalledMemory] = field(default_factory=list)
