"""
RAG chat agent.
"""

from ragengine.core.agentic_system.agent.fragment_stream import FragmentStream
from ragengine.core.agentic_system.agent.rag_agent import RAGAgent
from ragengine.core.agentic_system.agent.rag_agent_schema import TurnContext

__all__ = ["FragmentStream", "RAGAgent", "TurnContext"]
