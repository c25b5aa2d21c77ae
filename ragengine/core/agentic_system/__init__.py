"""
Agentic components: the chat RAG agent and the tool-calling planner.
"""
