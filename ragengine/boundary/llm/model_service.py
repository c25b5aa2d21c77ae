"""
LLM generation service.

``ModelService`` is the seam every component talks to: streamed answers,
single completions (summaries) and function selection (planning). Each
call carries a RequestContext bounding its execution time.

Dependencies: langchain_core, langchain_google_genai
System role: Model provider adapter
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ragengine.configs.llm import LLMSettings
from ragengine.core.exceptions import ConfigurationError, GenerationError, RequestCancelledError
from ragengine.core.request_context import RequestContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """One function selected by the model, in call order."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    id: str | None = None


def message_text(content: Any) -> str:
    """Flatten LangChain message content (str or content-part list) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content or "")


class ModelService(ABC):
    """Model provider interface."""

    @abstractmethod
    def stream(self, messages: list[BaseMessage], ctx: RequestContext) -> AsyncIterator[str]:
        """Yield answer text fragments in order."""

    @abstractmethod
    async def complete(self, messages: list[BaseMessage], ctx: RequestContext) -> str:
        """Return one full completion."""

    @abstractmethod
    async def select_tools(
        self,
        messages: list[BaseMessage],
        tools: list[dict[str, Any]],
        ctx: RequestContext,
    ) -> list[ToolCall]:
        """
        Ask the model to choose functions.

        Args:
            messages: Prompt messages
            tools: Function definitions ``{name, description, parameters}``
            ctx: Request context

        Returns:
            Selected calls in the order the model emitted them
        """


class ChatModelService(ModelService):
    """ModelService over any LangChain chat model."""

    def __init__(self, model: BaseChatModel, model_name: str = "unknown") -> None:
        self._model = model
        self._model_name = model_name

    async def stream(self, messages: list[BaseMessage], ctx: RequestContext) -> AsyncIterator[str]:
        logger.info(f"{__name__}:stream - START model={self._model_name}, messages={len(messages)}")
        fragment_count = 0
        try:
            async for chunk in self._model.astream(messages):
                ctx.raise_if_cancelled()
                text = message_text(chunk.content)
                if text:
                    fragment_count += 1
                    yield text
        except (RequestCancelledError, asyncio.CancelledError, GeneratorExit):
            raise
        except Exception as e:
            logger.error(f"{__name__}:stream - FAILED after {fragment_count} fragments - {type(e).__name__}: {e}")
            raise GenerationError(f"Model stream failed: {e}") from e
        logger.info(f"{__name__}:stream - END fragments={fragment_count}")

    async def complete(self, messages: list[BaseMessage], ctx: RequestContext) -> str:
        try:
            response = await asyncio.wait_for(self._model.ainvoke(messages), timeout=ctx.remaining())
        except asyncio.TimeoutError as e:
            raise GenerationError("Model call timed out") from e
        except Exception as e:
            logger.error(f"{__name__}:complete - FAILED - {type(e).__name__}: {e}")
            raise GenerationError(f"Model call failed: {e}") from e
        return message_text(response.content)

    async def select_tools(
        self,
        messages: list[BaseMessage],
        tools: list[dict[str, Any]],
        ctx: RequestContext,
    ) -> list[ToolCall]:
        bound = self._model.bind_tools(tools)
        try:
            response = await asyncio.wait_for(bound.ainvoke(messages), timeout=ctx.remaining())
        except asyncio.TimeoutError as e:
            raise GenerationError("Tool selection timed out") from e
        except Exception as e:
            logger.error(f"{__name__}:select_tools - FAILED - {type(e).__name__}: {e}")
            raise GenerationError(f"Tool selection failed: {e}") from e

        calls = [
            ToolCall(name=call["name"], args=dict(call.get("args") or {}), id=call.get("id"))
            for call in getattr(response, "tool_calls", None) or []
        ]
        logger.info(f"{__name__}:select_tools - model selected {[c.name for c in calls]}")
        return calls


def build_chat_model(settings: LLMSettings, model_name: str) -> ChatGoogleGenerativeAI:
    """
    Construct the Gemini chat model.

    Raises:
        ConfigurationError: No API key configured
    """
    api_key = settings.google_api_key or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ConfigurationError("Google API key missing: set LLM_GOOGLE_API_KEY or GOOGLE_API_KEY")

    return ChatGoogleGenerativeAI(
        model=model_name,
        temperature=settings.temperature,
        google_api_key=api_key,
        timeout=settings.request_timeout_seconds,
    )
