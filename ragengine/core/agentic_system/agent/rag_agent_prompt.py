"""
RAG agent prompts.

Prompt templates for grounded and conversational chat turns.

Dependencies: langchain_core.prompts
System role: Prompt templates for RAG agent behavior
"""

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

GROUNDED_SYSTEM_PROMPT = """You are a helpful assistant that answers questions using the user's documents.

## Instructions
1. Use ONLY the numbered sources below to answer
2. Cite every claim with the number of its source in square brackets, e.g. [1] or [2][3]
3. If the sources do not contain the answer, say so clearly
4. Be concise but thorough

## Sources
{sources}

## What you remember about this user
{memories}"""

UNGROUNDED_SYSTEM_PROMPT = """You are a helpful assistant.

No document in the user's library matched this question. Answer from general
knowledge, say plainly that the answer is not based on their documents, and
do not cite sources.

## What you remember about this user
{memories}"""

CONVERSATIONAL_SYSTEM_PROMPT = """You are a helpful, concise assistant.

## What you remember about this user
{memories}"""

DECLINE_ANSWER = (
    "I couldn't find anything in your documents that answers this question, "
    "so I can't give a grounded answer."
)

NO_MEMORIES = "Nothing yet."


def _template(system_prompt: str) -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", system_prompt),
        MessagesPlaceholder("history"),
        ("human", "{question}"),
    ])


GROUNDED_PROMPT = _template(GROUNDED_SYSTEM_PROMPT)
UNGROUNDED_PROMPT = _template(UNGROUNDED_SYSTEM_PROMPT)
CONVERSATIONAL_PROMPT = _template(CONVERSATIONAL_SYSTEM_PROMPT)
