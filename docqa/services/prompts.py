"""Prompt assembly for the document and web-search answer paths."""

from typing import Any

from docqa.core.models import Chunk, ConversationTurn, SearchSnippet

DOCUMENT_SYSTEM_PROMPT = (
    "You are the Deepwoods AI assistant. Answer the user's question using the context "
    "from the sustainability reports and the conversation so far. If the context does not "
    "contain the answer, say so instead of guessing."
)
WEB_SYSTEM_PROMPT = "You are an AI assistant that answers using search results."


def build_document_context(chunks: list[Chunk]) -> str:
    """Chunk contents in the given (rank) order."""
    return "\n\n".join(c.content for c in chunks)


def build_search_context(snippets: list[SearchSnippet]) -> str:
    return "".join(f"Title: {s.title}\nLink: {s.link}\nSnippet: {s.snippet}\n\n" for s in snippets)


def history_messages(turns: list[ConversationTurn], max_turns: int) -> list[dict[str, Any]]:
    """Most recent turns as alternating user/assistant chat messages."""
    if max_turns <= 0:
        return []
    messages: list[dict[str, Any]] = []
    for turn in turns[-max_turns:]:
        messages.append({"role": "user", "content": turn.question})
        messages.append({"role": "assistant", "content": turn.answer})
    return messages


def build_document_messages(
    question: str,
    context: str,
    history: list[ConversationTurn],
    max_history_turns: int,
) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": f"{DOCUMENT_SYSTEM_PROMPT}\n\n<context>\n{context}\n</context>"},
        *history_messages(history, max_history_turns),
        {"role": "user", "content": question},
    ]


def build_web_messages(question: str, context: str) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": WEB_SYSTEM_PROMPT},
        {"role": "system", "content": context},
        {"role": "user", "content": question},
    ]
