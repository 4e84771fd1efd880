"""
Shared fixtures: stub collaborators for the answer orchestrator and a TestClient
wired to them through dependency overrides. No Milvus, HF, OpenAI or search API needed.
"""

import pytest
from fastapi.testclient import TestClient

from docqa.api.dependencies import get_orchestrator, get_session_store
from docqa.core.session_store import SessionStore
from docqa.main import app
from docqa.services.answer_service import AnswerOrchestrator


class StubRetriever:
    def __init__(self) -> None:
        self.chunks: list = []
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    def retrieve(self, question, scope_ref, deadline):
        deadline.check("vector_store")
        self.calls.append((question, scope_ref))
        if self.error:
            raise self.error
        return list(self.chunks)


class StubWebSearch:
    def __init__(self) -> None:
        self.results: list = []
        self.error: Exception | None = None
        self.calls: list[str] = []

    def search(self, query, deadline):
        deadline.check("web_search")
        self.calls.append(query)
        if self.error:
            raise self.error
        return list(self.results)


class StubLLM:
    """Echoes the system messages (instructions + context) unless a fixed reply is set."""

    def __init__(self) -> None:
        self.reply: str | None = None
        self.error: Exception | None = None
        self.calls: list[list[dict]] = []

    def generate(self, messages, deadline):
        deadline.check("llm")
        self.calls.append(messages)
        if self.error:
            raise self.error
        if self.reply is not None:
            return self.reply
        return "\n".join(m["content"] for m in messages if m["role"] == "system")


@pytest.fixture
def retriever() -> StubRetriever:
    return StubRetriever()


@pytest.fixture
def web_search() -> StubWebSearch:
    return StubWebSearch()


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def orchestrator(retriever, web_search, llm) -> AnswerOrchestrator:
    return AnswerOrchestrator(
        retriever,
        web_search,
        llm,
        web_fallback_enabled=True,
        use_history=True,
        history_turns=6,
        log_prompts=False,
        deadline_seconds=30.0,
    )


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore(max_sessions=10, ttl_seconds=600.0, max_turns=5)


@pytest.fixture
def client(orchestrator, sessions):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_session_store] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()
