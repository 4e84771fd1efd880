"""
Answer orchestration: document retrieval → LLM, with web-search fallback.

LangGraph flow (one compiled graph per orchestrator):

    START ─ scope? ─ yes → retrieve_documents ─ chunks → answer_from_documents → END
                 │                            └ none  → search_web (or no_answer when fallback is off)
                 └─ no ─→ search_web ─ results → answer_from_web → END
                                     └ none    → no_answer → END

Orchestration only; embeddings, search and generation live in the collaborators
passed to the constructor. answer() never raises: failures become a FAILED result.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, TypedDict

from langgraph.graph import END, START, StateGraph

from docqa.core.config import (
    FALLBACK_DISCLAIMER,
    GENERIC_ERROR_MESSAGE,
    HISTORY_TURNS_IN_PROMPT,
    LOG_PROMPTS,
    MISSING_QUESTION_MESSAGE,
    NO_ANSWER_MESSAGE,
    NO_DOCUMENT_ANSWER_MESSAGE,
    NO_WEB_ANSWER_MESSAGE,
    REQUEST_DEADLINE_SECONDS,
    USE_CONVERSATION_HISTORY,
    WEB_FALLBACK_ENABLED,
)
from docqa.core.deadline import Deadline
from docqa.core.errors import UpstreamError
from docqa.core.session_store import Session
from docqa.services.prompts import (
    build_document_context,
    build_document_messages,
    build_search_context,
    build_web_messages,
)
from docqa.services.retrieval_service import resolve_scope

logger = logging.getLogger(__name__)


class AnswerStatus(str, Enum):
    ANSWERED = "answered"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass
class AnswerResult:
    status: AnswerStatus
    answer: str = ""
    error: str = ""
    source: str = "none"  # documents | web | none
    chunks_used: int = 0
    results_used: int = 0


class AnswerState(TypedDict, total=False):
    question: str
    scope_ref: str | None
    history: list
    deadline: Deadline
    chunks: list
    snippets: list
    via_fallback: bool
    answer: str
    source: str


class AnswerOrchestrator:
    def __init__(
        self,
        retriever: Any,
        web_search: Any,
        llm: Any,
        *,
        web_fallback_enabled: bool = WEB_FALLBACK_ENABLED,
        use_history: bool = USE_CONVERSATION_HISTORY,
        history_turns: int = HISTORY_TURNS_IN_PROMPT,
        log_prompts: bool = LOG_PROMPTS,
        deadline_seconds: float = REQUEST_DEADLINE_SECONDS,
    ) -> None:
        self.retriever = retriever
        self.web_search = web_search
        self.llm = llm
        self.web_fallback_enabled = web_fallback_enabled
        self.use_history = use_history
        self.history_turns = history_turns
        self.log_prompts = log_prompts
        self.deadline_seconds = deadline_seconds
        self._graph = self._build_graph()

    # --- nodes ---

    def _retrieve_documents(self, state: AnswerState) -> dict:
        chunks = self.retriever.retrieve(state["question"], state["scope_ref"], state["deadline"])
        logger.info("[answer:retrieve_documents] OUT chunks=%d", len(chunks))
        return {"chunks": chunks, "via_fallback": not chunks}

    def _answer_from_documents(self, state: AnswerState) -> dict:
        chunks = state.get("chunks") or []
        context = build_document_context(chunks)
        history = state.get("history") or []
        messages = build_document_messages(state["question"], context, history, self.history_turns)
        logger.info("[answer:answer_from_documents] IN  chunks=%d context_len=%d history_turns=%d", len(chunks), len(context), len(history))
        self._log_prompt("answer_from_documents", messages)
        answer = self.llm.generate(messages, state["deadline"])
        if self.log_prompts:
            logger.info("[answer:answer_from_documents] OUT answer=%r", answer)
        return {"answer": answer, "source": "documents"}

    def _search_web(self, state: AnswerState) -> dict:
        snippets = self.web_search.search(state["question"], state["deadline"])
        logger.info("[answer:search_web] OUT results=%d via_fallback=%s", len(snippets), bool(state.get("via_fallback")))
        return {"snippets": snippets}

    def _answer_from_web(self, state: AnswerState) -> dict:
        snippets = state.get("snippets") or []
        context = build_search_context(snippets)
        messages = build_web_messages(state["question"], context)
        logger.info("[answer:answer_from_web] IN  results=%d context_len=%d", len(snippets), len(context))
        self._log_prompt("answer_from_web", messages)
        answer = self.llm.generate(messages, state["deadline"])
        if state.get("via_fallback"):
            answer = f"{FALLBACK_DISCLAIMER}\n\n{answer}"
        if self.log_prompts:
            logger.info("[answer:answer_from_web] OUT answer=%r", answer)
        return {"answer": answer, "source": "web"}

    def _no_answer(self, state: AnswerState) -> dict:
        if not state.get("scope_ref"):
            message = NO_WEB_ANSWER_MESSAGE
        elif self.web_fallback_enabled:
            message = NO_ANSWER_MESSAGE
        else:
            message = NO_DOCUMENT_ANSWER_MESSAGE
        logger.info("[answer:no_answer] scope_ref=%s", state.get("scope_ref"))
        return {"answer": message, "source": "none"}

    # --- routing ---

    def _route_entry(self, state: AnswerState) -> Literal["retrieve_documents", "search_web"]:
        return "retrieve_documents" if state.get("scope_ref") else "search_web"

    def _route_after_retrieve(self, state: AnswerState) -> Literal["answer_from_documents", "search_web", "no_answer"]:
        if state.get("chunks"):
            return "answer_from_documents"
        return "search_web" if self.web_fallback_enabled else "no_answer"

    def _route_after_search(self, state: AnswerState) -> Literal["answer_from_web", "no_answer"]:
        return "answer_from_web" if state.get("snippets") else "no_answer"

    def _build_graph(self):
        graph = StateGraph(AnswerState)

        graph.add_node("retrieve_documents", self._retrieve_documents)
        graph.add_node("answer_from_documents", self._answer_from_documents)
        graph.add_node("search_web", self._search_web)
        graph.add_node("answer_from_web", self._answer_from_web)
        graph.add_node("no_answer", self._no_answer)

        graph.add_conditional_edges(START, self._route_entry)
        graph.add_conditional_edges("retrieve_documents", self._route_after_retrieve)
        graph.add_conditional_edges("search_web", self._route_after_search)
        graph.add_edge("answer_from_documents", END)
        graph.add_edge("answer_from_web", END)
        graph.add_edge("no_answer", END)

        return graph.compile()

    def _log_prompt(self, node: str, messages: list[dict]) -> None:
        if not self.log_prompts:
            return
        for i, m in enumerate(messages):
            logger.info("[answer:%s] message_%d role=%s content=%r", node, i, m.get("role"), m.get("content"))

    def answer(
        self,
        question: str | None,
        scope_ref: str | None = None,
        session: Session | None = None,
        deadline: Deadline | None = None,
    ) -> AnswerResult:
        """
        Answer a question, optionally scoped to one ingested document.

        The document path appends the exchange to `session`; the web path does not.
        """
        q = question.strip() if isinstance(question, str) else ""
        if not q:
            logger.info("[answer] rejected: missing question")
            return AnswerResult(status=AnswerStatus.INVALID, error=MISSING_QUESTION_MESSAGE)

        scope = resolve_scope(scope_ref)
        deadline = deadline or Deadline(self.deadline_seconds)
        history = session.turns() if (session is not None and self.use_history) else []
        initial: AnswerState = {
            "question": q,
            "scope_ref": scope,
            "history": history,
            "deadline": deadline,
            "chunks": [],
            "snippets": [],
            "via_fallback": False,
            "answer": "",
            "source": "none",
        }
        logger.info("[answer] START question=%r scope_ref=%s history_turns=%d", q, scope, len(history))
        try:
            final = self._graph.invoke(initial)
        except UpstreamError as e:
            logger.error("[answer] upstream failure service=%s: %s", e.service, e.message, exc_info=True)
            return AnswerResult(status=AnswerStatus.FAILED, error=GENERIC_ERROR_MESSAGE)
        except Exception:
            logger.exception("[answer] unexpected failure")
            return AnswerResult(status=AnswerStatus.FAILED, error=GENERIC_ERROR_MESSAGE)

        answer = final.get("answer") or ""
        source = final.get("source") or "none"
        if source == "documents" and session is not None and self.use_history:
            session.append(q, answer)
        result = AnswerResult(
            status=AnswerStatus.ANSWERED,
            answer=answer,
            source=source,
            chunks_used=len(final.get("chunks") or []) if source == "documents" else 0,
            results_used=len(final.get("snippets") or []),
        )
        logger.info("[answer] END source=%s chunks_used=%d results_used=%d answer_len=%d", result.source, result.chunks_used, result.results_used, len(answer))
        return result
