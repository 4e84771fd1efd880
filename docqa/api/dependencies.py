"""
FastAPI dependency providers. One orchestrator and one session store per process;
tests swap them through app.dependency_overrides.
"""

from functools import lru_cache

from docqa.core.session_store import SessionStore
from docqa.services.answer_service import AnswerOrchestrator
from docqa.services.llm import LanguageModel
from docqa.services.retrieval_service import Retriever
from docqa.services.web_search import get_web_search_client


@lru_cache(maxsize=1)
def get_orchestrator() -> AnswerOrchestrator:
    return AnswerOrchestrator(
        retriever=Retriever(),
        web_search=get_web_search_client(),
        llm=LanguageModel(),
    )


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return SessionStore()
