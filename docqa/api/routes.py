"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from docqa.api.dependencies import get_orchestrator, get_session_store
from docqa.api.handlers import handle_chat
from docqa.core.config import CHAT_ROUTE_ALIAS, DOCUMENT_SOURCES, GENERIC_ERROR_MESSAGE, WELCOME_MESSAGE
from docqa.core.session_store import SessionStore
from docqa.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from docqa.services.answer_service import AnswerOrchestrator
from docqa.services.vector_store import get_collection_stats

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"], response_class=PlainTextResponse)
def root():
    return WELCOME_MESSAGE


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Documents ---

@router.get("/sources", tags=["documents"], summary="List document scopes")
def get_sources() -> dict:
    """Scope refs accepted as pdfUrl, with the PDF each one was ingested from."""
    return {"sources": [{"ref": ref, "url": url} for ref, url in DOCUMENT_SOURCES.items()]}


@router.get("/stats", tags=["documents"], summary="Vector store statistics")
def get_stats():
    try:
        return get_collection_stats()
    except Exception:
        logger.exception("Failed to read collection stats")
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# --- Chat ---

@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["chat"],
    summary="Ask a question about the documents",
    description="Answers from the scoped document when it has matching chunks, otherwise from web search results. 400 on missing question, 500 on upstream failure.",
)
async def post_chat(
    body: ChatRequest,
    request: Request,
    orchestrator: AnswerOrchestrator = Depends(get_orchestrator),
    sessions: SessionStore = Depends(get_session_store),
):
    return await handle_chat(body, request, orchestrator, sessions)


if CHAT_ROUTE_ALIAS:
    router.add_api_route(
        "/chat",
        post_chat,
        methods=["POST"],
        response_model=ChatResponse,
        include_in_schema=False,
    )


@router.delete("/sessions/{session_id}", tags=["chat"], summary="Forget a conversation")
def delete_session(session_id: str, sessions: SessionStore = Depends(get_session_store)) -> dict:
    return {"cleared": sessions.delete(session_id)}
