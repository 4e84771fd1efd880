"""
API handlers: call the orchestrator and map its result to HTTP.

Responsibility: Bridge HTTP types and services. Lives in the API layer so
services stay free of FastAPI/HTTP types.
"""

import asyncio
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from docqa.core.config import DISCONNECT_POLL_SECONDS, MISSING_QUESTION_MESSAGE
from docqa.core.deadline import CancellationToken, Deadline
from docqa.core.session_store import SessionStore
from docqa.schemas.chat import ChatRequest, ChatResponse
from docqa.services.answer_service import AnswerOrchestrator, AnswerStatus

logger = logging.getLogger(__name__)


async def cancel_on_disconnect(request: Request, token: CancellationToken, interval: float = DISCONNECT_POLL_SECONDS) -> None:
    """Poll the connection and cancel the token once the client has gone away."""
    while not token.cancelled:
        if await request.is_disconnected():
            logger.info("[api:chat] client disconnected, cancelling request")
            token.cancel()
            return
        await asyncio.sleep(interval)


async def handle_chat(
    body: ChatRequest,
    request: Request,
    orchestrator: AnswerOrchestrator,
    sessions: SessionStore,
) -> ChatResponse | JSONResponse:
    """400 for a missing question, 500 for upstream failure, else the answer."""
    if not body.question or not body.question.strip():
        # Checked before touching the session store so bad requests leave no trace
        logger.info("[api:chat] rejected: missing question")
        return JSONResponse(status_code=400, content={"error": MISSING_QUESTION_MESSAGE})

    session = sessions.get_or_create(body.session_id)
    logger.info("[api:chat] IN  question=%r pdf_url=%r session_id=%s", body.question, body.pdf_url, session.session_id[:16])

    token = CancellationToken()
    deadline = Deadline(orchestrator.deadline_seconds, token)
    watcher = asyncio.create_task(cancel_on_disconnect(request, token))
    try:
        # The graph makes blocking calls; run it off the event loop
        result = await asyncio.to_thread(orchestrator.answer, body.question, body.pdf_url, session=session, deadline=deadline)
    finally:
        watcher.cancel()

    if result.status == AnswerStatus.INVALID:
        return JSONResponse(status_code=400, content={"error": result.error})
    if result.status == AnswerStatus.FAILED:
        return JSONResponse(status_code=500, content={"error": result.error})
    logger.info("[api:chat] OUT source=%s answer_len=%d", result.source, len(result.answer))
    return ChatResponse(answer=result.answer, session_id=session.session_id)
