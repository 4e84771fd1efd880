"""Schemas for the chat endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/chat. History is stored server-side by sessionId."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing question becomes a 400 from the handler, not a 422
    question: str | None = Field(None, description="User question.")
    pdf_url: str | None = Field(
        None,
        alias="pdfUrl",
        description="Document scope: a scope ref (e.g. fy23-report), a configured PDF URL, or 'general_discussion'.",
    )
    session_id: str | None = Field(
        None,
        alias="sessionId",
        description="Session ID; omit to start a new session.",
    )


class ChatResponse(BaseModel):
    """Response for POST /api/chat."""

    model_config = ConfigDict(populate_by_name=True)

    answer: str = Field(..., description="Answer text, possibly prefixed with the web-search disclaimer.")
    session_id: str = Field(..., alias="sessionId", description="Session the exchange belongs to.")


class ErrorResponse(BaseModel):
    error: str
