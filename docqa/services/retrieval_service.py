"""
Retrieval: embed the question, search Milvus within a document scope, rank hits.

Responsibility: Turn (question, scope) into the ordered chunks handed to the LLM.
"""

import logging

from docqa.core.config import (
    ADHOC_PDF_ENABLED,
    DOCUMENT_SOURCES,
    EMBED_API_TIMEOUT,
    NO_SCOPE_SENTINEL,
    RETRIEVAL_MIN_SCORE,
    SEARCH_TOP_K,
    VECTOR_SEARCH_TIMEOUT,
)
from docqa.core.deadline import Deadline
from docqa.core.models import Chunk
from docqa.services.adhoc_index import is_adhoc_url, search_pdf
from docqa.services.vector_store import embed_texts, search_chunks

logger = logging.getLogger(__name__)


def resolve_scope(value: str | None, sources: dict[str, str] | None = None) -> str | None:
    """
    Map the client's pdfUrl to a scope ref.

    Returns None for a missing value or the "general_discussion" sentinel. A URL
    of a configured source maps to its ref. Anything else is returned as is: an
    unconfigured http(s) URL is indexed per request by the Retriever.
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == NO_SCOPE_SENTINEL:
        return None
    sources = DOCUMENT_SOURCES if sources is None else sources
    if value in sources:
        return value
    for ref, url in sources.items():
        if url == value:
            return ref
    return value


def rank_chunks(chunks: list[Chunk]) -> list[Chunk]:
    """Order by descending score; equal scores keep retrieval order (sorted is stable)."""
    return sorted(chunks, key=lambda c: -c.score)


class Retriever:
    def __init__(
        self,
        top_k: int = SEARCH_TOP_K,
        min_score: float | None = RETRIEVAL_MIN_SCORE,
        adhoc_pdf_enabled: bool = ADHOC_PDF_ENABLED,
    ) -> None:
        self.top_k = top_k
        self.min_score = min_score
        self.adhoc_pdf_enabled = adhoc_pdf_enabled

    def retrieve(self, question: str, scope_ref: str, deadline: Deadline) -> list[Chunk]:
        logger.info("[retrieval:retrieve] IN  question=%r scope_ref=%s top_k=%d", question, scope_ref, self.top_k)
        vectors = embed_texts([question], timeout=deadline.timeout_for("embeddings", EMBED_API_TIMEOUT))
        if self.adhoc_pdf_enabled and is_adhoc_url(scope_ref):
            hits = search_pdf(scope_ref, vectors[0], self.top_k, deadline)
        else:
            hits = search_chunks(
                vectors[0],
                scope_ref,
                self.top_k,
                timeout=deadline.timeout_for("vector_store", VECTOR_SEARCH_TIMEOUT),
            )
        if self.min_score is not None:
            kept = [c for c in hits if c.score >= self.min_score]
            if len(kept) != len(hits):
                logger.info("[retrieval:retrieve] dropped %d hits below min_score=%.3f", len(hits) - len(kept), self.min_score)
            hits = kept
        ranked = rank_chunks(hits)
        logger.info("[retrieval:retrieve] OUT chunks=%d scores=%s", len(ranked), [round(c.score, 4) for c in ranked])
        return ranked
