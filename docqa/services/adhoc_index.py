"""
Ad-hoc PDF index: answer questions about a PDF that was never ingested.

Responsibility: For one request, fetch the PDF at an unconfigured http(s) URL,
chunk and embed it, load the chunks into a throwaway Milvus Lite collection
on local disk, and return the nearest chunks to the question. Nothing is
written to the shared Milvus Cloud collection.
"""

import logging
import os
import tempfile
import uuid
from urllib.parse import urlparse

from pymilvus import MilvusClient, MilvusException

from docqa.core.config import EMBED_API_TIMEOUT, PDF_FETCH_TIMEOUT, VECTOR_INSERT_TIMEOUT, VECTOR_SEARCH_TIMEOUT
from docqa.core.deadline import Deadline
from docqa.core.errors import UpstreamError
from docqa.core.models import Chunk
from docqa.ingest.loader import fetch_pdf
from docqa.services.ingestion_service import extract_chunks
from docqa.services.vector_store import embed_texts, ensure_collection, insert_chunks, search_chunks

logger = logging.getLogger(__name__)


def is_adhoc_url(scope_ref: str | None) -> bool:
    """True for an http(s) URL; configured URLs were already mapped to their refs."""
    if not scope_ref:
        return False
    parsed = urlparse(scope_ref)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def search_pdf(url: str, question_vector: list[float], top_k: int, deadline: Deadline) -> list[Chunk]:
    logger.info("[adhoc_index:search_pdf] IN  url=%s top_k=%d", url, top_k)
    raw = fetch_pdf(url, timeout=deadline.timeout_for("pdf_fetch", PDF_FETCH_TIMEOUT))
    texts = extract_chunks(raw)
    if not texts:
        logger.info("[adhoc_index:search_pdf] OUT no text extracted from %s", url)
        return []
    vectors = embed_texts(texts, timeout=deadline.timeout_for("embeddings", EMBED_API_TIMEOUT))
    chunks = [
        Chunk(id=uuid.uuid4().hex, content=text, source_ref=url, embedding=vector)
        for text, vector in zip(texts, vectors)
    ]

    with tempfile.TemporaryDirectory(prefix="docqa-") as workdir:
        try:
            client = MilvusClient(os.path.join(workdir, "adhoc.db"))
        except MilvusException as e:
            raise UpstreamError("vector_store", f"local index unavailable: {e}") from e
        try:
            ensure_collection(client)
            insert_chunks(chunks, client, timeout=deadline.timeout_for("vector_store", VECTOR_INSERT_TIMEOUT))
            hits = search_chunks(
                question_vector,
                None,
                top_k,
                timeout=deadline.timeout_for("vector_store", VECTOR_SEARCH_TIMEOUT),
                client=client,
            )
        except MilvusException as e:
            raise UpstreamError("vector_store", f"local index failed: {e}") from e
        finally:
            client.close()
    logger.info("[adhoc_index:search_pdf] OUT chunks=%d hits=%d", len(chunks), len(hits))
    return hits
