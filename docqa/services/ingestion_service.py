"""
Document ingestion: fetch, parse, chunk, embed, and store the configured PDFs.

Responsibility: Turn each (scope_ref, url) source into Milvus rows. Called by
scripts/ingest.py; no HTTP server involved. Rows are inserted one at a time:
a failed insert is logged and the run continues, so a partial failure leaves
some chunks of a document stored and others not.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from docqa.core.config import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    DOCUMENT_SOURCES,
    EMBED_API_TIMEOUT,
    PDF_FETCH_TIMEOUT,
    VECTOR_INSERT_TIMEOUT,
)
from docqa.core.errors import UpstreamError
from docqa.core.models import Chunk
from docqa.ingest.loader import fetch_pdf, pdf_bytes_to_text
from docqa.services.text_processing import chunk_text, clean_text, strip_null_chars
from docqa.services.vector_store import embed_texts, get_milvus_client, insert_chunk

logger = logging.getLogger(__name__)


@dataclass
class SourceReport:
    scope_ref: str
    url: str
    chunks: int = 0
    inserted: int = 0
    failed: int = 0
    error: str = ""


@dataclass
class IngestReport:
    sources: list[SourceReport] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(s.inserted for s in self.sources)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.sources)


def extract_chunks(raw_pdf: bytes) -> list[str]:
    """PDF bytes → NUL-free, cleaned, overlapping character chunks."""
    text = strip_null_chars(pdf_bytes_to_text(raw_pdf))
    return chunk_text(clean_text(text), chunk_size=CHUNK_SIZE, overlap=CHUNK_OVERLAP)


def ingest_source(scope_ref: str, url: str, client: Any = None) -> SourceReport:
    """Ingest one PDF. Pass `client` to share one Milvus connection across sources."""
    report = SourceReport(scope_ref=scope_ref, url=url)
    logger.info("Processing PDF %s from %s", scope_ref, url)
    try:
        texts = extract_chunks(fetch_pdf(url, timeout=PDF_FETCH_TIMEOUT))
        client = client or get_milvus_client()
    except Exception as e:
        logger.error("Failed to load %s: %s", url, e)
        report.error = str(e)
        return report
    report.chunks = len(texts)
    logger.info("File %s → %d chunks created", scope_ref, len(texts))

    for i, text in enumerate(texts):
        try:
            embedding = embed_texts([text], timeout=EMBED_API_TIMEOUT)[0]
            chunk = Chunk(id=uuid.uuid4().hex, content=text, source_ref=scope_ref, embedding=embedding)
            insert_chunk(chunk, timeout=VECTOR_INSERT_TIMEOUT, client=client)
        except (UpstreamError, ValueError) as e:
            report.failed += 1
            logger.error("Error inserting chunk %d of %s: %s", i, scope_ref, e)
            continue
        report.inserted += 1
    logger.info("Ingested %s: inserted=%d failed=%d", scope_ref, report.inserted, report.failed)
    return report


def ingest_documents(sources: dict[str, str] | None = None) -> IngestReport:
    """Ingest every source sequentially over one Milvus connection. Returns per-source counts."""
    sources = DOCUMENT_SOURCES if sources is None else sources
    report = IngestReport()
    try:
        client = get_milvus_client()
    except UpstreamError as e:
        logger.error("Vector store unavailable, nothing ingested: %s", e)
        report.sources = [SourceReport(scope_ref=ref, url=url, error=str(e)) for ref, url in sources.items()]
        return report
    for scope_ref, url in sources.items():
        report.sources.append(ingest_source(scope_ref, url, client=client))
    logger.info("Document ingestion complete: inserted=%d failed=%d", report.inserted, report.failed)
    return report
