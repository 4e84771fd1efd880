"""
Vector store client: Milvus Cloud connection, embeddings (HF Inference API), and chunk storage.

Responsibility: Connect to Milvus, embed texts via all-MiniLM-L6-v2, store and
search chunks tagged with the scope ref of their source document.
"""

import logging
from typing import Any

import httpx
from pymilvus import MilvusClient, MilvusException

from docqa.core.config import (
    COLLECTION_NAME,
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    MILVUS_TOKEN,
    MILVUS_URI,
    VECTOR_DIM,
    VECTOR_INSERT_TIMEOUT,
    VECTOR_SEARCH_TIMEOUT,
)
from docqa.core.errors import ServiceUnavailableError, UpstreamError, UpstreamTimeoutError
from docqa.core.models import Chunk

logger = logging.getLogger(__name__)

HF_API_URL_ROUTER = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)
HF_API_URL_STANDARD = f"https://api-inference.huggingface.co/models/{HF_EMBED_MODEL}"

OUTPUT_FIELDS = ["id", "content", "source_ref"]


def embed_texts(
    texts: list[str],
    timeout: float = EMBED_API_TIMEOUT,
    batch_size: int | None = None,
) -> list[list[float]]:
    """
    Batch embed texts using Hugging Face Inference API (all-MiniLM-L6-v2).

    Returns one VECTOR_DIM vector per text, normalized for cosine similarity.
    Falls back to the legacy inference URL when the router answers 403.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if not HF_API_KEY:
        raise ServiceUnavailableError("embeddings", "HF_API_KEY must be set in .env")

    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    all_embeddings: list[list[float]] = []
    try:
        with httpx.Client(timeout=timeout) as client:
            for i in range(0, len(texts), batch_size):
                batch = texts[i : i + batch_size]
                all_embeddings.extend(_embed_batch(client, batch, headers))
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError("embeddings", "embedding request timed out") from e
    except httpx.HTTPError as e:
        raise UpstreamError("embeddings", f"embedding request failed: {e}") from e

    if len(all_embeddings) != len(texts):
        raise UpstreamError("embeddings", f"expected {len(texts)} vectors, got {len(all_embeddings)}")
    return all_embeddings


def _embed_batch(client: httpx.Client, batch: list[str], headers: dict) -> list[list[float]]:
    payload = {"inputs": batch, "options": {"wait_for_model": True}}
    response = None
    for api_url in (HF_API_URL_ROUTER, HF_API_URL_STANDARD):
        response = client.post(api_url, json=payload, headers=headers)
        if response.status_code == 403 and api_url == HF_API_URL_ROUTER:
            logger.info("[vector_store:embed_texts] router returned 403, trying standard endpoint")
            continue
        break

    if response is None or response.status_code != 200:
        status = response.status_code if response is not None else "no response"
        detail = response.text[:200] if response is not None else ""
        raise UpstreamError("embeddings", f"HF API error {status}: {detail}")

    result = response.json()
    if isinstance(result, list) and result and isinstance(result[0], list):
        vectors = result
    else:
        vectors = [result] if isinstance(result, list) else []

    embeddings: list[list[float]] = []
    for vec in vectors:
        norm = sum(x * x for x in vec) ** 0.5
        if norm == 0:
            norm = 1.0
        embeddings.append([x / norm for x in vec])
    return embeddings


def check_dimension(vector: list[float]) -> None:
    """Reject vectors that do not match the collection's dimensionality."""
    if len(vector) != VECTOR_DIM:
        raise ValueError(f"embedding has {len(vector)} dims, collection expects {VECTOR_DIM}")


def scope_filter(scope_ref: str | None) -> str:
    """Milvus boolean expression restricting a search to one source document."""
    if not scope_ref:
        return ""
    escaped = scope_ref.replace("\\", "\\\\").replace('"', '\\"')
    return f'source_ref == "{escaped}"'


def ensure_collection(client: Any) -> None:
    """Create collection "documents" if it does not exist (dim 384, string ids)."""
    if client.has_collection(COLLECTION_NAME):
        return
    client.create_collection(
        collection_name=COLLECTION_NAME,
        dimension=VECTOR_DIM,
        primary_field_name="id",
        id_type="string",
        max_length=64,
        vector_field_name="vector",
        metric_type="COSINE",
        auto_id=False,
    )
    logger.info("Collection %s created (dim=%s)", COLLECTION_NAME, VECTOR_DIM)


def get_milvus_client() -> MilvusClient:
    """
    Connect to Milvus Cloud and return a client with the collection in place.
    Connection failures surface as UpstreamError("vector_store").
    """
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ServiceUnavailableError("vector_store", "MILVUS_URI and MILVUS_TOKEN must be set in .env")

    try:
        client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
        logger.info("Milvus connection established")
        ensure_collection(client)
    except MilvusException as e:
        raise UpstreamError("vector_store", f"connection failed: {e}") from e
    return client


def insert_chunk(chunk: Chunk, timeout: float = VECTOR_INSERT_TIMEOUT, client: Any = None) -> None:
    """Insert one chunk row. The row's id is the chunk's id."""
    check_dimension(chunk.embedding)
    row = {
        "id": chunk.id,
        "vector": chunk.embedding,
        "content": chunk.content,
        "source_ref": chunk.source_ref,
    }
    try:
        client = client or get_milvus_client()
        client.insert(collection_name=COLLECTION_NAME, data=[row], timeout=timeout)
    except MilvusException as e:
        raise UpstreamError("vector_store", f"insert failed: {e}") from e


def insert_chunks(chunks: list[Chunk], client: Any, timeout: float = VECTOR_INSERT_TIMEOUT) -> None:
    """Insert many chunk rows in one call, then flush so they are searchable."""
    for chunk in chunks:
        check_dimension(chunk.embedding)
    rows = [
        {"id": c.id, "vector": c.embedding, "content": c.content, "source_ref": c.source_ref}
        for c in chunks
    ]
    try:
        client.insert(collection_name=COLLECTION_NAME, data=rows, timeout=timeout)
        client.flush(collection_name=COLLECTION_NAME)
    except MilvusException as e:
        raise UpstreamError("vector_store", f"insert failed: {e}") from e
    logger.info("Stored %d chunks", len(rows))


def _hit_to_chunk(hit: dict) -> Chunk:
    # Milvus returns dict with "distance", "id", and "entity" (output_fields)
    entity = hit.get("entity") or hit
    return Chunk(
        id=str(entity.get("id", hit.get("id", ""))),
        content=entity.get("content", "") or "",
        source_ref=entity.get("source_ref", "") or "",
        score=float(hit.get("distance", hit.get("score", 0.0))),
    )


def search_chunks(
    vector: list[float],
    scope_ref: str | None,
    top_k: int,
    timeout: float = VECTOR_SEARCH_TIMEOUT,
    client: Any = None,
) -> list[Chunk]:
    """Nearest chunks to `vector` within the scope, in the order Milvus returns them."""
    check_dimension(vector)
    try:
        client = client or get_milvus_client()
        results = client.search(
            collection_name=COLLECTION_NAME,
            data=[vector],
            filter=scope_filter(scope_ref),
            limit=top_k,
            output_fields=OUTPUT_FIELDS,
            timeout=timeout,
        )
    except MilvusException as e:
        raise UpstreamError("vector_store", f"search failed: {e}") from e
    # results: list of list of hits (one list per query vector)
    hits = results[0] if results else []
    return [_hit_to_chunk(h) for h in hits]


def list_sources(limit: int = 16_384) -> list[str]:
    """Return distinct scope refs present in the collection."""
    client = get_milvus_client()
    results = client.query(
        collection_name=COLLECTION_NAME,
        filter="",
        limit=limit,
        output_fields=["source_ref"],
    )
    return sorted({(r.get("source_ref") or "").strip() for r in results if (r.get("source_ref") or "").strip()})


def clear_knowledge_base() -> None:
    """
    Remove all data by dropping the Milvus collection.
    The collection will be recreated empty on next get_milvus_client() call.
    """
    client = get_milvus_client()
    if client.has_collection(COLLECTION_NAME):
        client.drop_collection(collection_name=COLLECTION_NAME)
        logger.info("Knowledge base cleared: collection %s dropped", COLLECTION_NAME)


def get_collection_stats() -> dict:
    """Return knowledge-base stats: collection name, total chunks, scope refs present."""
    client = get_milvus_client()
    stats = client.get_collection_stats(collection_name=COLLECTION_NAME)
    sources = list_sources()
    return {
        "collection_name": COLLECTION_NAME,
        "total_chunks": int(stats.get("row_count", 0)),
        "source_count": len(sources),
        "sources": sources,
    }
