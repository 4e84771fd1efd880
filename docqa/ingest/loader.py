# Minimal PDF loader. No embeddings, no vector DB, no chunking.
# Single place for "url → bytes → text".

import io
import logging

import httpx
from pypdf import PdfReader

from docqa.core.config import PDF_FETCH_TIMEOUT
from docqa.core.errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def fetch_pdf(url: str, timeout: float = PDF_FETCH_TIMEOUT, client: httpx.Client | None = None) -> bytes:
    """Download a PDF. Raises UpstreamError on non-200 or transport failure."""
    logger.info("[loader:fetch_pdf] IN  url=%s", url)
    try:
        if client is not None:
            response = client.get(url, timeout=timeout, follow_redirects=True)
        else:
            with httpx.Client(timeout=timeout, follow_redirects=True) as http:
                response = http.get(url)
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError("pdf_fetch", f"timed out fetching {url}") from e
    except httpx.HTTPError as e:
        raise UpstreamError("pdf_fetch", f"failed to fetch {url}: {e}") from e
    if response.status_code != 200:
        raise UpstreamError("pdf_fetch", f"{url} returned {response.status_code}")
    logger.info("[loader:fetch_pdf] OUT bytes=%d", len(response.content))
    return response.content


def pdf_bytes_to_text(raw: bytes) -> str:
    """Extract text from every page, pages joined by a single space."""
    reader = PdfReader(io.BytesIO(raw))
    return " ".join(page.extract_text() or "" for page in reader.pages)
