"""
Text processing for RAG: cleaning and chunking.

Cleaning reduces noise and encoding inconsistencies so embeddings and retrieval
focus on content. Chunks are fixed-size character windows with overlap.
"""

import unicodedata

from docqa.core.config import CHUNK_OVERLAP, CHUNK_SIZE


def strip_null_chars(text: str) -> str:
    """
    Remove NUL characters, which the vector store rejects on insert.

    Some PDF extractors emit the literal escape text "\\u0000" instead of the
    character itself, so both forms are removed.
    """
    if not text:
        return ""
    return text.replace("\x00", "").replace("\\u0000", "")


def clean_text(text: str) -> str:
    """
    Normalize raw PDF text before chunking.

    NFKC-normalizes, collapses whitespace runs inside each line and collapses
    runs of blank lines into one. Repeated lines are kept: report tables often
    repeat the same cell value on consecutive lines.
    """
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    result: list[str] = []
    for line in text.splitlines():
        line = " ".join(line.split())
        if line == "":
            if result and result[-1] != "":
                result.append("")
        else:
            result.append(line)
    return "\n".join(result).strip()


def _last_whitespace(text: str, lo: int, hi: int) -> int:
    """Index of the last whitespace char in text[lo:hi], or -1."""
    for i in range(hi - 1, lo - 1, -1):
        if text[i].isspace():
            return i
    return -1


def _next_whitespace(text: str, lo: int, hi: int) -> int:
    for i in range(lo, hi):
        if text[i].isspace():
            return i
    return -1


def chunk_text(text: str, chunk_size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> list[str]:
    """
    Split text into overlapping windows of at most chunk_size characters.

    Consecutive windows share up to `overlap` characters. A window end is pulled
    back to the last whitespace when one exists past the overlap region, and the
    next window start is pushed forward to a word start, so words are not cut
    unless a single run of non-space text is longer than the window.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be in [0, chunk_size)")
    if not text or not text.strip():
        return []
    text = text.strip()
    n = len(text)
    if n <= chunk_size:
        return [text]

    chunks: list[str] = []
    start = 0
    while start < n:
        end = min(start + chunk_size, n)
        if end < n and not text[end].isspace():
            cut = _last_whitespace(text, start + overlap + 1, end)
            if cut != -1:
                end = cut
        piece = text[start:end].strip()
        if piece:
            chunks.append(piece)
        if end >= n:
            break
        nxt = end - overlap
        if not text[nxt - 1].isspace():
            space = _next_whitespace(text, nxt, end)
            if space != -1:
                nxt = space + 1
        start = nxt
    return chunks
