#!/usr/bin/env python3
"""
Ingest the configured PDF reports into the Milvus collection.

Fetches each PDF, extracts and chunks its text, embeds every chunk and inserts
it as a row tagged with the source's scope ref. Use --source to ingest only
some scopes and --reset to drop the collection first.

Run from project root:

    python scripts/ingest.py
    python scripts/ingest.py --source fy23-report --source fl-ghg-fy25
    python scripts/ingest.py --reset
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "docqa" resolves without installing
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from docqa.core.config import DOCUMENT_SOURCES, LOG_LEVEL
from docqa.services.ingestion_service import ingest_documents
from docqa.services.vector_store import clear_knowledge_base


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest PDF reports into the vector store.")
    parser.add_argument(
        "--source",
        action="append",
        choices=sorted(DOCUMENT_SOURCES),
        help="Scope ref to ingest (repeatable). Defaults to all configured sources.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop the collection before ingesting.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=LOG_LEVEL)

    if args.reset:
        clear_knowledge_base()
        print("Cleared knowledge base.")

    sources = {ref: DOCUMENT_SOURCES[ref] for ref in args.source} if args.source else DOCUMENT_SOURCES
    report = ingest_documents(sources)

    for s in report.sources:
        status = f"error: {s.error}" if s.error else f"{s.inserted}/{s.chunks} chunks inserted"
        print(f"  {s.scope_ref}: {status}")
    print(f"Done. Inserted {report.inserted} chunks, {report.failed} failed.")
    return 1 if report.failed or any(s.error for s in report.sources) else 0


if __name__ == "__main__":
    sys.exit(main())
