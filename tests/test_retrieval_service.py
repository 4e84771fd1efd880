"""
Unit tests for retrieval: scope resolution, ranking, and the Retriever pipeline
with embeddings and Milvus search mocked out.
"""

from unittest.mock import patch

from docqa.core.deadline import Deadline
from docqa.core.models import Chunk
from docqa.services.retrieval_service import Retriever, rank_chunks, resolve_scope

SOURCES = {"fy23-report": "https://example.com/fy23.pdf"}


class TestResolveScope:
    def test_missing_and_sentinel_mean_no_scope(self) -> None:
        assert resolve_scope(None, SOURCES) is None
        assert resolve_scope("", SOURCES) is None
        assert resolve_scope("  ", SOURCES) is None
        assert resolve_scope("general_discussion", SOURCES) is None

    def test_ref_is_kept(self) -> None:
        assert resolve_scope("fy23-report", SOURCES) == "fy23-report"

    def test_configured_url_maps_to_ref(self) -> None:
        assert resolve_scope("https://example.com/fy23.pdf", SOURCES) == "fy23-report"

    def test_unknown_value_used_verbatim(self) -> None:
        assert resolve_scope("other-report", SOURCES) == "other-report"


def _chunk(cid: str, score: float) -> Chunk:
    return Chunk(id=cid, content=f"content {cid}", source_ref="fy23-report", score=score)


def test_rank_chunks_orders_by_score_and_keeps_ties_in_retrieval_order() -> None:
    chunks = [_chunk("a", 0.5), _chunk("b", 0.9), _chunk("c", 0.5), _chunk("d", 0.7)]
    assert [c.id for c in rank_chunks(chunks)] == ["b", "d", "a", "c"]


def test_retrieve_embeds_question_and_searches_scope() -> None:
    hits = [_chunk("a", 0.5), _chunk("b", 0.9)]
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]) as mock_embed, \
            patch("docqa.services.retrieval_service.search_chunks", return_value=hits) as mock_search:
        result = Retriever(top_k=4).retrieve("FY23 footprint?", "fy23-report", Deadline(30.0))
    assert [c.id for c in result] == ["b", "a"]
    assert mock_embed.call_args.args[0] == ["FY23 footprint?"]
    args = mock_search.call_args.args
    assert args[1] == "fy23-report"
    assert args[2] == 4
    assert mock_search.call_args.kwargs["timeout"] <= 30.0


def test_retrieve_drops_hits_below_min_score() -> None:
    hits = [_chunk("a", 0.2), _chunk("b", 0.9)]
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]), \
            patch("docqa.services.retrieval_service.search_chunks", return_value=hits):
        result = Retriever(top_k=4, min_score=0.5).retrieve("q", "fy23-report", Deadline(30.0))
    assert [c.id for c in result] == ["b"]


def test_retrieve_returns_empty_when_nothing_matches() -> None:
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]), \
            patch("docqa.services.retrieval_service.search_chunks", return_value=[]):
        assert Retriever().retrieve("q", "fy23-report", Deadline(30.0)) == []


def test_unconfigured_pdf_url_is_indexed_per_request() -> None:
    url = "https://example.org/other-report.pdf"
    hits = [_chunk("a", 0.4), _chunk("b", 0.8)]
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]), \
            patch("docqa.services.retrieval_service.search_pdf", return_value=hits) as mock_pdf, \
            patch("docqa.services.retrieval_service.search_chunks") as mock_search:
        result = Retriever(top_k=3).retrieve("q", url, Deadline(30.0))
    assert [c.id for c in result] == ["b", "a"]
    assert mock_pdf.call_args.args[:3] == (url, [0.1] * 384, 3)
    mock_search.assert_not_called()


def test_unconfigured_pdf_url_searches_shared_store_when_disabled() -> None:
    url = "https://example.org/other-report.pdf"
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]), \
            patch("docqa.services.retrieval_service.search_pdf") as mock_pdf, \
            patch("docqa.services.retrieval_service.search_chunks", return_value=[]) as mock_search:
        assert Retriever(adhoc_pdf_enabled=False).retrieve("q", url, Deadline(30.0)) == []
    mock_pdf.assert_not_called()
    assert mock_search.call_args.args[1] == url


def test_plain_ref_never_fetched() -> None:
    with patch("docqa.services.retrieval_service.embed_texts", return_value=[[0.1] * 384]), \
            patch("docqa.services.retrieval_service.search_pdf") as mock_pdf, \
            patch("docqa.services.retrieval_service.search_chunks", return_value=[]):
        Retriever().retrieve("q", "other-report", Deadline(30.0))
    mock_pdf.assert_not_called()
