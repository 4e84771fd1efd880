"""Internal records passed between services."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chunk:
    """A stored text segment of an ingested document."""

    id: str
    content: str
    source_ref: str
    embedding: list[float] = field(default_factory=list, repr=False)
    score: float = 0.0


@dataclass(frozen=True)
class SearchSnippet:
    title: str
    link: str
    snippet: str


@dataclass(frozen=True)
class ConversationTurn:
    question: str
    answer: str
