"""
Search domain models and schemas.

Request/response schemas for cited question answering.

Dependencies: pydantic
System role: Search API contracts
"""

from pydantic import BaseModel, Field


class Span(BaseModel):
    """A half-open character range and the text it covers."""

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    text: str


class Citation(BaseModel):
    """A numbered answer reference resolved to its source chunk."""

    number: int = Field(ge=1, description="Source number as it appears in the answer")
    chunk_id: str
    document_id: str
    document_title: str = ""
    page_number: int = 1
    section_title: str | None = None
    text: str = Field(description="Full chunk text")
    span: Span = Field(description="Most relevant passage, in document coordinates")
    score: float


class RelatedDocument(BaseModel):
    """A document that contributed sources, with aggregated scores."""

    document_id: str
    title: str = ""
    state: str | None = None
    max_score: float
    total_score: float
    chunk_count: int


class SearchOptions(BaseModel):
    """Per-query retrieval overrides; unset fields use configured defaults."""

    top_k: int | None = Field(default=None, ge=1, le=200)
    min_similarity: float | None = Field(default=None, ge=-1.0, le=1.0)
    jurisdiction_filter: list[str] | None = Field(
        default=None,
        description="State codes to scope retrieval; 'ALL' disables scoping",
    )
    vertical_filter: list[str] | None = Field(default=None, description="Vertical slugs, any of which may match")
    document_type_filter: list[str] | None = Field(default=None, description="Document type slugs, any of which may match")
    per_state_answers: bool = Field(
        default=False,
        description="With two or more states, answer each state from its own sources",
    )
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)


class SearchRequest(BaseModel):
    """Request schema for a search."""

    query: str = Field(min_length=1, max_length=2000)
    top_k: int | None = Field(default=None, ge=1, le=200)
    min_similarity: float | None = Field(default=None, ge=-1.0, le=1.0)
    jurisdiction_filter: list[str] | None = None
    vertical_filter: list[str] | None = None
    document_type_filter: list[str] | None = None
    per_state_answers: bool = False
    user_id: str | None = Field(default=None, description="Records the query in recent searches when set")

    def to_options(self) -> SearchOptions:
        return SearchOptions(
            top_k=self.top_k,
            min_similarity=self.min_similarity,
            jurisdiction_filter=self.jurisdiction_filter,
            vertical_filter=self.vertical_filter,
            document_type_filter=self.document_type_filter,
            per_state_answers=self.per_state_answers,
        )


class StateAnswer(BaseModel):
    """Answer generated from one state's sources only; citation numbers are local to it."""

    state: str
    answer: str
    citations: list[Citation] = Field(default_factory=list)
    related_documents: list[RelatedDocument] = Field(default_factory=list)
    source_count: int = 0


class SearchResponse(BaseModel):
    """
    Cited answer for a query.

    In per-state mode ``state_answers`` holds one isolated answer per state,
    ``answer`` joins them under state headings and ``citations`` is empty.
    """

    answer: str
    citations: list[Citation] = Field(default_factory=list)
    related_documents: list[RelatedDocument] = Field(default_factory=list)
    clean_query: str
    state_filter: list[str] = Field(default_factory=list)
    vertical_filter: list[str] = Field(default_factory=list)
    document_type_filter: list[str] = Field(default_factory=list)
    state_answers: list[StateAnswer] = Field(default_factory=list)
