"""Search response models.

Value objects are immutable (frozen) so a response cannot drift from the
index snapshot it was ranked against.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


SearchStatus = Literal["loading", "failed", "intro", "no_matches", "results"]


class SearchHit(BaseModel):
    """A single ranked chunk, ready for display."""

    model_config = ConfigDict(frozen=True)

    package: str = Field(description="Package identifier, user/project/version")
    module: str
    name: str
    signature: str = Field(description="Type signature as rendered from the parsed type")
    comment: str = ""
    score: float = Field(description="Distance to the query; lower is better")
    url: str


class SearchResponse(BaseModel):
    """Outcome of a query against the current index.

    ``intro`` means no query has been entered yet and ranking was skipped;
    ``no_matches`` means ranking ran and nothing scored within the threshold.
    """

    model_config = ConfigDict(frozen=True)

    status: SearchStatus
    query: str = ""
    query_kind: str | None = None
    total: int = 0
    results: list[SearchHit] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    error: str | None = None
