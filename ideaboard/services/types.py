from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel, BeforeValidator, Field

DEFAULT_AUTHOR = "Anonymous"


def ensure_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def ensure_author(v: Any) -> str:
    # blank names are shown as anonymous contributions
    text = ensure_text(v)
    return text or DEFAULT_AUTHOR


class Idea(BaseModel):
    id: str
    text: Annotated[str, BeforeValidator(ensure_text)]
    author: Annotated[str, BeforeValidator(ensure_author)] = DEFAULT_AUTHOR
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Cluster(BaseModel):
    id: str
    idea_ids: List[str] = Field(default_factory=list)
    primary_name: str = ""
    keywords: List[str] = Field(default_factory=list)


class NoveltyDetail(BaseModel):
    relevance: float
    mean_neighbor_sim: float
    raw_novelty: float
    combined: float


class NoveltyStats(BaseModel):
    avg_novelty: Optional[float] = None
    max_novelty: Optional[int] = None


class NoveltyBadge(BaseModel):
    level: str
    label: str


class NoveltyResult(TypedDict):
    scores: Dict[str, int]
    details: Dict[str, NoveltyDetail]
    stats: NoveltyStats


class AnalysisResult(BaseModel):
    clusters: List[Cluster] = Field(default_factory=list)
    novelty_by_id: Dict[str, int] = Field(default_factory=dict)
    stats: NoveltyStats = Field(default_factory=NoveltyStats)
    top_ideas: List[Idea] = Field(default_factory=list)
    details: Dict[str, NoveltyDetail] = Field(default_factory=dict)
    vocabulary_size: int = 0
    pairwise_similarity: Optional[List[List[float]]] = None


class RankedIdea(BaseModel):
    id: str
    text: str
    author: str = DEFAULT_AUTHOR
    novelty: Optional[int] = None
    badge: Optional[NoveltyBadge] = None
    cluster_id: Optional[str] = None
