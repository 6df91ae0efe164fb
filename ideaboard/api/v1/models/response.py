from pydantic import BaseModel
from typing import List, Dict, Optional

from ideaboard.services.types import Cluster, Idea, NoveltyBadge, NoveltyDetail, NoveltyStats, RankedIdea

class AnalysisResponse(BaseModel):
    clusters: List[Cluster]
    novelty_by_id: Dict[str, int]
    stats: NoveltyStats
    top_ideas: List[Idea]
    ranked_ideas: List[RankedIdea]
    novelty_details: Optional[Dict[str, NoveltyDetail]] = None
    pairwise_similarity_matrix: Optional[List[List[float]]] = None

class SubmitIdeaResponse(BaseModel):
    idea: Idea
    novelty: Optional[int] = None
    badge: Optional[NoveltyBadge] = None
    is_standout: bool = False
    analysis: AnalysisResponse
