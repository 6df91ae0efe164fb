import logging
import math
from typing import Dict, List, Mapping, Optional

import numpy as np

from ideaboard.services.similarity import Vector, cosine_similarity, pairwise_similarity
from ideaboard.services.types import Idea, NoveltyBadge, NoveltyDetail, NoveltyResult, NoveltyStats

logger = logging.getLogger(__name__)

# How many of the most similar neighbours make up the redundancy signal
TOP_NEIGHBORS = 3
# Used as mean neighbour similarity when an idea has nobody to compare against
NO_NEIGHBOR_SIMILARITY = 0.5
FLAT_SCORE = 50


def round_half_up(value: float) -> int:
    # scores are never negative, so this matches the usual "round .5 up" rule
    return int(math.floor(value + 0.5))


def compute_novelty_scores(
    ideas: List[Idea],
    idea_vectors: Mapping[str, Vector],
    problem_vector: Optional[Vector],
    has_problem: bool,
) -> NoveltyResult:
    """
    Scores how novel each idea is, on a 0-100 scale.

    For every idea with a vector:
      relevance         = cosine(idea, problem), clamped to [0, 1], or 1 without a problem statement
      mean_neighbor_sim = mean of the TOP_NEIGHBORS highest similarities to the other ideas
      raw_novelty       = 1 - mean_neighbor_sim
      combined          = raw_novelty * relevance

    The combined values are then min-max normalized to 0..100. When they are
    all equal (e.g. a single idea) every idea gets FLAT_SCORE.
    """
    scores: Dict[str, int] = {}
    details: Dict[str, NoveltyDetail] = {}

    scored_ids = [idea.id for idea in ideas if idea_vectors.get(idea.id) is not None]
    if not scored_ids:
        return NoveltyResult(scores=scores, details=details, stats=NoveltyStats())

    similarity = pairwise_similarity([idea_vectors[idea_id] for idea_id in scored_ids])
    id_array = np.array(scored_ids, dtype=object)

    combined_by_id: Dict[str, float] = {}
    for i, idea_id in enumerate(scored_ids):
        vector = idea_vectors[idea_id]
        if has_problem:
            relevance = max(0.0, min(1.0, cosine_similarity(vector, problem_vector)))
        else:
            relevance = 1.0

        neighbor_sims = similarity[i][id_array != idea_id]
        if neighbor_sims.size:
            top = np.sort(neighbor_sims)[::-1][:TOP_NEIGHBORS]
            mean_neighbor_sim = float(sum(top) / len(top))
        else:
            mean_neighbor_sim = NO_NEIGHBOR_SIMILARITY

        raw_novelty = 1 - mean_neighbor_sim
        combined = raw_novelty * relevance
        combined_by_id[idea_id] = combined
        details[idea_id] = NoveltyDetail(
            relevance=relevance,
            mean_neighbor_sim=mean_neighbor_sim,
            raw_novelty=raw_novelty,
            combined=combined,
        )

    min_combined = min(combined_by_id.values())
    max_combined = max(combined_by_id.values())

    normalized: List[float] = []
    for idea_id, combined in combined_by_id.items():
        if max_combined == min_combined:
            score = float(FLAT_SCORE)
        else:
            score = 100 * (combined - min_combined) / (max_combined - min_combined)
        scores[idea_id] = round_half_up(score)
        normalized.append(score)

    stats = NoveltyStats(
        avg_novelty=sum(normalized) / len(normalized),
        max_novelty=max(scores.values()),
    )
    logger.debug("Scored %d ideas, combined novelty in [%.4f, %.4f]", len(scores), min_combined, max_combined)
    return NoveltyResult(scores=scores, details=details, stats=stats)


def novelty_badge(score: int) -> NoveltyBadge:
    """Bold / Fresh / Safe label shown next to a novelty score."""
    if score >= 80:
        return NoveltyBadge(level="high", label="Bold")
    if score >= 60:
        return NoveltyBadge(level="medium", label="Fresh")
    return NoveltyBadge(level="low", label="Safe")
