import logging
from typing import Dict, List, Optional

from scipy import sparse

from ideaboard.services.clustering import cluster_ideas
from ideaboard.services.novelty import compute_novelty_scores
from ideaboard.services.similarity import pairwise_similarity
from ideaboard.services.text import build_vocabulary, tokenize, vectorize_many
from ideaboard.services.types import AnalysisResult, Idea

logger = logging.getLogger(__name__)

TOP_IDEAS_LIMIT = 5


def compute_analysis(
    problem_statement: Optional[str],
    ideas: List[Idea],
    include_similarity_matrix: bool = False,
) -> AnalysisResult:
    """
    Clusters the ideas and scores their novelty against the problem statement.

    Everything is recomputed from scratch on each call: the vocabulary is built
    from the problem statement (when it has any words) followed by the idea
    texts, every text is turned into a term-count vector, and those vectors
    feed the clusterer and the novelty scorer. An empty idea list gives an
    empty result.
    """
    if not ideas:
        return AnalysisResult()

    has_problem_tokens = len(tokenize(problem_statement)) > 0
    texts = [problem_statement] if has_problem_tokens else []
    texts.extend(idea.text for idea in ideas)

    vocabulary = build_vocabulary(texts)
    problem_vector = vectorize_many([problem_statement], vocabulary) if has_problem_tokens else None

    idea_matrix = vectorize_many([idea.text for idea in ideas], vocabulary)
    idea_vectors: Dict[str, sparse.csr_matrix] = {}
    for idea, row in zip(ideas, idea_matrix):
        idea_vectors[idea.id] = row
    logger.debug("Vectorized %d ideas over %d terms", len(ideas), len(vocabulary))

    clusters = cluster_ideas(ideas, idea_vectors)
    novelty = compute_novelty_scores(ideas, idea_vectors, problem_vector, has_problem_tokens)
    novelty_by_id = novelty["scores"]

    # sorted() is stable, so ties keep their submission order
    top_ideas = sorted(ideas, key=lambda idea: novelty_by_id.get(idea.id, 0), reverse=True)[:TOP_IDEAS_LIMIT]

    result = AnalysisResult(
        clusters=clusters,
        novelty_by_id=novelty_by_id,
        stats=novelty["stats"],
        top_ideas=top_ideas,
        details=novelty["details"],
        vocabulary_size=len(vocabulary),
    )
    if include_similarity_matrix:
        result.pairwise_similarity = pairwise_similarity(idea_matrix).tolist()
    return result
