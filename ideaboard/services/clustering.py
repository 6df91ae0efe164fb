import logging
from typing import Dict, List, Mapping

import numpy as np
from scipy import sparse

from ideaboard.services.similarity import Vector, as_sparse_row, cosine_similarity_to_each
from ideaboard.services.text import extract_top_keywords
from ideaboard.services.types import Cluster, Idea

logger = logging.getLogger(__name__)

# Minimum similarity between an idea and a centroid for the idea to join that cluster
SIMILARITY_THRESHOLD = 0.35
KEYWORDS_PER_CLUSTER = 3
NAME_SEPARATOR = " · "


def cluster_ideas(ideas: List[Idea], idea_vectors: Mapping[str, Vector]) -> List[Cluster]:
    """
    Groups ideas into themes with a single greedy pass.

    Every idea is compared to the centroids of the clusters found so far and
    joins the most similar one if the similarity reaches SIMILARITY_THRESHOLD,
    otherwise it starts a new cluster. The result depends on the order of
    `ideas`; clusters are never merged or split afterwards.

    Ideas without an entry in `idea_vectors` are skipped.
    """
    clusters: List[Cluster] = []
    centroids: List[sparse.csr_matrix] = []

    for idea in ideas:
        vector = idea_vectors.get(idea.id)
        if vector is None:
            continue

        best_idx = -1
        best_sim = -1.0
        if centroids:
            similarities = cosine_similarity_to_each(vector, centroids)
            # argmax picks the lowest index among equal maxima
            best_idx = int(np.argmax(similarities))
            best_sim = float(similarities[best_idx])

        if best_idx >= 0 and best_sim >= SIMILARITY_THRESHOLD:
            cluster = clusters[best_idx]
            cluster.idea_ids.append(idea.id)
            centroids[best_idx] = _centroid(cluster.idea_ids, idea_vectors)
        else:
            clusters.append(Cluster(id=f"c{len(clusters) + 1}", idea_ids=[idea.id]))
            # copy, so the centroid never aliases the stored idea vector
            centroids.append(as_sparse_row(vector).copy())

    _label_clusters(clusters, ideas)
    logger.debug("Grouped %d ideas into %d clusters", len(ideas), len(clusters))
    return clusters


def _centroid(idea_ids: List[str], idea_vectors: Mapping[str, Vector]) -> sparse.csr_matrix:
    # recomputed from all members every time, no running average
    members = sparse.vstack([as_sparse_row(idea_vectors[idea_id]) for idea_id in idea_ids], format="csr")
    return sparse.csr_matrix(members.sum(axis=0) / len(idea_ids))


def _label_clusters(clusters: List[Cluster], ideas: List[Idea]) -> None:
    text_by_id: Dict[str, str] = {}
    for idea in ideas:
        text_by_id.setdefault(idea.id, idea.text)

    for position, cluster in enumerate(clusters, 1):
        texts = [text_by_id.get(idea_id, "") for idea_id in cluster.idea_ids]
        cluster.keywords = extract_top_keywords(texts, KEYWORDS_PER_CLUSTER)
        if cluster.keywords:
            cluster.primary_name = NAME_SEPARATOR.join(cluster.keywords)
        else:
            cluster.primary_name = f"Theme {position}"
