from typing import List, Optional, Sequence, Union

import numpy as np
from scipy import sparse

Vector = Union[Sequence[float], np.ndarray, sparse.spmatrix]


def as_sparse_row(vector: Vector) -> sparse.csr_matrix:
    """A 1 x n float CSR row for a dense vector or a sparse row."""
    if sparse.issparse(vector):
        return sparse.csr_matrix(vector, dtype=float)
    return sparse.csr_matrix(np.asarray(vector, dtype=float).reshape(1, -1))


def cosine_similarity(a: Optional[Vector], b: Optional[Vector]) -> float:
    """
    Cosine similarity of two equal-length vectors, dense or sparse.

    Returns 0 instead of failing when a vector is missing, when the lengths
    differ, or when either vector has zero norm. With term counts as input the
    result lies in [0, 1].
    """
    if a is None or b is None:
        return 0.0
    a = as_sparse_row(a)
    b = as_sparse_row(b)
    if a.shape != b.shape or a.shape[1] == 0:
        return 0.0
    norm_a = float(a.multiply(a).sum())
    norm_b = float(b.multiply(b).sum())
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # a single sqrt over the product keeps identical vectors at exactly 1
    return float(a.multiply(b).sum()) / float(np.sqrt(norm_a * norm_b))


def cosine_similarity_to_each(vector: Vector, others: Sequence[Vector]) -> np.ndarray:
    """
    Cosine similarity of `vector` against every entry of `others`, in one
    sparse product. Entries of a different length score 0.
    """
    similarity = np.zeros(len(others), dtype=float)
    row = as_sparse_row(vector)
    width = row.shape[1]
    others = [as_sparse_row(other) for other in others]
    matching = [idx for idx, other in enumerate(others) if other.shape[1] == width]
    if not matching or width == 0:
        return similarity

    stacked = sparse.vstack([others[idx] for idx in matching], format="csr")
    dots = (stacked @ row.T).toarray().ravel()
    squared_norms = np.asarray(stacked.multiply(stacked).sum(axis=1)).ravel()
    denominator = np.sqrt(squared_norms * float(row.multiply(row).sum()))
    with np.errstate(divide="ignore", invalid="ignore"):
        similarity[matching] = np.where(denominator > 0, dots / denominator, 0.0)
    return similarity


def pairwise_similarity(vectors: Union[Sequence[Vector], np.ndarray, sparse.spmatrix]) -> np.ndarray:
    """
    Square matrix of cosine similarities between every pair of `vectors`
    (a list of vectors, or the rows of a dense or sparse matrix).

    Works on the sparse term counts in one pass: the Gram matrix X @ X.T gives
    every dot product, its diagonal every squared norm. The upper triangle is
    then mirrored, so sim[i][j] is always exactly sim[j][i].
    """
    if sparse.issparse(vectors) or (isinstance(vectors, np.ndarray) and vectors.ndim == 2):
        matrix = sparse.csr_matrix(vectors, dtype=float)
    else:
        rows = [as_sparse_row(vector) for vector in vectors]
        if len({row.shape[1] for row in rows}) > 1:
            # vectors of different lengths are never similar to each other
            return _pairwise_by_pair(rows)
        matrix = sparse.vstack(rows, format="csr") if rows else sparse.csr_matrix((0, 0))

    n = matrix.shape[0]
    if n == 0 or matrix.shape[1] == 0:
        return np.zeros((n, n), dtype=float)

    gram = (matrix @ matrix.T).toarray()
    squared_norms = np.diag(gram).copy()
    denominator = np.sqrt(np.outer(squared_norms, squared_norms))
    with np.errstate(divide="ignore", invalid="ignore"):
        similarity = np.where(denominator > 0, gram / denominator, 0.0)

    return np.triu(similarity) + np.triu(similarity, 1).T


def _pairwise_by_pair(rows: List[sparse.csr_matrix]) -> np.ndarray:
    n = len(rows)
    similarity = np.zeros((n, n), dtype=float)
    for i in range(n):
        similarity[i, i] = cosine_similarity(rows[i], rows[i])
        for j in range(i + 1, n):
            similarity[i, j] = similarity[j, i] = cosine_similarity(rows[i], rows[j])
    return similarity
