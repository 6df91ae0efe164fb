import re
from collections import Counter
from typing import Dict, Iterable, List, Optional

import numpy as np
from nltk.tokenize import WhitespaceTokenizer
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer

# Closed list of English function words that carry no theme on their own.
STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "of", "to", "in", "on", "for", "with",
    "is", "are", "this", "that", "it", "be", "by", "from", "as", "at",
    "we", "our", "your", "you", "i", "me", "my", "their", "they", "them",
    "was", "were", "have", "has", "had", "do", "did", "does",
])

_NON_WORD = re.compile(r"[^a-z0-9\s]")
_whitespace_tokenizer = WhitespaceTokenizer()

Vocabulary = Dict[str, int]


def tokenize(text: Optional[str]) -> List[str]:
    """
    Lowercases the text, blanks out everything but ascii letters, digits and
    whitespace, and splits it into words. Stop words are dropped, duplicates
    and order are kept. No stemming or lemmatizing happens here.
    """
    if not text:
        return []
    text = _NON_WORD.sub(" ", text.lower())
    return [word for word in _whitespace_tokenizer.tokenize(text) if word and word not in STOP_WORDS]


def build_vocabulary(texts: Iterable[str]) -> Vocabulary:
    """Maps every distinct token to an index, in order of first occurrence."""
    vocabulary: Vocabulary = {}
    for text in texts:
        for word in tokenize(text):
            if word not in vocabulary:
                vocabulary[word] = len(vocabulary)
    return vocabulary


def vectorize(text: Optional[str], vocabulary: Vocabulary) -> np.ndarray:
    """Term counts of `text` laid out along `vocabulary`. Unknown words are ignored."""
    vector = np.zeros(len(vocabulary), dtype=np.int64)
    for word in tokenize(text):
        idx = vocabulary.get(word)
        if idx is not None:
            vector[idx] += 1
    return vector


def vectorize_many(texts: List[str], vocabulary: Vocabulary) -> sparse.csr_matrix:
    """
    Vectorizes a batch of texts into a sparse (len(texts), len(vocabulary)) count matrix.

    The CountVectorizer gets our own tokenizer as analyzer and the prebuilt
    vocabulary, so columns line up with `vectorize`. The matrix stays sparse:
    with a few hundred ideas the vocabulary runs into the tens of thousands of
    terms, and each row only uses a handful of them.
    """
    if not vocabulary:
        # CountVectorizer refuses an empty vocabulary
        return sparse.csr_matrix((len(texts), 0), dtype=np.int64)
    count_vectorizer = CountVectorizer(analyzer=tokenize, vocabulary=vocabulary)
    return sparse.csr_matrix(count_vectorizer.transform(texts))


def capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def extract_top_keywords(texts: Iterable[str], max_words: int) -> List[str]:
    """
    Returns the `max_words` most frequent tokens across `texts`, capitalized.
    Words with equal counts keep the order in which they were first seen.
    """
    frequency = Counter()
    for text in texts:
        frequency.update(tokenize(text))
    # most_common orders ties by first insertion
    return [capitalize(word) for word, _ in frequency.most_common(max_words)]
