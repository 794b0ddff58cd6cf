"""Pairwise similarity between thoughts.

Two sources are provided:

* TF-IDF cosine over stemmed tokens, used for search and related-thought lookup.
* Concept overlap, used for clustering: domain concepts plus content words,
  raw word overlap and shared themes, weighted 0.6 / 0.3 / 0.1.

Both produce symmetric matrices with 1.0 on the diagonal.
"""

import re
from typing import Sequence

import numpy as np

from .tokenizer import tokenize

CONCEPT_PATTERNS = {
    "technology": re.compile(r"\b(app|application|extension|browser|chrome|website|software|code|api|platform|tool)\b"),
    "emotion": re.compile(r"\b(anxious|worried|overwhelm|stress|fear|excited|happy|sad|nervous|confident)\b"),
    "action": re.compile(r"\b(build|create|develop|design|implement|record|transcribe|meeting|presentation)\b"),
    "work": re.compile(r"\b(project|work|task|job|deadline|client|team|business)\b"),
    "personal": re.compile(r"\b(life|personal|home|family|friend|relationship|health|habit)\b"),
    "learning": re.compile(r"\b(learn|study|read|research|understand|improve|practice|skill)\b"),
    "lifestyle": re.compile(r"\b(coffee|food|eat|drink|taste|recipe|cooking|meal)\b"),
}

THEME_PATTERNS = {
    "technology": re.compile(r"\b(app|tech|software|code|digital|online|web|api|platform|extension|browser)\b", re.I),
    "anxiety": re.compile(r"\b(worry|anxious|stress|overwhelm|nervous|fear|panic|concern)\b", re.I),
    "creativity": re.compile(r"\b(idea|create|design|build|concept|innovative|think|imagine)\b", re.I),
    "work": re.compile(r"\b(project|work|job|business|meeting|deadline|client|professional)\b", re.I),
    "personal": re.compile(r"\b(feel|emotion|life|personal|experience|myself|thinking|believe)\b", re.I),
    "learning": re.compile(r"\b(learn|understand|study|research|knowledge|skill|improve)\b", re.I),
    "lifestyle": re.compile(r"\b(daily|habit|routine|food|coffee|taste|home|life)\b", re.I),
}

CONCEPT_STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "her", "was", "one",
    "our", "out", "day", "get", "has", "him", "his", "how", "man", "new", "now", "old", "see",
    "two", "way", "who", "boy", "did", "its", "let", "put", "say", "she", "too", "use",
})

CONCEPT_WEIGHT = 0.6
WORD_WEIGHT = 0.3
THEME_WEIGHT = 0.1

_WORD_RE = re.compile(r"\b[a-z]{3,}\b")


class TfidfModel:
    """TF-IDF weights over a fixed corpus of token lists.

    ``idf(term) = ln(N / (df + 1))`` and ``tf = count / len(doc)``. Only
    positive weights are kept, so a term present in every document carries
    no signal.
    """

    def __init__(self, documents: Sequence[Sequence[str]]):
        self.documents = [list(d) for d in documents]
        self.vocabulary: dict[str, int] = {}
        for doc in self.documents:
            for term in doc:
                self.vocabulary.setdefault(term, len(self.vocabulary))

        n_docs = len(self.documents)
        df = np.zeros(len(self.vocabulary))
        for doc in self.documents:
            for term in set(doc):
                df[self.vocabulary[term]] += 1
        self.idf = np.log(n_docs / (df + 1)) if n_docs else df

    def vector(self, document: Sequence[str]) -> np.ndarray:
        """Dense TF-IDF vector for ``document`` over this model's vocabulary."""
        vec = np.zeros(len(self.vocabulary))
        if not document:
            return vec
        for term in document:
            idx = self.vocabulary.get(term)
            if idx is not None:
                vec[idx] += 1
        vec = vec / len(document) * self.idf
        return np.where(vec > 0, vec, 0.0)

    def matrix(self) -> np.ndarray:
        """Document-by-term matrix for the corpus."""
        if not self.documents:
            return np.zeros((0, len(self.vocabulary)))
        return np.vstack([self.vector(doc) for doc in self.documents])


def cosine(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """Cosine similarity, 0.0 when either vector is all zeros."""
    norm1 = float(np.linalg.norm(vec1))
    norm2 = float(np.linalg.norm(vec2))
    if norm1 == 0 or norm2 == 0:
        return 0.0
    return float(np.dot(vec1, vec2) / (norm1 * norm2))


def cosine_matrix(vectors: np.ndarray) -> np.ndarray:
    """Pairwise cosine similarity of the rows of ``vectors``."""
    n = vectors.shape[0]
    if n == 0:
        return np.zeros((0, 0))
    norms = np.linalg.norm(vectors, axis=1)
    dots = vectors @ vectors.T
    denom = np.outer(norms, norms)
    sim = np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)
    sim = (sim + sim.T) / 2
    np.fill_diagonal(sim, 1.0)
    return sim


def similarity_matrix(texts: Sequence[str]) -> np.ndarray:
    """TF-IDF cosine similarity for every pair of texts."""
    model = TfidfModel([tokenize(t) for t in texts])
    return cosine_matrix(model.matrix())


def extract_concepts(text: str) -> list[str]:
    """Domain concepts followed by generic content words, deduplicated in discovery order."""
    lower = text.lower()
    concepts: list[str] = []
    for pattern in CONCEPT_PATTERNS.values():
        concepts.extend(m.group(0) for m in pattern.finditer(lower))
    concepts.extend(w for w in _WORD_RE.findall(lower) if w not in CONCEPT_STOP_WORDS)
    return list(dict.fromkeys(concepts))


def theme_similarity(text1: str, text2: str) -> float:
    """Share of fired themes that fire in both texts."""
    common = 0
    total = 0
    for pattern in THEME_PATTERNS.values():
        in1 = pattern.search(text1) is not None
        in2 = pattern.search(text2) is not None
        if in1 or in2:
            total += 1
        if in1 and in2:
            common += 1
    return common / total if total else 0.0


def content_similarity(
    text1: str,
    text2: str,
    concepts1: Sequence[str] | None = None,
    concepts2: Sequence[str] | None = None,
) -> float:
    """Weighted concept, word and theme overlap, capped at 1.0."""
    c1 = set(extract_concepts(text1) if concepts1 is None else concepts1)
    c2 = set(extract_concepts(text2) if concepts2 is None else concepts2)
    concept_score = len(c1 & c2) / max(len(c1), len(c2), 1)

    w1 = set(_WORD_RE.findall(text1.lower()))
    w2 = set(_WORD_RE.findall(text2.lower()))
    word_score = len(w1 & w2) / max(len(w1), len(w2), 1)

    theme_score = theme_similarity(text1, text2)

    score = concept_score * CONCEPT_WEIGHT + word_score * WORD_WEIGHT + theme_score * THEME_WEIGHT
    return min(score, 1.0)


def concept_similarity_matrix(texts: Sequence[str]) -> np.ndarray:
    """Content similarity for every pair of texts."""
    n = len(texts)
    concepts = [extract_concepts(t) for t in texts]
    matrix = np.eye(n)
    for i in range(n):
        for j in range(i + 1, n):
            sim = content_similarity(texts[i], texts[j], concepts[i], concepts[j])
            matrix[i, j] = matrix[j, i] = sim
    return matrix
