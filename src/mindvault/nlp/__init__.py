"""Heuristic NLP stack: tokenizer, similarity, sentiment and categorization."""

from .categorizer import categorize
from .sentiment import analyze_sentiment, detect_emotions
from .similarity import concept_similarity_matrix, similarity_matrix
from .tokenizer import extract_phrases, tokenize

__all__ = [
    "analyze_sentiment",
    "categorize",
    "concept_similarity_matrix",
    "detect_emotions",
    "extract_phrases",
    "similarity_matrix",
    "tokenize",
]
