"""Text normalisation: tokens, light stemming and n-gram phrases."""

import re

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he", "in", "is", "it",
    "its", "of", "on", "that", "the", "to", "was", "will", "with", "but", "or", "not", "this",
    "they", "have", "had", "what", "said", "each", "which", "their", "time", "if", "up", "out",
    "many", "then", "them", "these", "so", "some", "her", "would", "make", "like", "into", "him",
    "two", "more", "very", "go", "no", "way", "could", "my", "than", "first", "been",
    "call", "who", "now", "find", "long", "down", "day", "did", "get", "come", "made",
    "may", "part", "i", "me", "im", "you", "your", "we", "us", "our", "am", "can", "just",
})

# Checked in this order; the first suffix that fits wins.
SUFFIXES = ("ing", "ed", "er", "est", "ly", "ies", "ied", "ying", "tion", "sion", "ness", "ment", "able", "ful")

_NON_WORD_RE = re.compile(r"[^\w\s]")


def stem(word: str) -> str:
    """Strip one suffix, keeping at least three characters of stem."""
    word = word.lower()
    for suffix in SUFFIXES:
        if word.endswith(suffix) and len(word) > len(suffix) + 2:
            return word[: -len(suffix)]
    return word


def words(text: str) -> list[str]:
    """Lower-cased content words: punctuation removed, short words and stop-words dropped."""
    cleaned = _NON_WORD_RE.sub(" ", text.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def tokenize(text: str) -> list[str]:
    """Content words of ``text``, stemmed."""
    return [stem(w) for w in words(text)]


def extract_phrases(text: str, min_len: int = 2, max_len: int = 4) -> list[str]:
    """All n-grams (min_len <= n <= max_len) that contain no stop-word.

    The text is only lower-cased and split on whitespace, so punctuation
    stays attached to its word.
    """
    tokens = text.lower().split()
    phrases = []
    for n in range(min_len, max_len + 1):
        for i in range(len(tokens) - n + 1):
            gram = tokens[i:i + n]
            if not any(w in STOP_WORDS for w in gram):
                phrases.append(" ".join(gram))
    return phrases
