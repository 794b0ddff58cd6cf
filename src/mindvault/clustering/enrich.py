"""Names, keywords and descriptions for clusters."""

import hashlib
import math
from collections import Counter
from datetime import datetime
from typing import Sequence

from ..models import Cluster, SentimentResult, Thought
from ..nlp.sentiment import analyze_sentiment
from ..nlp.tokenizer import extract_phrases, tokenize

MAX_KEYWORDS = 6
MIN_TERM_LENGTH = 4
EMOTION_NAME_THRESHOLD = 1.0


def cluster_id(thought_ids: Sequence[str]) -> str:
    """Stable id derived from the member thought ids."""
    digest = hashlib.sha256(",".join(thought_ids).encode("utf-8")).hexdigest()
    return f"cluster-{digest[:12]}"


def _title(term: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in term.split(" "))


def top_terms(texts: Sequence[str], limit: int = 2) -> list[str]:
    """Best naming terms across ``texts``.

    Single stems that appear twice or more score
    ``count * length * ln(total / count) * 0.8``; repeated phrases score
    ``count * words * 3``.
    """
    all_text = " ".join(texts)
    tokens = tokenize(all_text)
    scores: dict[str, float] = {}

    for token, count in Counter(tokens).items():
        if count >= 2 and len(token) >= MIN_TERM_LENGTH:
            rarity = math.log(len(tokens) / count)
            scores[token] = count * len(token) * rarity * 0.8

    for phrase, count in Counter(extract_phrases(all_text)).items():
        if count >= 2:
            scores[phrase] = count * len(phrase.split(" ")) * 3

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [term for term, _ in ranked[:limit]]


def cluster_name(thoughts: Sequence[Thought], sentiments: Sequence[SentimentResult]) -> str:
    """Two best terms joined with '&', else the dominant emotion, else the main category."""
    terms = top_terms([t.content for t in thoughts])
    if terms:
        return " & ".join(_title(t) for t in terms)

    emotion_totals: dict[str, float] = {}
    for sentiment in sentiments:
        for match in sentiment.emotions:
            emotion_totals[match.emotion.value] = emotion_totals.get(match.emotion.value, 0.0) + match.intensity
    if emotion_totals:
        emotion, total = max(emotion_totals.items(), key=lambda item: item[1])
        if total > EMOTION_NAME_THRESHOLD:
            return f"{_title(emotion)} Thoughts"

    category = Counter(t.category.value for t in thoughts).most_common(1)[0][0]
    return f"{_title(category)} Collection"


def cluster_keywords(thoughts: Sequence[Thought]) -> list[str]:
    """Most frequent stems that appear at least twice."""
    counts = Counter(tok for t in thoughts for tok in tokenize(t.content))
    frequent = [(tok, n) for tok, n in counts.items() if n >= 2 and len(tok) >= MIN_TERM_LENGTH]
    frequent.sort(key=lambda item: item[1], reverse=True)
    return [tok for tok, _ in frequent[:MAX_KEYWORDS]]


def emotional_tone(sentiments: Sequence[SentimentResult]) -> str:
    if not sentiments:
        return "neutral"
    avg_score = sum(s.score for s in sentiments) / len(sentiments)
    avg_magnitude = sum(s.magnitude for s in sentiments) / len(sentiments)
    if avg_score > 0.3:
        return "positive"
    if avg_score < -0.3:
        return "concerning"
    if avg_magnitude > 0.6:
        return "emotionally intense"
    return "neutral"


def cluster_description(thoughts: Sequence[Thought], sentiments: Sequence[SentimentResult]) -> str:
    categories = [cat for cat, _ in Counter(t.category.value for t in thoughts).most_common(2)]
    return (
        f"A group of {len(thoughts)} thoughts primarily about {' and '.join(categories)} "
        f"with a {emotional_tone(sentiments)} tone. These thoughts were clustered based on "
        f"semantic similarity and shared themes."
    )


def build_cluster(thoughts: Sequence[Thought], now: datetime | None = None) -> Cluster:
    """Turn a group of thoughts into a named cluster."""
    sentiments = [analyze_sentiment(t.content) for t in thoughts]
    ids = [t.id for t in thoughts]
    return Cluster(
        id=cluster_id(ids),
        name=cluster_name(thoughts, sentiments),
        thought_ids=ids,
        created_at=now or datetime.now(),
        keywords=cluster_keywords(thoughts),
        description=cluster_description(thoughts, sentiments),
    )
