"""Lexicon sentiment scoring and pattern-based emotion detection."""

import re
from dataclasses import dataclass

from ..models import Emotion, EmotionMatch, SentimentResult
from .tokenizer import words

POSITIVE_WORDS = {
    "amazing": 0.9, "awesome": 0.8, "brilliant": 0.8, "excellent": 0.8, "fantastic": 0.9,
    "good": 0.5, "great": 0.7, "happy": 0.6, "love": 0.8, "perfect": 0.9, "wonderful": 0.8,
    "excited": 0.7, "thrilled": 0.8, "grateful": 0.7, "blessed": 0.7, "joy": 0.8,
}

NEGATIVE_WORDS = {
    "awful": -0.8, "terrible": -0.8, "horrible": -0.8, "hate": -0.7, "bad": -0.5,
    "sad": -0.6, "angry": -0.7, "frustrated": -0.6, "disappointed": -0.6, "worst": -0.9,
    "annoying": -0.5, "stressed": -0.6, "overwhelmed": -0.7, "anxious": -0.6,
}

POLARITY_THRESHOLD = 0.15
PATTERN_INTENSITY = 0.3
CONTEXT_INTENSITY = 0.5


@dataclass(frozen=True)
class EmotionDefinition:
    patterns: tuple[str, ...]
    weight: float
    context: tuple[str, ...]


# Patterns are word stems matched as substrings; context entries are whole phrases.
EMOTIONS: dict[Emotion, EmotionDefinition] = {
    Emotion.ANXIETY: EmotionDefinition(
        patterns=("worry", "anxious", "stress", "overwhelm", "panic", "nervous", "fear", "scared", "tension", "restless"),
        weight=0.9,
        context=("cant sleep", "racing thoughts", "what if", "worst case"),
    ),
    Emotion.DEPRESSION: EmotionDefinition(
        patterns=("sad", "depress", "empty", "hopeless", "worthless", "numb", "tire", "exhaust", "alone", "dark"),
        weight=0.9,
        context=("no energy", "dont care", "whats the point", "feel like"),
    ),
    Emotion.EXCITEMENT: EmotionDefinition(
        patterns=("excite", "thrill", "amaz", "awesome", "fantastic", "incredible", "wonderful", "energized"),
        weight=0.8,
        context=("cant wait", "so pumped", "this is great", "feeling alive"),
    ),
    Emotion.GRATITUDE: EmotionDefinition(
        patterns=("grateful", "thankful", "blessed", "appreciate", "fortune", "lucky", "privilege"),
        weight=0.7,
        context=("so grateful for", "blessed to have", "appreciate that"),
    ),
    Emotion.CONFUSION: EmotionDefinition(
        patterns=("confus", "unclear", "lost", "perplex", "puzzle", "unsure", "doubt", "uncertain"),
        weight=0.6,
        context=("dont understand", "not sure", "confused about", "lost in"),
    ),
    Emotion.MOTIVATION: EmotionDefinition(
        patterns=("motivate", "inspire", "determin", "goal", "achieve", "success", "progress", "driven"),
        weight=0.7,
        context=("ready to", "going to", "determined to", "focused on"),
    ),
    Emotion.LOVE: EmotionDefinition(
        patterns=("love", "adore", "cherish", "care", "affection", "devoted", "heart", "soul"),
        weight=0.8,
        context=("love you", "care about", "mean everything", "special to me"),
    ),
}

_SENTENCE_RE = re.compile(r"[.!?]+")


def emotion_hits(text: str) -> dict[Emotion, tuple[list[str], list[str]]]:
    """Matched (patterns, context phrases) per emotion, only for emotions with a hit."""
    lower = text.lower()
    hits = {}
    for emotion, definition in EMOTIONS.items():
        patterns = [p for p in definition.patterns if p in lower]
        context = [c for c in definition.context if c in lower]
        if patterns or context:
            hits[emotion] = (patterns, context)
    return hits


def detect_emotions(text: str) -> list[EmotionMatch]:
    """Emotions present in ``text``, strongest first."""
    detected = []
    for emotion, (patterns, context) in emotion_hits(text).items():
        raw = len(patterns) * PATTERN_INTENSITY + len(context) * CONTEXT_INTENSITY
        intensity = min(raw * EMOTIONS[emotion].weight, 1.0)
        detected.append(EmotionMatch(emotion=emotion, intensity=intensity, context=patterns + context))
    # sorted() is stable, so equal intensities keep definition order
    return sorted(detected, key=lambda e: e.intensity, reverse=True)


def _sentence_score(sentence: str) -> float | None:
    total = 0.0
    found = 0
    for word in words(sentence):
        weight = POSITIVE_WORDS.get(word) or NEGATIVE_WORDS.get(word)
        if weight:
            total += weight
            found += 1
    return total / found if found else None


def _nuance(emotions: list[EmotionMatch]) -> str:
    if not emotions:
        return "balanced"
    if emotions[0].intensity > 0.6:
        return emotions[0].emotion.value
    if len(emotions) > 2:
        return "complex"
    return "balanced"


def analyze_sentiment(text: str) -> SentimentResult:
    """Score polarity and magnitude of ``text`` and detect emotions.

    Each sentence contributes the mean weight of its lexicon words; the
    score is the mean over sentences with at least one lexicon word, or 0
    when none match.
    """
    sentences = [s for s in _SENTENCE_RE.split(text) if s.strip()]
    sentence_scores = [s for s in (_sentence_score(sentence) for sentence in sentences) if s is not None]

    raw = sum(sentence_scores) / len(sentence_scores) if sentence_scores else 0.0
    score = max(-1.0, min(1.0, raw))
    magnitude = abs(score)

    if score > POLARITY_THRESHOLD:
        polarity = "positive"
    elif score < -POLARITY_THRESHOLD:
        polarity = "negative"
    else:
        polarity = "neutral"

    coverage = len(sentence_scores) / len(sentences) if sentences else 0.0
    confidence = min(magnitude + coverage * 0.5, 1.0)

    emotions = detect_emotions(text)
    return SentimentResult(
        score=score,
        polarity=polarity,
        confidence=confidence,
        magnitude=magnitude,
        emotions=emotions,
        nuance=_nuance(emotions),
    )
