"""Heuristic thought categorization.

Each category is scored from three signals: direct regex hits (3 points per
occurrence), context keywords (2 points each) and trigger phrases (4 points
each). Detected emotions add to the feeling score. The highest score wins,
with ties going to the category declared first in ``Category``.
"""

import re
from dataclasses import dataclass

from ..models import Category, CategoryResult
from .sentiment import EMOTIONS, emotion_hits
from .tokenizer import tokenize

DIRECT_POINTS = 3
CONTEXT_POINTS = 2
PHRASE_POINTS = 4
SUBCATEGORY_RATIO = 0.3
DEFAULT_CONFIDENCE = 0.1


@dataclass(frozen=True)
class CategoryPatterns:
    direct: tuple[re.Pattern, ...]
    context: tuple[str, ...]
    phrases: tuple[str, ...]


PATTERNS: dict[Category, CategoryPatterns] = {
    Category.IDEA: CategoryPatterns(
        direct=(re.compile(r"\b(idea|concept|plan|project|want to|wish|dream|goal|vision|imagine|create)\b"),),
        context=("invent", "design", "brainstorm", "innovate", "solution", "possibility", "potential"),
        phrases=("i want to", "what if we", "maybe we could", "good idea"),
    ),
    Category.FEELING: CategoryPatterns(
        direct=(re.compile(r"\b(feel|feeling|emotion|mood|heart|soul)\b"),),
        context=("happy", "sad", "angry", "excited", "frustrated", "anxious", "love", "hate", "emotional"),
        phrases=("feeling like", "makes me feel", "emotional about", "in my heart"),
    ),
    Category.MEMORY: CategoryPatterns(
        direct=(re.compile(r"\b(remember|recall|memory|past|childhood|yesterday|ago|used to|back when|nostalgia)\b"),),
        context=("nostalgic", "reminisce", "flashback", "remind", "think back", "brings back"),
        phrases=("i remember", "back in", "used to be", "reminds me of"),
    ),
    Category.TASK: CategoryPatterns(
        direct=(re.compile(r"\b(need to|should|must|have to|todo|task|deadline|remind|important|urgent|priority)\b"),),
        context=("complete", "finish", "accomplish", "work on", "schedule", "organize", "plan"),
        phrases=("need to do", "have to", "should probably", "dont forget"),
    ),
    Category.QUESTION: CategoryPatterns(
        direct=(
            re.compile(r"\?"),
            re.compile(r"\b(who|what|where|when|why|how|should|could|would|will|can|may|might)\b"),
        ),
        context=("uncertain", "wonder", "curious", "ask", "inquire", "question", "dont know"),
        phrases=("i wonder", "what do you think", "any ideas", "help me understand"),
    ),
    Category.OBSERVATION: CategoryPatterns(
        direct=(re.compile(r"\b(noticed|observed|saw|seems|appears|pattern|realize|interesting|weird|strange|unusual)\b"),),
        context=("notice", "trend", "remarkable", "striking", "obvious", "clear", "evident"),
        phrases=("i noticed", "seems like", "interesting that", "pattern of"),
    ),
    Category.REFLECTION: CategoryPatterns(
        direct=(re.compile(r"\b(think|thought|understand|consider|believe|wonder|maybe|perhaps|probably|philosophy)\b"),),
        context=("ponder", "contemplate", "meditate", "insight", "wisdom", "perspective", "meaning"),
        phrases=("i think", "been thinking", "my thoughts on", "i believe"),
    ),
}

REASONS: dict[Category, tuple[str, str]] = {
    Category.IDEA: ("Presents creative concepts or plans", "Expresses desires or visions"),
    Category.FEELING: ("Expresses emotions or emotional state", "Contains feeling-related vocabulary"),
    Category.MEMORY: ("References past experiences or memories", "Uses nostalgic or retrospective language"),
    Category.TASK: ("Indicates something to be done", "Contains action items or deadlines"),
    Category.QUESTION: ("Contains question words or uncertainty", "Seeks information or clarification"),
    Category.OBSERVATION: ("Makes note of patterns or phenomena", "Describes noticed behaviors or events"),
    Category.REFLECTION: ("Shows contemplative thinking", "Explores meaning or understanding"),
}

NO_MATCH_REASON = "No strong patterns detected, defaulting to idea category"


def score_categories(text: str) -> dict[Category, float]:
    """Raw score for every category, in declaration order."""
    lower = text.lower()
    tokens = set(tokenize(text))

    scores: dict[Category, float] = {}
    for category in Category:
        patterns = PATTERNS[category]
        score = 0.0
        for regex in patterns.direct:
            score += len(regex.findall(lower)) * DIRECT_POINTS
        for keyword in patterns.context:
            if keyword in tokens or keyword in lower:
                score += CONTEXT_POINTS
        for phrase in patterns.phrases:
            if phrase in lower:
                score += PHRASE_POINTS
        scores[category] = score

    for emotion, (matched, context) in emotion_hits(text).items():
        scores[Category.FEELING] += (len(matched) + 2 * len(context)) * EMOTIONS[emotion].weight

    return scores


def categorize(text: str) -> CategoryResult:
    """Assign exactly one category to ``text``.

    ``reasoning`` is always the first canned explanation for the winning
    category, so the whole result is a pure function of the text.
    """
    scores = score_categories(text)
    ranked = sorted(
        ((cat, score) for cat, score in scores.items() if score > 0),
        key=lambda item: item[1],
        reverse=True,
    )

    if not ranked:
        return CategoryResult(
            category=Category.IDEA,
            confidence=DEFAULT_CONFIDENCE,
            reasoning=NO_MATCH_REASON,
            scores=scores,
        )

    top_category, top_score = ranked[0]
    total = sum(scores.values())
    confidence = min(top_score / max(total, 1), 1.0)
    subcategories = [cat for cat, score in ranked[1:3] if score >= top_score * SUBCATEGORY_RATIO]

    return CategoryResult(
        category=top_category,
        confidence=confidence,
        subcategories=subcategories,
        reasoning=REASONS[top_category][0],
        scores=scores,
    )
