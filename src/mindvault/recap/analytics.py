"""Aggregate statistics over a time range of thoughts."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from ..models import Category, Cluster, Thought
from ..nlp.sentiment import analyze_sentiment
from .weekly import current_time, in_window

TIME_RANGES = {"week": 7, "month": 30, "all": None}

TASK_FOCUS_RATIO = 0.4
CREATIVE_RATIO = 0.3


@dataclass
class ThoughtAnalytics:
    total_thoughts: int
    average_sentiment: float
    average_magnitude: float
    category_distribution: dict[Category, int]
    emotion_distribution: dict[str, float]
    hour_pattern: list[int]
    day_pattern: list[int]  # Monday first
    insights: list[str] = field(default_factory=list)


def _insights(thoughts: Sequence[Thought], average_sentiment: float, cluster_count: int) -> list[str]:
    insights = []
    if average_sentiment > 0.3:
        insights.append("Positive Outlook: your thoughts show a generally positive emotional tone.")
    elif average_sentiment < -0.3:
        insights.append("Emotional Challenges: consider reaching out for support if you're going through a tough time.")

    total = len(thoughts)
    if sum(1 for t in thoughts if t.category is Category.TASK) / total > TASK_FOCUS_RATIO:
        insights.append("Task-Focused: you've been thinking a lot about tasks and goals lately.")
    if sum(1 for t in thoughts if t.category is Category.IDEA) / total > CREATIVE_RATIO:
        insights.append("Creative Flow: your mind has been generating lots of creative ideas.")
    if cluster_count > 3:
        insights.append("Diverse Thinking: your thoughts span many different topics and themes.")
    return insights


def thought_analytics(
    thoughts: Sequence[Thought],
    time_range: str = "week",
    now: datetime | None = None,
    clusters: Sequence[Cluster] = (),
) -> ThoughtAnalytics | None:
    """Statistics for ``week``, ``month`` or ``all`` thoughts; None when the range is empty."""
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range: {time_range}")

    days = TIME_RANGES[time_range]
    selected = list(thoughts) if days is None else in_window(thoughts, days, now or current_time(thoughts))
    if not selected:
        return None

    sentiments = [analyze_sentiment(t.content) for t in selected]
    avg_sentiment = sum(s.score for s in sentiments) / len(sentiments)
    avg_magnitude = sum(s.magnitude for s in sentiments) / len(sentiments)

    emotions: dict[str, float] = {}
    for sentiment in sentiments:
        for match in sentiment.emotions:
            emotions[match.emotion.value] = emotions.get(match.emotion.value, 0.0) + match.intensity

    hours = [0] * 24
    days_of_week = [0] * 7
    for thought in selected:
        hours[thought.created_at.hour] += 1
        days_of_week[thought.created_at.weekday()] += 1

    return ThoughtAnalytics(
        total_thoughts=len(selected),
        average_sentiment=avg_sentiment,
        average_magnitude=avg_magnitude,
        category_distribution=dict(Counter(t.category for t in selected)),
        emotion_distribution=emotions,
        hour_pattern=hours,
        day_pattern=days_of_week,
        insights=_insights(selected, avg_sentiment, len(clusters)),
    )
