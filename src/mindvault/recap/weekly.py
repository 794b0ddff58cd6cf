"""Weekly recap of recent thoughts."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ..clustering.cluster import ClusteringEngine
from ..models import Category, Thought, WeeklyRecap
from ..nlp.sentiment import analyze_sentiment

logger = logging.getLogger(__name__)

MAX_THEMES = 5
POSITIVE_OUTLOOK = 0.3
DIVERSE_CLUSTER_COUNT = 3


def current_time(thoughts: Sequence[Thought]) -> datetime:
    """Now, timezone-aware only when the thoughts' timestamps are."""
    if thoughts and thoughts[0].created_at.tzinfo is not None:
        return datetime.now(timezone.utc).astimezone()
    return datetime.now()


def in_window(thoughts: Sequence[Thought], days: int, now: datetime) -> list[Thought]:
    """Thoughts created within ``[now - days, now]``, in input order.

    Compared as POSIX timestamps, so naive (local) and aware datetimes mix.
    """
    end = now.timestamp()
    start = (now - timedelta(days=days)).timestamp()
    return [t for t in thoughts if start <= t.created_at.timestamp() <= end]


def category_breakdown(thoughts: Sequence[Thought]) -> dict[Category, int]:
    return dict(Counter(t.category for t in thoughts))


def recap_insights(average_sentiment: float, cluster_count: int) -> list[str]:
    insights = []
    if average_sentiment > POSITIVE_OUTLOOK:
        insights.append("Your thoughts this week show a positive outlook")
    if average_sentiment < -POSITIVE_OUTLOOK:
        insights.append("This week's thoughts suggest some challenges")
    if cluster_count > DIVERSE_CLUSTER_COUNT:
        insights.append("You've been thinking about diverse topics")
    return insights


def generate_recap(
    thoughts: Sequence[Thought],
    window_days: int = 7,
    now: datetime | None = None,
    engine: ClusteringEngine | None = None,
) -> WeeklyRecap | None:
    """Summarize the thoughts of the last ``window_days`` days.

    Returns None when no thought falls in the window. Top themes are the
    most frequent category labels; the suggested revisit is simply the
    first thought in the window.
    """
    now = now or current_time(thoughts)
    recent = in_window(thoughts, window_days, now)
    if not recent:
        return None

    engine = engine or ClusteringEngine()
    clusters = engine.cluster(recent, now=now)

    sentiments = [analyze_sentiment(t.content) for t in recent]
    average = sum(s.score for s in sentiments) / len(sentiments)

    breakdown = category_breakdown(recent)
    themes = [cat.value for cat, _ in Counter(t.category for t in recent).most_common(MAX_THEMES)]

    logger.debug(f"Recap over {len(recent)} thought(s): {len(clusters)} cluster(s), sentiment {average:.2f}")
    return WeeklyRecap(
        week_starting=now - timedelta(days=window_days),
        top_themes=themes,
        thought_count=len(recent),
        category_breakdown=breakdown,
        suggested_revisit=recent[0],
        average_sentiment=average,
        emotional_insights=recap_insights(average, len(clusters)),
    )
