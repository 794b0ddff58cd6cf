"""Claude-backed alternatives to the local heuristics.

Every method fails soft: API errors, unparseable output and answers that
reference unknown thoughts produce ``None`` or an empty list, and the
caller falls back to the local implementation.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Sequence

import anthropic

from ..models import Category, Cluster, ClusterHierarchy, Thought, ThoughtRelevance
from ..clustering.relationships import relevance_map
from .prompts import (
    CATEGORIZE_PROMPT,
    CATEGORIZE_SYSTEM,
    CLUSTERS_PROMPT,
    CLUSTERS_SYSTEM,
    RELEVANCE_PROMPT,
    RELEVANCE_SYSTEM,
    REVISIT_PROMPT,
    REVISIT_SYSTEM,
    THEMES_PROMPT,
    THEMES_SYSTEM,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_CONTENT = 300
MIN_THEMES = 3
MAX_THEMES = 5


def _truncate(content: str) -> str:
    if len(content) > MAX_PROMPT_CONTENT:
        return content[:MAX_PROMPT_CONTENT] + "..."
    return content


def parse_json_response(text: str) -> Any | None:
    """Extract JSON from Claude's response, handling markdown code blocks.

    Returns None when nothing parses.
    """
    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try extracting from ```json ... ``` or ``` ... ```
    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            pass

    # Try the outermost object or array
    for pattern in (r"\{.*\}", r"\[.*\]"):
        match = re.search(pattern, text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                pass

    return None


def _strip_fences(text: str) -> str:
    match = re.search(r"```(?:\w+)?\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    return (match.group(1) if match else text).strip()


class ClaudeAssistant:
    """Delegates categorization, relevance, clustering and recap choices to Claude."""

    def __init__(self, config: dict[str, Any], client: Any = None):
        self.config = config
        if client is None:
            api_key = config.get("claude_api_key")
            if not api_key:
                raise ValueError("Claude API key required for AI mode. Set ANTHROPIC_API_KEY or claude_api_key in config.")
            client = anthropic.Anthropic(api_key=api_key)
        self.client = client
        self.model = config.get("claude_model", "claude-sonnet-4-20250514")

    def _ask(self, system: str, prompt: str, max_tokens: int, temperature: float = 0.3) -> str | None:
        """Single request/response; None on any API failure."""
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content[0].text
        except anthropic.APIError as e:
            logger.warning(f"Claude request failed: {e}")
        except (IndexError, AttributeError) as e:
            logger.warning(f"Unexpected Claude response shape: {e}")
        return None

    @staticmethod
    def _thought_payload(thoughts: Sequence[Thought], full: bool = False) -> str:
        data = []
        for t in thoughts:
            item = {
                "id": t.id,
                "content": t.content if full else _truncate(t.content),
                "category": t.category.value,
            }
            if full:
                item["createdAt"] = t.created_at.isoformat()
            data.append(item)
        return json.dumps(data)

    def categorize(self, content: str) -> Category | None:
        """One of the seven category labels, or None if Claude's answer is not one."""
        text = self._ask(CATEGORIZE_SYSTEM, CATEGORIZE_PROMPT.format(content=content), max_tokens=10)
        if text is None:
            return None
        label = _strip_fences(text).lower().strip(" .\"'`\n")
        try:
            return Category(label)
        except ValueError:
            logger.warning(f"Claude returned an invalid category: {label!r}")
            return None

    def relevance_scores(self, thoughts: Sequence[Thought]) -> list[ThoughtRelevance]:
        """Scored pairs among ``thoughts``; entries naming unknown ids are dropped."""
        if len(thoughts) < 2:
            return []
        text = self._ask(
            RELEVANCE_SYSTEM,
            RELEVANCE_PROMPT.format(thoughts=self._thought_payload(thoughts)),
            max_tokens=2500,
        )
        data = parse_json_response(text) if text is not None else None
        if not isinstance(data, list):
            if text is not None:
                logger.warning("Could not parse relevance scores from Claude")
            return []

        known = {t.id for t in thoughts}
        scores: dict[str, ThoughtRelevance] = {}
        for item in data:
            if not isinstance(item, dict):
                continue
            a, b = item.get("thoughtId1"), item.get("thoughtId2")
            if a not in known or b not in known or a == b:
                continue
            try:
                score = float(item.get("score", 0))
            except (TypeError, ValueError):
                continue
            rel = ThoughtRelevance(
                thought_id1=a,
                thought_id2=b,
                score=min(max(score, 0.0), 1.0),
                reason=str(item.get("reason", "")),
            )
            scores.setdefault(rel.key, rel)
        return list(scores.values())

    def hierarchical_clusters(
        self,
        thoughts: Sequence[Thought],
        relevance: Sequence[ThoughtRelevance],
        now: datetime | None = None,
    ) -> ClusterHierarchy | None:
        """Two-level cluster hierarchy proposed by Claude, or None on failure."""
        if len(thoughts) < 2:
            return ClusterHierarchy()
        text = self._ask(
            CLUSTERS_SYSTEM,
            CLUSTERS_PROMPT.format(
                thoughts=self._thought_payload(thoughts),
                relevance=json.dumps([r.to_dict() for r in relevance]),
            ),
            max_tokens=3500,
            temperature=0.4,
        )
        data = parse_json_response(text) if text is not None else None
        if not isinstance(data, dict):
            if text is not None:
                logger.warning("Could not parse cluster hierarchy from Claude")
            return None

        clusters = self._clusters_from_response(data, {t.id for t in thoughts}, now or datetime.now())
        return ClusterHierarchy(
            all_clusters={c.id: c for c in clusters},
            relevance_map=relevance_map(relevance),
        )

    @staticmethod
    def _clusters_from_response(data: dict[str, Any], known: set[str], now: datetime) -> list[Cluster]:
        raw: dict[str, dict] = {}
        all_clusters = data.get("allClusters") or {}
        if isinstance(all_clusters, dict):
            for key, item in all_clusters.items():
                if isinstance(item, dict):
                    raw[str(item.get("id") or key)] = item
        for item in data.get("rootClusters") or []:
            if isinstance(item, dict) and item.get("id") and str(item["id"]) not in raw:
                raw[str(item["id"])] = item

        parents: dict[str, str | None] = {cid: item.get("parentId") for cid, item in raw.items()}
        for cid, item in raw.items():
            for child in item.get("childrenIds") or []:
                if child in parents and parents[child] is None:
                    parents[child] = cid

        # Keep only parents that are themselves roots: at most two levels, no cycles.
        def valid_parent(cid: str) -> str | None:
            parent = parents.get(cid)
            if parent is None or parent == cid or parent not in raw or parents.get(parent) is not None:
                return None
            return parent

        clusters = []
        for cid, item in raw.items():
            thought_ids = [t for t in dict.fromkeys(item.get("thoughtIds") or []) if t in known]
            if not thought_ids:
                continue
            clusters.append(Cluster(
                id=cid,
                name=str(item.get("name") or "Untitled"),
                thought_ids=thought_ids,
                created_at=now,
                parent_id=valid_parent(cid),
                keywords=[str(k) for k in item.get("keywords") or []],
                description=str(item.get("description") or ""),
            ))

        kept = {c.id for c in clusters}
        for cluster in clusters:
            if cluster.parent_id not in kept:
                cluster.parent_id = None
        return clusters

    def themes(self, thoughts: Sequence[Thought]) -> list[str]:
        """3-5 free-text themes, or an empty list."""
        if not thoughts:
            return []
        text = self._ask(
            THEMES_SYSTEM,
            THEMES_PROMPT.format(thoughts=json.dumps([t.content for t in thoughts])),
            max_tokens=150,
        )
        data = parse_json_response(text) if text is not None else None
        if not isinstance(data, list):
            return []
        themes = [str(theme).strip() for theme in data if str(theme).strip()]
        if len(themes) < MIN_THEMES:
            logger.warning(f"Claude returned {len(themes)} theme(s), expected at least {MIN_THEMES}")
            return []
        return themes[:MAX_THEMES]

    def revisit_candidate(self, thoughts: Sequence[Thought]) -> Thought | None:
        """The thought Claude picks as most worth revisiting, if it names a known id."""
        if not thoughts:
            return None
        text = self._ask(
            REVISIT_SYSTEM,
            REVISIT_PROMPT.format(thoughts=self._thought_payload(thoughts, full=True)),
            max_tokens=50,
        )
        if text is None:
            return None
        thought_id = _strip_fences(text).strip("\"'` \n")
        for thought in thoughts:
            if thought.id == thought_id:
                return thought
        logger.warning(f"Claude suggested an unknown thought id: {thought_id!r}")
        return None
