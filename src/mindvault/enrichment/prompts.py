"""Prompt templates for the Claude-backed journal features."""

CATEGORIZE_SYSTEM = (
    "You categorize thoughts into exactly one of these categories: idea, feeling, memory, task, "
    "question, observation, reflection. Respond with ONLY the category name, nothing else."
)

CATEGORIZE_PROMPT = """Categorize this thought into exactly one category (idea, feeling, memory, task, question, observation, reflection): "{content}\""""

RELEVANCE_SYSTEM = (
    "You analyze the semantic relationships between thoughts. Your task is to identify which "
    "thoughts are related to each other and assign a relevance score between them."
)

RELEVANCE_PROMPT = """Analyze the following thoughts and determine which thoughts are related to each other.

Thoughts: {thoughts}

For each pair of thoughts that are meaningfully related, assign a relevance score between 0.1 and 1.0,
where 0.1 means "slightly related" and 1.0 means "extremely closely related".

Respond with a JSON array of objects in this exact format:
[
  {{
    "thoughtId1": "id1",
    "thoughtId2": "id2",
    "score": 0.8,
    "reason": "Both discuss project planning strategies"
  }}
]

Include only pairs with a relevance score of 0.2 or higher. Return ONLY the JSON array."""

CLUSTERS_SYSTEM = (
    "You organize thoughts into a hierarchical cluster structure. Identify main themes (parent "
    "clusters) and sub-themes (child clusters), using the relevance scores between thoughts to "
    "inform your clustering decisions."
)

CLUSTERS_PROMPT = """Organize these thoughts into a hierarchical cluster structure.

Thoughts: {thoughts}

Relevance Scores: {relevance}

Create top-level clusters for major themes and child clusters for sub-themes where appropriate,
each with a descriptive name, relevant keywords and a brief description.

Respond in this exact JSON format:
{{
  "rootClusters": [
    {{
      "id": "cluster1",
      "name": "Work Projects",
      "thoughtIds": ["id1", "id3", "id8"],
      "childrenIds": ["cluster1-1"],
      "keywords": ["work", "project", "deadline"],
      "description": "Thoughts related to professional work projects and tasks"
    }}
  ],
  "allClusters": {{
    "cluster1": {{"id": "cluster1", "name": "Work Projects", "thoughtIds": ["id1", "id3", "id8"]}},
    "cluster1-1": {{
      "id": "cluster1-1",
      "name": "Project Deadlines",
      "thoughtIds": ["id1", "id8"],
      "parentId": "cluster1",
      "keywords": ["deadline", "schedule"],
      "description": "Thoughts specifically about project timelines and deadlines"
    }}
  }}
}}

Rules:
- Each cluster should have at least 2 thoughts, except where a thought is truly unique
- Create child clusters only when there's a clear sub-theme within a larger theme
- Limit the hierarchy to 2 levels (parent and children)
- Don't force thoughts into clusters if they're not related

Return ONLY the JSON object, no other text."""

THEMES_SYSTEM = "You identify common themes or topics in a set of thoughts."

THEMES_PROMPT = """Identify 3-5 key themes or topics in these thoughts:
{thoughts}

Respond with a JSON array of strings, each string being a key theme.
Example: ["Personal Growth", "Software Development", "Health"]

Return ONLY the JSON array, no other text."""

REVISIT_SYSTEM = (
    "You identify the most insightful or important thought worth revisiting from a collection of thoughts."
)

REVISIT_PROMPT = """From these thoughts, identify the ONE thought that seems most worth revisiting or reflecting on further.
Consider thoughts that:
- Contain meaningful questions
- Represent important ideas
- Suggest actions or tasks that may need follow-up
- Contain deeper insights or reflections

Thoughts: {thoughts}

Return ONLY the ID of the thought you selected, nothing else."""
