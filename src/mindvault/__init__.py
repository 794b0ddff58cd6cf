"""mindvault - a thought journal with heuristic NLP analysis."""

__version__ = "0.1.0"
