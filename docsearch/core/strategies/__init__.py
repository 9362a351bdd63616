"""Scoring and query strategies."""
from .query import highlight_matches, optimize_query
from .scoring import LexicalScorer, combine_scores, tokenize

__all__ = [
    "LexicalScorer",
    "combine_scores",
    "tokenize",
    "optimize_query",
    "highlight_matches",
]
