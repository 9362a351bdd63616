import re
from collections import Counter

_PUNCTUATION = re.compile(r"[^\w\s]+")


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation and split on whitespace."""
    if not text:
        return []
    return _PUNCTUATION.sub(" ", text.lower()).split()


def combine_scores(
    semantic_score: float,
    lexical_score: float,
    semantic_weight: float,
    keyword_weight: float,
) -> float:
    """Weighted sum of semantic and lexical scores.

    Weights are applied as given; callers normalize them if they need the
    result to stay within [0, 1].
    """
    return semantic_weight * semantic_score + keyword_weight * lexical_score


class LexicalScorer:
    """Keyword overlap between a query and a chunk."""

    def __init__(self, use_term_frequency: bool = False, min_token_length: int = 1):
        """Initialize scorer.

        Args:
            use_term_frequency: Weigh matched tokens by how often they occur
                in the chunk instead of counting each match once.
            min_token_length: Ignore query tokens shorter than this.
        """
        self._use_term_frequency = use_term_frequency
        self._min_token_length = min_token_length

    def query_terms(self, query: str) -> set[str]:
        return {t for t in tokenize(query) if len(t) >= self._min_token_length}

    def score(self, query: str, chunk_text: str) -> float:
        """Score chunk text against the query.

        Returns:
            Value in [0, 1]. In overlap mode, 1.0 when every query term
            occurs in the chunk.
        """
        terms = self.query_terms(query)
        if not terms:
            return 0.0

        counts = Counter(tokenize(chunk_text))
        if not counts:
            return 0.0

        if not self._use_term_frequency:
            matched = sum(1 for t in terms if t in counts)
            return matched / len(terms)

        # tf/(tf+1) saturates towards 1 as a term repeats.
        total = 0.0
        for term in terms:
            tf = counts.get(term, 0)
            total += tf / (tf + 1.0)
        return total / len(terms)
