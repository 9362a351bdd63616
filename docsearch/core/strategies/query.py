"""Query rewriting and match highlighting."""
import re

FILLER_WORDS = frozenset({
    "a", "an", "the", "this", "that", "these", "those",
    "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did",
    "to", "of", "in", "on", "at", "by", "for", "with", "about", "against",
    "between", "into", "through", "during", "before", "after", "above", "below",
    "can", "could", "shall", "should", "will", "would", "may", "might", "must",
    "and", "or", "but",
})

ABBREVIATIONS = {
    "vs": "versus",
    "etc": "etcetera",
    "e.g": "for example",
    "i.e": "that is",
    "fig": "figure",
    "app": "application",
    "info": "information",
    "tech": "technology",
    "doc": "document",
    "docs": "documents",
}

MIN_HIGHLIGHT_LENGTH = 3


def optimize_query(query: str) -> str:
    """Normalize a user query for retrieval.

    Lowercases, expands common abbreviations and, for queries longer than
    two words, drops filler words as long as something remains.
    """
    optimized = query.lower().strip()

    for abbr, expanded in ABBREVIATIONS.items():
        optimized = re.sub(rf"\b{re.escape(abbr)}\b", expanded, optimized)

    words = optimized.split()
    if len(words) > 2:
        kept = [w for w in words if w not in FILLER_WORDS]
        if kept:
            return " ".join(kept)

    return " ".join(words)


def highlight_matches(text: str, query: str, tag: str = "mark") -> str:
    """Wrap whole-word query matches in ``<tag>`` markers."""
    if not text or not query:
        return text

    keywords = {
        w for w in re.findall(r"\w+", query.lower()) if len(w) >= MIN_HIGHLIGHT_LENGTH
    }
    if not keywords:
        return text

    pattern = re.compile(
        r"\b(" + "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True)) + r")\b",
        re.IGNORECASE,
    )
    return pattern.sub(rf"<{tag}>\1</{tag}>", text)
