"""Search options and their validation."""
from dataclasses import asdict, dataclass, field
from typing import Any

from ..exceptions import ValidationError

MAX_QUERY_LENGTH = 500
MAX_LIMIT = 100


@dataclass(frozen=True)
class SearchOptions:
    """Per-call search configuration."""
    limit: int = 10
    offset: int = 0
    min_score: float = 0.5
    filter: dict[str, Any] = field(default_factory=dict)
    enhance_context: bool = True
    rerank: bool = True
    keyword_weight: float = 0.3
    semantic_weight: float = 0.7

    def validate(self, query: str) -> str:
        """Check query and option bounds.

        Args:
            query: Raw user query.

        Returns:
            Trimmed query.

        Raises:
            ValidationError: If the query or any option is out of range.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query is required", {"field": "query"})

        query = query.strip()
        if len(query) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"Search query exceeds {MAX_QUERY_LENGTH} characters",
                {"field": "query", "length": len(query)},
            )

        _check_int("limit", self.limit, 1, MAX_LIMIT)
        _check_int("offset", self.offset, 0, None)
        _check_unit("min_score", self.min_score)
        _check_unit("keyword_weight", self.keyword_weight)
        _check_unit("semantic_weight", self.semantic_weight)

        if not isinstance(self.filter, dict):
            raise ValidationError("filter must be a mapping", {"field": "filter"})

        return query

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _check_int(name: str, value: Any, low: int, high: int | None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", {"field": name, "value": value})
    if value < low or (high is not None and value > high):
        bounds = f"[{low}, {high}]" if high is not None else f">= {low}"
        raise ValidationError(
            f"{name} must be {bounds}, got {value}", {"field": name, "value": value}
        )


def _check_unit(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number", {"field": name, "value": value})
    if value != value or not 0.0 <= value <= 1.0:
        raise ValidationError(
            f"{name} must be in [0, 1], got {value}", {"field": name, "value": value}
        )
