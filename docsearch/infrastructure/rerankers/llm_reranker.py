import json
import logging
import re
from dataclasses import replace

from openai import OpenAI, OpenAIError

from docsearch.core.exceptions import RerankFailure
from docsearch.core.models.document import ScoredHit

logger = logging.getLogger(__name__)

RERANK_SYSTEM_PROMPT = """You rank document passages by how well they answer a search query.
Reply with ONLY a JSON array of passage numbers, most relevant first, e.g. [2, 0, 1].
Include every passage number exactly once."""

MAX_PASSAGE_CHARS = 800


class LLMReranker:
    """Reranker asking a chat model (OpenAI-compatible API) for an ordering."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        model: str = "qwen2.5:7b",
        api_key: str = "ollama",
        timeout: float = 30.0,
        client: OpenAI | None = None,
    ):
        """Initialize LLM reranker.

        Args:
            base_url: OpenAI-compatible API URL.
            model: Model name.
            api_key: API key (any value for Ollama).
            timeout: Request timeout in seconds.
            client: Preconfigured client.
        """
        self._client = client or OpenAI(base_url=base_url, api_key=api_key, timeout=timeout)
        self._model = model

    def _build_prompt(self, query: str, candidates: list[ScoredHit]) -> str:
        parts = [f"Query: {query}", ""]
        for i, hit in enumerate(candidates):
            parts.append(f"[{i}] {hit.text[:MAX_PASSAGE_CHARS]}")
        return "\n".join(parts)

    def _parse_order(self, content: str, size: int) -> list[int]:
        """Parse the model's index list; omitted indices keep their relative order."""
        match = re.search(r"\[[\d,\s]*\]", content or "")
        if not match:
            raise RerankFailure("LLM reply contains no index list", {"reply": content[:200]})

        order = []
        for value in json.loads(match.group(0)):
            if not 0 <= value < size:
                raise RerankFailure(f"LLM returned out-of-range index {value}")
            if value not in order:
                order.append(value)

        order.extend(i for i in range(size) if i not in order)
        return order

    def rerank(self, query: str, candidates: list[ScoredHit]) -> list[ScoredHit]:
        """Reorder hits by LLM judgment.

        Raises:
            RerankFailure: If the request fails or the reply cannot be parsed.
        """
        if len(candidates) < 2:
            return list(candidates)

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": RERANK_SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(query, candidates)},
                ],
                temperature=0.0,
                max_tokens=256,
            )
        except OpenAIError as e:
            raise RerankFailure(f"LLM request failed: {e}") from e

        content = response.choices[0].message.content or ""
        order = self._parse_order(content, len(candidates))
        logger.debug(f"LLM rerank order for '{query[:50]}': {order}")

        # Position-based score so callers can see the judged rank.
        size = len(candidates)
        return [
            replace(candidates[i], rerank_score=(size - pos) / size)
            for pos, i in enumerate(order)
        ]
