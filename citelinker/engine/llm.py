"""OpenAI-backed completion and embedding clients."""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

import openai
from openai import OpenAI

from .errors import UpstreamError
from .types import Vector

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_MODEL = "gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


def build_openai_client(
    api_key: str,
    *,
    base_url: str | None = None,
    timeout: float = 10.0,
) -> OpenAI:
    """Return an SDK client with the request timeout applied and retries disabled."""

    return OpenAI(api_key=api_key, base_url=base_url or None, timeout=timeout, max_retries=0)


class OpenAICompletionClient:
    """Chat-completion wrapper returning the first choice's text."""

    def __init__(self, client: OpenAI, model: str = DEFAULT_COMPLETION_MODEL) -> None:
        self.client = client
        self.model = model

    def complete(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        temperature: float = 0.0,
        max_tokens: int = 200,
    ) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[dict(message) for message in messages],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as exc:
            raise UpstreamError(f"completion request failed: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class OpenAIEmbedder:
    """Embeds a batch of texts in one request.

    Any failure yields ``None`` for every input so callers can treat the
    similarity as unknown.
    """

    def __init__(self, client: OpenAI, model: str = DEFAULT_EMBEDDING_MODEL) -> None:
        self.client = client
        self.model = model

    def embed(self, texts: Sequence[str]) -> List[Optional[Vector]]:
        vectors: List[Optional[Vector]] = [None] * len(texts)
        if not texts:
            return vectors
        # The API rejects empty strings; send them as a single space.
        inputs = [text if text.strip() else " " for text in texts]
        try:
            response = self.client.embeddings.create(model=self.model, input=inputs)
        except openai.OpenAIError as exc:
            logger.warning("Embedding request for %d texts failed: %s", len(texts), exc)
            return vectors

        for position, item in enumerate(response.data):
            index = getattr(item, "index", position)
            if 0 <= index < len(vectors) and item.embedding:
                vectors[index] = list(item.embedding)
        return vectors
