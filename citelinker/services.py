"""Service functions connecting the views to the citation engine.

These helpers build the long-lived engine objects from Django settings
and prepare pasted article content for analysis, so the views stay thin
and the wiring can be replaced in tests.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from bs4 import BeautifulSoup  # type: ignore
from django.conf import settings

from .engine.authority import OpenPageRankClient
from .engine.config import EngineConfig, load_config
from .engine.index import CitationPipeline, build_pipeline
from .engine.llm import OpenAICompletionClient, OpenAIEmbedder, build_openai_client
from .engine.reasons import ReasonGenerator
from .engine.retrieve import SerperRetriever

# Block-level tags that should break sentences when flattening HTML.
BLOCK_TAGS: list[str] = ['p', 'li', 'blockquote', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'br', 'div']


def html_to_text(html: str) -> str:
    """Flatten pasted HTML into plain text with one block per line.

    Scripts and styles are dropped; anchor text is kept while the anchors
    themselves are removed.
    """

    if not html:
        return html

    try:
        soup = BeautifulSoup(html, 'lxml')
    except Exception:
        # Fallback to html.parser if lxml isn't installed
        soup = BeautifulSoup(html, 'html.parser')

    for tag in soup(['script', 'style', 'noscript']):
        tag.decompose()
    for anchor in soup.find_all('a'):
        anchor.unwrap()
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_after('\n')

    lines = [re.sub(r'\s+', ' ', line).strip() for line in soup.get_text().splitlines()]
    return '\n'.join(line for line in lines if line)


@lru_cache(maxsize=1)
def get_engine_config() -> EngineConfig:
    """Load the domain-quality configuration once per process."""

    return load_config(getattr(settings, 'CITELINKER_CONFIG', None))


def _openai_clients() -> tuple[Optional[OpenAICompletionClient], Optional[OpenAIEmbedder]]:
    api_key = getattr(settings, 'OPENAI_API_KEY', '')
    if not api_key:
        return None, None
    client = build_openai_client(
        api_key,
        base_url=getattr(settings, 'OPENAI_API_BASE', None),
        timeout=settings.CITELINKER_UPSTREAM_TIMEOUT,
    )
    completion = OpenAICompletionClient(client, model=settings.OPENAI_MODEL)
    embedder = OpenAIEmbedder(client, model=settings.OPENAI_EMBEDDING_MODEL)
    return completion, embedder


@lru_cache(maxsize=1)
def get_pipeline() -> CitationPipeline:
    """Return the process-wide pipeline built from settings."""

    config = get_engine_config()
    completion, embedder = _openai_clients()
    timeout = settings.CITELINKER_UPSTREAM_TIMEOUT
    retriever = SerperRetriever(
        getattr(settings, 'SERPER_API_KEY', ''),
        results_requested=int(config.get('results_requested', 10)),
        timeout=timeout,
    )
    authority = OpenPageRankClient(getattr(settings, 'OPENPAGERANK_API_KEY', ''), timeout=timeout)
    return build_pipeline(
        completion=completion,
        retriever=retriever,
        embedder=embedder,
        authority=authority,
        config=config,
    )


@lru_cache(maxsize=1)
def get_reason_generator() -> ReasonGenerator:
    completion, _ = _openai_clients()
    return ReasonGenerator(completion, get_engine_config())
