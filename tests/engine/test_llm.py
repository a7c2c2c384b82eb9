"""OpenAI wrappers with a mocked SDK client."""

from __future__ import annotations

from types import SimpleNamespace
from unittest import mock

import openai
import pytest

from citelinker.engine.errors import UpstreamError
from citelinker.engine.llm import OpenAICompletionClient, OpenAIEmbedder


def completion_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_completion_returns_first_choice_text():
    sdk = mock.Mock()
    sdk.chat.completions.create.return_value = completion_response('{"phrases": []}')
    client = OpenAICompletionClient(sdk, model="test-model")

    text = client.complete([{"role": "user", "content": "hi"}], temperature=0.4, max_tokens=40)

    assert text == '{"phrases": []}'
    sdk.chat.completions.create.assert_called_once_with(
        model="test-model",
        messages=[{"role": "user", "content": "hi"}],
        temperature=0.4,
        max_tokens=40,
    )


def test_completion_without_content_is_empty():
    sdk = mock.Mock()
    sdk.chat.completions.create.return_value = completion_response(None)
    assert OpenAICompletionClient(sdk).complete([]) == ""
    sdk.chat.completions.create.return_value = SimpleNamespace(choices=[])
    assert OpenAICompletionClient(sdk).complete([]) == ""


def test_completion_errors_become_upstream_errors():
    sdk = mock.Mock()
    sdk.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")
    with pytest.raises(UpstreamError, match="quota exceeded"):
        OpenAICompletionClient(sdk).complete([{"role": "user", "content": "hi"}])


def test_embeddings_keep_input_order():
    sdk = mock.Mock()
    sdk.embeddings.create.return_value = SimpleNamespace(
        data=[
            SimpleNamespace(index=1, embedding=[0.0, 1.0]),
            SimpleNamespace(index=0, embedding=[1.0, 0.0]),
            SimpleNamespace(index=2, embedding=[]),
        ]
    )

    vectors = OpenAIEmbedder(sdk).embed(["a", "", "c"])

    assert vectors == [[1.0, 0.0], [0.0, 1.0], None]
    _, kwargs = sdk.embeddings.create.call_args
    assert kwargs["input"] == ["a", " ", "c"]


def test_embedding_failure_yields_unknown_vectors():
    sdk = mock.Mock()
    sdk.embeddings.create.side_effect = openai.OpenAIError("down")
    assert OpenAIEmbedder(sdk).embed(["a", "b"]) == [None, None]
    assert OpenAIEmbedder(sdk).embed([]) == []
