"""Streaming model client with provider selection by credential prefix."""

from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Iterator, Literal, Optional, Protocol

from anthropic import Anthropic
from openai import OpenAI

from aiteam.constants import (
    ANTHROPIC_MAX_OUTPUT_TOKENS,
    CEREBRAS_BASE_URL,
    DEFAULT_OPENROUTER_REFERER,
    DEFAULT_OPENROUTER_TITLE,
    GEMINI_BASE_URL,
    OPENAI_BASE_URL,
    OPENROUTER_BASE_URL,
)
from aiteam.errors import ConfigurationError, TransportError


class StreamingModel(Protocol):
    """Anything that can stream a model reply as text fragments."""

    def stream(
        self, system_prompt: str, user_content: str, model_id: str, credential: str
    ) -> Iterator[str]:
        ...


@dataclass(frozen=True)
class Endpoint:
    """Descriptor for a provider endpoint."""

    name: str
    base_url: Optional[str]
    headers: dict[str, str] = field(default_factory=dict)
    api: Literal["openai", "anthropic"] = "openai"


def select_endpoint(
    credential: str,
    referer: str = DEFAULT_OPENROUTER_REFERER,
    title: str = DEFAULT_OPENROUTER_TITLE,
) -> Endpoint:
    """Pick the provider endpoint from the shape of the credential.

    Args:
        credential: API key (surrounding whitespace is ignored)
        referer: HTTP-Referer header sent to OpenRouter
        title: X-Title header sent to OpenRouter

    Returns:
        Endpoint descriptor
    """
    key = credential.strip()

    if key.startswith("sk-or-v1"):
        return Endpoint(
            name="openrouter",
            base_url=OPENROUTER_BASE_URL,
            headers={"HTTP-Referer": referer, "X-Title": title},
        )
    if key.startswith("AIza"):
        return Endpoint(name="gemini", base_url=GEMINI_BASE_URL)
    if key.startswith("csk-"):
        return Endpoint(name="cerebras", base_url=CEREBRAS_BASE_URL)
    if key.startswith("sk-ant-"):
        return Endpoint(name="anthropic", base_url=None, api="anthropic")
    return Endpoint(name="openai", base_url=OPENAI_BASE_URL)


class ModelClient:
    """Streams completions from whichever provider the credential belongs to."""

    def __init__(
        self,
        referer: str = DEFAULT_OPENROUTER_REFERER,
        title: str = DEFAULT_OPENROUTER_TITLE,
        max_output_tokens: int = ANTHROPIC_MAX_OUTPUT_TOKENS,
        openai_factory: Optional[Callable[..., Any]] = None,
        anthropic_factory: Optional[Callable[..., Any]] = None,
    ):
        """Initialize model client.

        Args:
            referer: HTTP-Referer header for OpenRouter
            title: X-Title header for OpenRouter
            max_output_tokens: Output cap for providers that require one
            openai_factory: Constructor for OpenAI-compatible clients
            anthropic_factory: Constructor for Anthropic clients
        """
        self.referer = referer
        self.title = title
        self.max_output_tokens = max_output_tokens
        self._openai_factory = openai_factory or OpenAI
        self._anthropic_factory = anthropic_factory or Anthropic

    def select_endpoint(self, credential: str) -> Endpoint:
        return select_endpoint(credential, self.referer, self.title)

    def stream(
        self,
        system_prompt: str,
        user_content: str,
        model_id: str,
        credential: str,
    ) -> Generator[str, None, None]:
        """Stream a completion.

        Args:
            system_prompt: System prompt of the active agent
            user_content: Fully assembled user prompt
            model_id: Model identifier understood by the provider
            credential: API key; selects the provider

        Yields:
            Text fragments as they arrive

        Raises:
            ConfigurationError: If the credential is empty
            TransportError: If the call fails or the stream is interrupted
        """
        key = (credential or "").strip()
        if not key:
            raise ConfigurationError("API Key missing.")

        endpoint = self.select_endpoint(key)

        try:
            if endpoint.api == "anthropic":
                yield from self._stream_anthropic(endpoint, key, system_prompt, user_content, model_id)
            else:
                yield from self._stream_openai(endpoint, key, system_prompt, user_content, model_id)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"AI Error ({endpoint.name}): {e}") from e

    def _stream_openai(
        self,
        endpoint: Endpoint,
        key: str,
        system_prompt: str,
        user_content: str,
        model_id: str,
    ) -> Generator[str, None, None]:
        """Stream using an OpenAI-compatible chat completions API."""
        kwargs: dict[str, Any] = {"api_key": key, "base_url": endpoint.base_url}
        if endpoint.headers:
            kwargs["default_headers"] = dict(endpoint.headers)
        client = self._openai_factory(**kwargs)

        stream = client.chat.completions.create(
            model=model_id,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            stream=True,
        )

        for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                yield text

    def _stream_anthropic(
        self,
        endpoint: Endpoint,
        key: str,
        system_prompt: str,
        user_content: str,
        model_id: str,
    ) -> Generator[str, None, None]:
        """Stream using Anthropic API."""
        client = self._anthropic_factory(api_key=key)

        kwargs: dict[str, Any] = {
            "model": model_id,
            "messages": [{"role": "user", "content": user_content}],
            "max_tokens": self.max_output_tokens,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        with client.messages.stream(**kwargs) as stream:
            for text in stream.text_stream:
                if text:
                    yield text
