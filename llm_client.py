"""
LLM completion clients for the Financials Comparison Tool.

One CompletionService per provider, looked up through a ServiceRegistry keyed by
provider identity. Failures come back as CompletionResult values, never as raised
exceptions, so the caller's processing state always reaches a terminal transition.
"""
import logging
from dataclasses import dataclass

import httpx
import openai
from openai import OpenAI

from config import Config

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """Network, authentication or HTTP status failure reported by a provider."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class CompletionResult:
    """Success carrying the model's text, or failure carrying a CompletionError."""

    text: str = ""
    error: CompletionError = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, text: str) -> "CompletionResult":
        return cls(text=text or "")

    @classmethod
    def failure(cls, message: str) -> "CompletionResult":
        return cls(error=CompletionError(message))


@dataclass(frozen=True)
class ProviderSelection:
    """Which completion service and model to target."""

    provider: str
    model: str

    def with_provider(self, provider: str) -> "ProviderSelection":
        """Switch provider, resetting the model to that provider's first option."""
        return ProviderSelection(provider, Config.default_model_for(provider))

    @property
    def label(self) -> str:
        return Config.PROVIDER_LABELS.get(self.provider, self.provider)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error message from a provider's JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return error
    return response.reason_phrase


class CompletionService:
    """Base class: sends one prompt to one provider and returns its raw text."""

    provider = ""

    def __init__(self, http_client: httpx.Client = None, base_url: str = None, timeout: float = None):
        self.http_client = http_client
        self.base_url = (base_url or self.default_base_url() or "").rstrip("/")
        self.timeout = timeout or Config.REQUEST_TIMEOUT_SECONDS

    @property
    def label(self) -> str:
        return Config.PROVIDER_LABELS.get(self.provider, self.provider)

    def default_base_url(self) -> str:
        return ""

    def complete(self, prompt: str, model: str, credentials: str) -> CompletionResult:
        """
        Send the prompt and return the model's reply.

        Args:
            prompt: Full prompt text
            model: Provider model identifier
            credentials: API key, passed through unmodified

        Returns:
            CompletionResult.success with the reply text, or CompletionResult.failure
            with a human-readable message.
        """
        logger.info("[LLM] %s request: model=%s, prompt=%d chars", self.label, model, len(prompt))
        try:
            text = self._create_completion(prompt, model, credentials)
        except CompletionError as e:
            return self._failed(e.message)
        except openai.OpenAIError as e:
            return self._failed(f"{self.label} API error: {e}")
        except httpx.HTTPError as e:
            return self._failed(f"{self.label} request failed: {e}")
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            return self._failed(f"Unexpected {self.label} response: {e}")

        logger.info("[LLM] %s response: %d chars", self.label, len(text or ""))
        return CompletionResult.success(text)

    def _failed(self, message: str) -> CompletionResult:
        logger.warning("[LLM] %s failed: %s", self.label, message)
        return CompletionResult.failure(message)

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        raise NotImplementedError

    def _post_json(self, url: str, headers: dict, payload: dict) -> dict:
        if self.http_client is not None:
            response = self.http_client.post(url, headers=headers, json=payload, timeout=self.timeout)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, headers=headers, json=payload)

        if not response.is_success:
            raise CompletionError(
                f"{self.label} API error: {response.status_code} {_error_detail(response)}"
            )
        return response.json()


class OpenAIService(CompletionService):
    """OpenAI chat completions through the official SDK."""

    provider = "openai"

    def default_base_url(self) -> str:
        return Config.OPENAI_BASE_URL

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        if self.http_client is not None:
            return self._chat(self._sdk_client(credentials, self.http_client), prompt, model)
        # Explicit httpx client to avoid proxy compatibility issues; closed with the SDK client
        with self._sdk_client(credentials, httpx.Client(timeout=self.timeout)) as client:
            return self._chat(client, prompt, model)

    def _sdk_client(self, credentials: str, http_client: httpx.Client) -> OpenAI:
        return OpenAI(
            api_key=credentials,
            base_url=self.base_url or None,
            timeout=self.timeout,
            max_retries=0,
            http_client=http_client,
        )

    @staticmethod
    def _chat(client: OpenAI, prompt: str, model: str) -> str:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""


class DeepSeekService(CompletionService):
    """DeepSeek's OpenAI-compatible chat completions endpoint."""

    provider = "deepseek"

    def default_base_url(self) -> str:
        return Config.DEEPSEEK_BASE_URL

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        data = self._post_json(
            f"{self.base_url}/v1/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credentials}",
            },
            payload={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
            },
        )
        return data["choices"][0]["message"]["content"] or ""


class GeminiService(CompletionService):
    """Google Gemini generateContent REST endpoint."""

    provider = "gemini"

    def default_base_url(self) -> str:
        return Config.GEMINI_BASE_URL

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        data = self._post_json(
            f"{self.base_url}/models/{model}:generateContent",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": credentials,
            },
            payload={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
        )
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


class ClaudeService(CompletionService):
    """Anthropic Messages API."""

    provider = "claude"

    def default_base_url(self) -> str:
        return Config.ANTHROPIC_BASE_URL

    def _create_completion(self, prompt: str, model: str, credentials: str) -> str:
        data = self._post_json(
            f"{self.base_url}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": credentials,
                "anthropic-version": Config.ANTHROPIC_VERSION,
            },
            payload={
                "model": model,
                "max_tokens": Config.CLAUDE_MAX_TOKENS,
                "messages": [{"role": "user", "content": prompt}],
            },
        )
        blocks = data["content"]
        return "".join(block["text"] for block in blocks if block.get("type", "text") == "text")


class ServiceRegistry:
    """Completion services keyed by provider identity."""

    def __init__(self, services: list = None):
        self._services = {}
        for service in services or []:
            self.register(service)

    def register(self, service: CompletionService) -> None:
        self._services[service.provider] = service

    def get(self, provider: str) -> CompletionService:
        return self._services.get(provider)

    def providers(self) -> list[str]:
        return list(self._services)

    def __contains__(self, provider: str) -> bool:
        return provider in self._services

    def complete(self, selection: ProviderSelection, prompt: str, credentials: str) -> CompletionResult:
        """Route one prompt to the selected provider."""
        service = self.get(selection.provider)
        if service is None:
            logger.warning("[LLM] No service registered for provider %r", selection.provider)
            return CompletionResult.failure("Invalid provider selected")
        return service.complete(prompt, selection.model, credentials)


def default_registry(http_client: httpx.Client = None) -> ServiceRegistry:
    """Registry with every supported provider."""
    return ServiceRegistry([
        OpenAIService(http_client=http_client),
        DeepSeekService(http_client=http_client),
        GeminiService(http_client=http_client),
        ClaudeService(http_client=http_client),
    ])
