import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from perf_review.core import prompts
from perf_review.core.config import settings
from perf_review.core.exceptions import (
    AIConfigurationError,
    AIError,
    AIKillSwitchError,
    AITimeoutError,
)

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

PROVIDERS = ("openai", "anthropic")

KNOWN_MODELS: Dict[str, List[str]] = {
    "openai": ["gpt-4.1-mini", "gpt-4.1", "gpt-4o", "gpt-4o-mini"],
    "anthropic": ["claude-3-5-sonnet-latest", "claude-3-5-haiku-latest", "claude-3-opus-latest"],
}


class AIDomain:
    REVIEW = "review"
    RATING = "rating"


@dataclass
class AIResult:
    provider: str
    model: str
    output: str
    truncated: bool = False


def truncate_prompt(prompt: str, max_chars: int) -> tuple:
    """Hard-cut a prompt at the character budget. Returns (prompt, truncated)."""
    if len(prompt) <= max_chars:
        return prompt, False
    return prompt[:max_chars] + "\n\n" + prompts.TRUNCATION_MARKER, True


def _is_connection_failure(exc: BaseException) -> bool:
    # ConnectTimeout is also a ConnectionError; a timed-out call is not retried
    return (
        isinstance(exc, requests.exceptions.ConnectionError)
        and not isinstance(exc, requests.exceptions.Timeout)
    )


class AIOrchestrator:
    @staticmethod
    def resolve_provider(provider: Optional[str] = None) -> str:
        name = (provider or settings.ai.provider or "openai").lower()
        return "anthropic" if name == "anthropic" else "openai"

    @staticmethod
    def resolve_model(provider: str, model: Optional[str] = None) -> str:
        if model:
            return model
        if provider == "anthropic":
            return settings.ai.anthropic_model
        return settings.ai.openai_model

    @staticmethod
    def _api_key(provider: str) -> Optional[str]:
        if provider == "anthropic":
            return settings.ai.anthropic_api_key
        return settings.ai.openai_api_key

    @classmethod
    def list_providers(cls) -> List[Dict[str, object]]:
        """Providers with a configured API key, configured model first."""
        available = []
        for provider in PROVIDERS:
            if not cls._api_key(provider):
                continue
            models = [cls.resolve_model(provider)] + KNOWN_MODELS[provider]
            available.append({"name": provider, "models": list(dict.fromkeys(models))})
        return available

    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_connection_failure),
        reraise=True
    )
    def _post(url: str, headers: Dict[str, str], payload: Dict[str, object], timeout: float) -> Dict:
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        response.raise_for_status()
        return response.json()

    @classmethod
    def _call_openai(cls, api_key: str, model: str, system_prompt: str, prompt: str, timeout: float) -> str:
        data = cls._post(
            OPENAI_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            payload={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                "temperature": settings.ai.temperature,
            },
            timeout=timeout,
        )
        return (data.get("choices") or [{}])[0].get("message", {}).get("content", "").strip()

    @classmethod
    def _call_anthropic(cls, api_key: str, model: str, system_prompt: str, prompt: str, timeout: float) -> str:
        data = cls._post(
            ANTHROPIC_URL,
            headers={
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            payload={
                "model": model,
                "max_tokens": settings.ai.max_tokens,
                "temperature": settings.ai.temperature,
                "system": system_prompt,
                "messages": [{"role": "user", "content": prompt}],
            },
            timeout=timeout,
        )
        blocks = data.get("content") or []
        return "".join(b.get("text", "") for b in blocks if b.get("type", "text") == "text").strip()

    @classmethod
    def run(
        cls,
        prompt: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        domain: str = AIDomain.REVIEW,
    ) -> AIResult:
        """
        Send a prompt to the configured LLM provider.

        Applies the prompt character budget, the kill switch and a bounded
        timeout. Timeouts raise AITimeoutError; other upstream failures raise AIError.
        """
        provider = cls.resolve_provider(provider)
        model = cls.resolve_model(provider, model)
        if timeout is None:
            timeout = (
                settings.ai.rating_timeout_seconds if domain == AIDomain.RATING
                else settings.ai.review_timeout_seconds
            )
        logger.info(f"AI Request | Domain: {domain} | Provider: {provider} | Model: {model}")

        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        api_key = cls._api_key(provider)
        if not api_key:
            logger.error(f"API key for provider '{provider}' missing.")
            raise AIConfigurationError(f"Missing API key for provider '{provider}'.")

        safe_prompt, truncated = truncate_prompt(prompt, settings.ai.max_prompt_chars)
        if truncated:
            logger.warning(
                f"Prompt truncated from {len(prompt)} to {settings.ai.max_prompt_chars} chars",
                extra={"domain": domain},
            )

        system_prompt = prompts.RATING_SYSTEM if domain == AIDomain.RATING else prompts.REVIEW_SYSTEM
        call = cls._call_anthropic if provider == "anthropic" else cls._call_openai

        try:
            output = call(api_key, model, system_prompt, safe_prompt, timeout)
        except requests.exceptions.Timeout:
            logger.error(f"AI service timeout after {timeout}s.")
            raise AITimeoutError(timeout)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"AI service HTTP error: {e}")
            raise AIError(f"{provider} returned error: {status}")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI service request failed: {e}")
            raise AIError(f"AI service error: {str(e)}")

        if not output:
            logger.warning(f"{provider} returned an empty completion")
        return AIResult(provider=provider, model=model, output=output, truncated=truncated)
