import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from openai import APIStatusError, OpenAI, OpenAIError, RateLimitError

from app.features.scan.schemas.scan import Issue
from app.platform.logger import get_logger

logger = get_logger(__name__)

FIX_PROMPT_TEMPLATE = (
    "You are an accessibility expert. Given the following HTML and accessibility issue, "
    "suggest a fixed version of the HTML and explain your reasoning.\n\n"
    "HTML:\n{html}\n\n"
    "Issue:\n{issue}\n\n"
    "Return only the fixed HTML and a short explanation."
)

SYSTEM_PROMPT = "You are an accessibility expert."


def build_fix_prompt(html: str, issue: Issue) -> str:
    return FIX_PROMPT_TEMPLATE.format(
        html=html,
        issue=json.dumps(issue.model_dump(mode="json", exclude_none=True)),
    )


class Outcome(str, Enum):
    success = "success"
    rate_limited = "ProviderRateLimited"
    failed = "ProviderError"
    unavailable = "ProviderUnavailable"


@dataclass(frozen=True)
class ProviderResult:
    """Tagged result of one fallback-chain stage."""
    outcome: Outcome
    text: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "ProviderResult":
        return cls(Outcome.success, text=text)

    @classmethod
    def rate_limited(cls, reason: str) -> "ProviderResult":
        return cls(Outcome.rate_limited, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "ProviderResult":
        return cls(Outcome.failed, reason=reason)

    @classmethod
    def unavailable(cls, reason: str = "no credential configured") -> "ProviderResult":
        return cls(Outcome.unavailable, reason=reason)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.success


def _is_rate_limited(error: APIStatusError) -> bool:
    if error.status_code == 429:
        return True
    # Gemini can report quota exhaustion as {"error": {"code": 429, ...}}
    body = error.body
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        inner = body.get("error", body)
        return isinstance(inner, dict) and inner.get("code") in (429, "429")
    return False


def _reply_text(completion: Any) -> Optional[str]:
    choices = completion.choices or []
    if not choices or choices[0].message is None:
        return None
    return choices[0].message.content


class ChatCompletionProvider:
    """
    One AI provider reached through an OpenAI-compatible chat endpoint.

    Never raises for provider-side problems; every outcome comes back as a
    ProviderResult.
    """

    def __init__(
        self,
        name: str,
        client: Optional[OpenAI],
        model: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.name = name
        self.client = client
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _messages(self, prompt: str) -> List[Dict[str, str]]:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def generate(self, prompt: str) -> ProviderResult:
        if self.client is None:
            return ProviderResult.unavailable(f"{self.name} API key is not configured")

        params: Dict[str, Any] = {"model": self.model, "messages": self._messages(prompt)}
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            params["temperature"] = self.temperature

        try:
            completion = self.client.chat.completions.create(**params)
        except RateLimitError as e:
            logger.warning(f"{self.name} API rate limit reached: {e}")
            return ProviderResult.rate_limited(str(e))
        except APIStatusError as e:
            if _is_rate_limited(e):
                logger.warning(f"{self.name} API rate limit reached: {e}")
                return ProviderResult.rate_limited(str(e))
            logger.error(f"{self.name} API error (status {e.status_code}): {e}")
            return ProviderResult.failed(str(e))
        except OpenAIError as e:
            logger.error(f"{self.name} API call failed: {e}")
            return ProviderResult.failed(str(e))
        except Exception as e:
            logger.exception(f"{self.name} provider raised unexpectedly: {e}")
            return ProviderResult.failed(str(e))

        try:
            text = _reply_text(completion)
        except Exception as e:
            logger.error(f"{self.name} returned an unreadable completion: {e}")
            return ProviderResult.failed(str(e))
        return ProviderResult.success(text or f"No response from {self.name}.")
