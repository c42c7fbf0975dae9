from typing import Optional

import httpx
from openai import OpenAI

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ProviderPool:
    """
    Outbound AI clients, built once per process.

    Both clients share a single pooled httpx client. SDK-level retries are
    disabled: a 429 must reach the fix-suggestion chain on the first attempt.
    A client is ``None`` when its credential is not configured.
    """

    def __init__(
        self,
        gemini_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT_SECONDS
        self.http_client = httpx.Client(
            timeout=self.timeout,
            limits=httpx.Limits(max_connections=settings.AI_MAX_CONNECTIONS),
        )

        self.gemini: Optional[OpenAI] = None
        if gemini_api_key:
            self.gemini = OpenAI(
                api_key=gemini_api_key,
                base_url=settings.GEMINI_BASE_URL,
                http_client=self.http_client,
                max_retries=0,
                timeout=self.timeout,
            )

        self.openai: Optional[OpenAI] = None
        if openai_api_key:
            self.openai = OpenAI(
                api_key=openai_api_key,
                http_client=self.http_client,
                max_retries=0,
                timeout=self.timeout,
            )

        logger.info(
            f"AI provider pool ready (gemini={'configured' if self.gemini else 'missing'}, "
            f"openai={'configured' if self.openai else 'missing'})"
        )

    @classmethod
    def from_settings(cls) -> "ProviderPool":
        return cls(
            gemini_api_key=settings.GOOGLE_GEMINI_API_KEY,
            openai_api_key=settings.OPENAI_API_KEY,
        )

    def close(self) -> None:
        self.http_client.close()
