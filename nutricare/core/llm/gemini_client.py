"""
Gemini API Client

Thin async wrapper around LangChain's ChatGoogleGenerativeAI.

One call is one round trip: no retries, no response cache and no canned
fallback text. Any provider failure surfaces as GenerationError.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from nutricare.config import settings
from nutricare.utils import GenerationError, get_logger

logger = get_logger(__name__)


@dataclass
class GeminiConfig:
    """Configuration for the Gemini client, defaulting to application settings."""
    api_key: Optional[str] = field(default_factory=lambda: settings.gemini_api_key)
    model: str = field(default_factory=lambda: settings.gemini_model)
    temperature: float = field(default_factory=lambda: settings.gemini_temperature)
    max_output_tokens: int = field(default_factory=lambda: settings.gemini_max_output_tokens)
    request_timeout_seconds: int = field(default_factory=lambda: settings.gemini_timeout_seconds)


@dataclass
class GeminiResponse:
    """Structured response from Gemini."""
    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0


def _content_text(content: Any) -> str:
    """Flatten a LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class GeminiClient:
    """
    Client for the Google Gemini API.

    Construction never fails for a missing key; the first generate call
    raises GenerationError(reason=not_configured) instead.
    """

    def __init__(self, config: Optional[GeminiConfig] = None):
        self.config = config or GeminiConfig()
        self._llm: Optional[ChatGoogleGenerativeAI] = None

        if not self.config.api_key:
            logger.warning("No Gemini API key configured - generation calls will fail")
            return

        self._llm = ChatGoogleGenerativeAI(
            model=self.config.model,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            timeout=self.config.request_timeout_seconds,
            max_retries=0,
            google_api_key=self.config.api_key,
        )
        logger.info(f"Gemini client initialized with model: {self.config.model}")

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    async def generate_async(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        mode: str = "unknown",
    ) -> GeminiResponse:
        """
        Send one prompt and return the generated text.

        Args:
            prompt: The user prompt
            system_instruction: Optional system message
            mode: Generation mode, carried into errors for the caller

        Raises:
            GenerationError: not configured, provider failure or empty answer
        """
        if self._llm is None:
            raise GenerationError(
                "Gemini API key not configured",
                mode=mode,
                reason=GenerationError.NOT_CONFIGURED,
            )

        messages = []
        if system_instruction:
            messages.append(SystemMessage(content=system_instruction))
        messages.append(HumanMessage(content=prompt))

        start_time = datetime.now()
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"Gemini generation failed for mode {mode}: {e}")
            raise GenerationError(
                f"Gemini API error: {e}",
                mode=mode,
                reason=GenerationError.PROVIDER_ERROR,
            ) from e

        latency = (datetime.now() - start_time).total_seconds() * 1000
        text = _content_text(getattr(response, "content", response))
        if not text.strip():
            logger.error(f"Gemini returned an empty response for mode {mode}")
            raise GenerationError(
                "Empty response from Gemini API",
                mode=mode,
                reason=GenerationError.MALFORMED_RESPONSE,
            )

        usage = getattr(response, "usage_metadata", None) or {}
        return GeminiResponse(
            text=text,
            model=self.config.model,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=latency,
        )
