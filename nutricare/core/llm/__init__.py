"""
LLM Generation Module

Gemini-backed text generation for summaries, diagnosis suggestions and
education material.

ARCHITECTURE CONSTRAINTS:
- The core hands structured payloads to a GenerationGateway, never raw prompts
- One provider round trip per use-case call, no retries, no cached answers
- Provider failures raise GenerationError; there is no fallback text
"""
from .gemini_client import GeminiClient, GeminiConfig, GeminiResponse
from .gateway import GenerationGateway, GenerationMode, GeminiGenerationGateway, render

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiResponse",
    "GenerationGateway",
    "GenerationMode",
    "GeminiGenerationGateway",
    "render",
]
