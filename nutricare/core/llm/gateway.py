"""
Generation Gateway

The single seam between the aggregation core and the text-generation
provider: structured payload in, generated text out. The core depends only
on the GenerationGateway protocol; GeminiGenerationGateway is the provider
implementation and owns prompt rendering.
"""
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from nutricare.core.llm import prompts
from nutricare.core.llm.gemini_client import GeminiClient
from nutricare.utils import get_logger

logger = get_logger(__name__)


class GenerationMode(str, Enum):
    """Kinds of text the gateway can generate."""
    PATIENT_SUMMARY = "PATIENT_SUMMARY"
    PROGRAM_SUMMARY = "PROGRAM_SUMMARY"
    NUTRITION_DIAGNOSIS = "NUTRITION_DIAGNOSIS"
    EDUCATION_MATERIAL = "EDUCATION_MATERIAL"


class GenerationGateway(Protocol):
    async def generate(self, structured_input: Any, mode: GenerationMode) -> str:
        """Generate text for one payload; raises GenerationError on failure."""
        ...


# mode -> (system instruction, payload renderer)
PROMPT_TABLE: Dict[GenerationMode, Tuple[str, Callable[[Any], str]]] = {
    GenerationMode.PATIENT_SUMMARY: (
        prompts.PATIENT_SUMMARY_SYSTEM, prompts.render_patient_summary
    ),
    GenerationMode.PROGRAM_SUMMARY: (
        prompts.PROGRAM_SUMMARY_SYSTEM, prompts.render_program_summary
    ),
    GenerationMode.NUTRITION_DIAGNOSIS: (
        prompts.DIAGNOSIS_SYSTEM, prompts.render_diagnosis
    ),
    GenerationMode.EDUCATION_MATERIAL: (
        prompts.EDUCATION_SYSTEM, prompts.render_education
    ),
}


def render(structured_input: Any, mode: GenerationMode) -> Tuple[str, str]:
    """(system instruction, prompt) for a payload in the given mode."""
    system_instruction, renderer = PROMPT_TABLE[mode]
    return system_instruction, renderer(structured_input)


class GeminiGenerationGateway:
    """GenerationGateway backed by Gemini through LangChain."""

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

    async def generate(self, structured_input: Any, mode: GenerationMode) -> str:
        system_instruction, prompt = render(structured_input, mode)
        logger.debug(f"Rendered {mode.value} prompt ({len(prompt)} chars)")

        response = await self.client.generate_async(
            prompt,
            system_instruction=system_instruction,
            mode=mode.value,
        )
        logger.info(
            f"Generated {mode.value} text with {response.model} "
            f"({response.completion_tokens} tokens, {response.latency_ms:.0f} ms)"
        )
        return response.text
