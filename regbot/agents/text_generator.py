"""
OpenAI-backed text generator.

AI Assistant Notes:
- Single-message chat completion; low temperature, short replies
- Any provider error or empty reply is raised as TextGenerationError so the
  caller can fall back (closing message) or answer 503 (echo)
- Calls are traced with Langfuse's @observe as generations
"""
from ..config import settings
from ..exceptions import ConfigurationError, TextGenerationError
from .base import BaseTextGenerator
from regbot.utils import observe
from openai import AsyncOpenAI, OpenAIError
from typing import Optional
import logging
import time

logger = logging.getLogger(__name__)


class OpenAITextGenerator(BaseTextGenerator):
    """
    Text generator using the OpenAI chat completions API.
    """

    def __init__(
        self,
        name: str = "OpenAI Text Generator",
        model_name: str = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ):
        """
        Initialize the generator.

        Args:
            name: Name of the generator
            model_name: Chat model name
            max_tokens: Completion token limit
            temperature: Sampling temperature
        """
        super().__init__(
            name=name,
            model_name=model_name or settings.model_name
        )
        self.max_tokens = max_tokens if max_tokens is not None else settings.llm_max_tokens
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self._llm_client = None

    async def initialize(self) -> None:
        """
        Create the OpenAI client.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not settings.openai_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is required to call the OpenAI API.")

        self._llm_client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url
        )
        self._initialized = True
        logger.info(f"{self.name} initialized with model {self.model_name}")

    @observe(name="openai_text_generation", as_type="generation")
    async def generate(self, prompt: str) -> str:
        """
        Send a prompt as a single user message and return the reply.

        Args:
            prompt: The prompt to send

        Returns:
            Generated text, stripped
        """
        if not self._initialized:
            raise RuntimeError(
                f"{self.name} not initialized. Call initialize() first.")

        start_time = time.time()

        try:
            response = await self._llm_client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise TextGenerationError("OpenAI request failed", {'model': self.model_name}) from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        message = (content or "").strip()

        if not message:
            raise TextGenerationError("Empty response from OpenAI.", {'model': self.model_name})

        logger.debug(f"Generated {len(message)} chars in {time.time() - start_time:.2f}s")
        return message
