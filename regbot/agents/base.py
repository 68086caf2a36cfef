"""
Base interface for text generators used to phrase chatbot replies.
"""

from abc import ABC, abstractmethod


class BaseTextGenerator(ABC):
    """Abstract base class for language-model text generators."""

    def __init__(self, name: str, model_name: str):
        """
        Initialize the generator with configuration.

        Args:
            name: Name of the generator
            model_name: Name of the LLM model to use
        """
        self.name = name
        self.model_name = model_name
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the generator and its client.
        This should be called before generating any text.
        """
        pass

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate text for a single user prompt.

        Args:
            prompt: The prompt to send

        Returns:
            Generated text, stripped

        Raises:
            TextGenerationError: If the provider fails or returns nothing
        """
        pass

    def is_initialized(self) -> bool:
        """
        Check if the generator is initialized.

        Returns:
            True if initialized, False otherwise
        """
        return self._initialized
