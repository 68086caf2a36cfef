"""
Exception hierarchy for the registration chatbot.

AI Assistant Notes:
- Extraction misses are never exceptions; only collaborator failures are
- TextGenerationError is recovered locally (fallback text) or mapped to 503
- RecordStoreError is fatal to the request and mapped to 500
"""

from typing import Any, Dict, Optional


class RegistrationBotError(Exception):
    """Base application exception with message and optional data."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.message = message
        self.data = data or {}
        super().__init__(self.message)


class ConfigurationError(RegistrationBotError):
    """Raised when a required setting is missing or invalid."""
    pass


class TextGenerationError(RegistrationBotError):
    """Raised when the language model fails or returns an empty response."""
    pass


class RecordStoreError(RegistrationBotError):
    """Raised when a completed registration cannot be persisted."""
    pass
