"""
Slot-filling dialogue components for the registration chatbot.

This package extracts registration fields from free text, decides which field
to ask for next, composes the questions, and keeps per-user dialogue state.

AI Assistant Notes:
- Extractor and sequencer are pure with respect to sessions
- SessionStore is owned by the orchestrator and handed in explicitly
"""

from .extractor import RegistrationFieldExtractor, merge_fields
from .sequencer import FIELD_ORDER, applicable_steps, next_field
from .prompts import (
    PromptComposer,
    build_fallback_welcome,
    build_welcome_prompt,
    prompt_for,
)
from .sessions import DialogueSession, DialogueState, SessionStore

__all__ = [
    "RegistrationFieldExtractor",
    "merge_fields",
    "FIELD_ORDER",
    "applicable_steps",
    "next_field",
    "PromptComposer",
    "build_fallback_welcome",
    "build_welcome_prompt",
    "prompt_for",
    "DialogueSession",
    "DialogueState",
    "SessionStore",
]
