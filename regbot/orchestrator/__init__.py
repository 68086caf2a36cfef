"""
Dialogue orchestration for the registration chatbot.
"""

from .orchestrator import DialogueResponse, RegistrationOrchestrator

__all__ = ["DialogueResponse", "RegistrationOrchestrator"]
