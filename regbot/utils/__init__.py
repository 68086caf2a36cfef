"""
Utility modules for the registration chatbot.
"""

from .langfuse_client import langfuse_client, LangfuseClient, observe

__all__ = ["langfuse_client", "LangfuseClient", "observe"]
