"""
Langfuse integration for dialogue tracing and observability.

AI Assistant Notes:
- Without credentials the wrapper runs in dummy mode: traces and spans are
  no-op context managers so callers never branch on observability
- With credentials each dialogue turn becomes a Langfuse span tree
- The @observe decorator is re-exported for nested observations
"""

import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from langfuse import Langfuse, observe

from regbot.config import settings

logger = logging.getLogger(__name__)


class DummyObservation:
    """No-op observation used when tracing is disabled."""

    def update(self, **kwargs):
        pass

    def end(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass


class DummyTrace(DummyObservation):
    """No-op trace used when tracing is disabled."""

    def span(self, **kwargs):
        return DummyObservation()

    def event(self, **kwargs):
        return DummyObservation()


class LangfuseTraceContext:
    """
    Root span for one dialogue turn.
    Child spans opened through span() nest under it while it is active.
    """

    def __init__(self, name: str, input: Optional[str], user_id: Optional[str], metadata: Dict[str, Any], client: Langfuse):
        self.name = name
        self.input = input
        self.user_id = user_id
        self.metadata = metadata
        self.client = client
        self._context = None
        self._root = None

    def __enter__(self):
        self._context = self.client.start_as_current_span(
            name=self.name, input=self.input, metadata=self.metadata)
        self._root = self._context.__enter__()
        self._root.update_trace(name=self.name, user_id=self.user_id, metadata=self.metadata)
        return self

    def __exit__(self, *args):
        if self._context is not None:
            self._context.__exit__(*args)
            self._context = None

    def span(self, name: str, input: Optional[Any] = None, metadata: Optional[Dict[str, Any]] = None):
        """Open a child span under the current observation."""
        return self.client.start_as_current_span(name=name, input=input, metadata=metadata)

    def event(self, name: str, input: Optional[Any] = None, metadata: Optional[Dict[str, Any]] = None):
        """Record a point-in-time event under the current observation."""
        return self.client.create_event(name=name, input=input, metadata=metadata)

    def update(self, **kwargs):
        """Update the root span with new data."""
        if self._root is not None:
            self._root.update(**kwargs)


class LangfuseClient:
    """
    Wrapper for Langfuse client with dialogue-specific helpers.
    """

    def __init__(self):
        """Initialize Langfuse client with configuration."""
        self.client = None
        self.enabled = self._initialize_client()

    def _initialize_client(self) -> bool:
        """Initialize the Langfuse client when credentials are configured."""
        secret_key = settings.langfuse_secret_key
        public_key = settings.langfuse_public_key
        host = settings.langfuse_base_url

        if not all([secret_key, public_key, host]):
            logger.info("Langfuse credentials not found. Observability disabled.")
            return False

        self.client = Langfuse(
            secret_key=secret_key,
            public_key=public_key,
            host=host
        )
        logger.info("Langfuse client initialized successfully")
        return True

    def create_trace(
        self,
        name: str,
        input: Optional[str] = None,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Create a trace for one dialogue turn.
        Must be entered as a context manager before opening spans.
        """
        if not self.enabled or not self.client:
            return DummyTrace()

        return LangfuseTraceContext(
            name=name,
            input=input,
            user_id=user_id,
            metadata=metadata or {},
            client=self.client
        )

    def log_dialogue_turn(
        self,
        trace,
        user_id: str,
        step: Optional[str],
        done: bool,
        filled_fields: Dict[str, bool],
        execution_time: float
    ):
        """Log the outcome of a dialogue turn."""
        return trace.event(
            name="dialogue_turn",
            input={"user_id": user_id},
            metadata={
                "next_step": step,
                "done": done,
                "filled_fields": filled_fields,
                "execution_time_seconds": execution_time,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    def log_error(
        self,
        trace,
        error_message: str,
        error_type: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Log an error against the current trace."""
        return trace.event(
            name="error",
            input=error_message,
            metadata={
                "error_type": error_type,
                "severity": "high" if error_type == "record_store_error" else "medium",
                "context": context or {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    def flush(self) -> None:
        """Flush pending events to Langfuse."""
        if self.enabled and self.client:
            try:
                self.client.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse events: {e}")


# Global Langfuse client instance
langfuse_client = LangfuseClient()
