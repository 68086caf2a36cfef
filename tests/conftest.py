import asyncio
import os

os.environ.setdefault("LANGFUSE_TRACING_ENABLED", "false")
os.environ.pop("LANGFUSE_SECRET_KEY", None)
os.environ.pop("LANGFUSE_PUBLIC_KEY", None)

import pytest

from regbot.agents.base import BaseTextGenerator
from regbot.conversation import PromptComposer, SessionStore
from regbot.exceptions import RecordStoreError, TextGenerationError
from regbot.orchestrator import RegistrationOrchestrator


class FakeTextGenerator(BaseTextGenerator):
    """Text generator returning a canned reply or failing on demand."""

    def __init__(self, reply: str = "Welcome aboard!", fail: bool = False):
        super().__init__(name="fake", model_name="fake-model")
        self.reply = reply
        self.fail = fail
        self.prompts = []
        self._initialized = True

    async def initialize(self) -> None:
        self._initialized = True

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise TextGenerationError("Empty response from OpenAI.")
        return self.reply


class FakeRecordStore:
    """Record store keeping inserted rows in memory."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.inserted = []

    async def insert(self, table, record):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RecordStoreError("Failed to save registration", {'table': table})
        self.inserted.append((table, dict(record)))
        return len(self.inserted)


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def orchestrator(session_store, record_store, text_generator):
    return RegistrationOrchestrator(
        session_store=session_store,
        record_store=record_store,
        text_generator=text_generator,
        prompt_composer=PromptComposer(text_generator=text_generator),
        registrations_table="registrations",
    )
