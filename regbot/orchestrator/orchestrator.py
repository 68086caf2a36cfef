"""
Registration dialogue orchestrator.

AI Assistant Notes:
- One call to submit_message is one dialogue turn for one user
- Turns for the same user are serialized with the session store's per-user lock
- State machine: COLLECTING -> COMPLETE; a completed session replays its
  stored welcome message and is never restarted
- Persistence failure propagates (RecordStoreError) after the session is
  already marked complete; closing-message failure falls back to a template
- echo_prompt bypasses the dialogue entirely
"""

from regbot.utils import observe
from ..agents.base import BaseTextGenerator
from ..conversation import (
    PromptComposer,
    RegistrationFieldExtractor,
    SessionStore,
    merge_fields,
    next_field,
)
from ..conversation.sessions import DialogueSession, DialogueState
from ..database.models import RegistrationRecord, RegistrationStep
from ..exceptions import RecordStoreError, TextGenerationError
from ..utils import langfuse_client
from ..config import settings
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
import time
import logging

logger = logging.getLogger(__name__)


@dataclass
class DialogueResponse:
    """Dataclass for dialogue turn responses."""
    reply: str
    done: bool
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the HTTP layer, omitting data until completion."""
        result = {'reply': self.reply, 'done': self.done}
        if self.data is not None:
            result['data'] = self.data
        return result


class RegistrationOrchestrator:
    """
    Drives the slot-filling registration dialogue.
    Ties extraction, sequencing, prompting, persistence and closing messages together.
    """

    def __init__(
        self,
        session_store: SessionStore,
        record_store,
        text_generator: Optional[BaseTextGenerator] = None,
        extractor: Optional[RegistrationFieldExtractor] = None,
        prompt_composer: Optional[PromptComposer] = None,
        registrations_table: Optional[str] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            session_store: Store owning all dialogue sessions
            record_store: Store with an async insert(table, record)
            text_generator: Generator for closing messages and echo
            extractor: Field extractor
            prompt_composer: Question and closing-message composer
            registrations_table: Table receiving completed registrations
        """
        self.session_store = session_store
        self.record_store = record_store
        self.text_generator = text_generator
        self.extractor = extractor or RegistrationFieldExtractor()
        self.prompt_composer = prompt_composer or PromptComposer(
            text_generator=text_generator,
            phrase_with_llm=settings.llm_phrase_prompts
        )
        self.registrations_table = registrations_table or settings.registrations_table

    async def submit_message(self, user_id: str, message: Optional[Any] = None) -> DialogueResponse:
        """
        Process one user message.

        Args:
            user_id: Caller-supplied user identifier
            message: Raw message; None is treated as empty

        Returns:
            DialogueResponse with the reply, completion flag and final data

        Raises:
            RecordStoreError: If the completed registration cannot be saved
        """
        trace = langfuse_client.create_trace(
            name="registration_dialogue_turn",
            input=None if message is None else str(message)[:200],
            user_id=user_id,
            metadata={'service_name': 'registration_chatbot'}
        )

        start_time = time.time()

        with trace:
            async with self.session_store.lock_for(user_id):
                session = self.session_store.get_or_create(user_id)
                try:
                    response = await self._run_turn(session, message, trace)
                except RecordStoreError as e:
                    langfuse_client.log_error(
                        trace=trace,
                        error_message=e.message,
                        error_type="record_store_error",
                        context={'user_id': user_id}
                    )
                    raise
                finally:
                    self.session_store.upsert(session)

            langfuse_client.log_dialogue_turn(
                trace=trace,
                user_id=user_id,
                step=None if response.done else session.current_step.value,
                done=response.done,
                filled_fields={
                    step.value: session.fields.is_set(step) for step in RegistrationStep
                },
                execution_time=time.time() - start_time
            )
            trace.update(output=response.reply)

        return response

    async def _run_turn(self, session: DialogueSession, message: Optional[Any], trace) -> DialogueResponse:
        """Apply one message to a session."""
        if session.completed:
            return await self._replay_completion(session)

        text = "" if message is None else str(message)

        if not text.strip():
            session.current_step = RegistrationStep.NAME
            reply = await self.prompt_composer.compose(RegistrationStep.NAME, session.fields)
            return DialogueResponse(reply=reply, done=False)

        with trace.span(name="field_extraction", input=text) as extraction_span:
            updates = self.extractor.extract(session, text)
            session.fields = merge_fields(session.fields, updates)
            extraction_span.update(output=updates)

        step = next_field(session.fields)

        if step is not None:
            session.current_step = step
            reply = await self.prompt_composer.compose(step, session.fields)
            return DialogueResponse(reply=reply, done=False)

        return await self._complete(session, trace)

    async def _complete(self, session: DialogueSession, trace) -> DialogueResponse:
        """Freeze the record, persist it and build the closing message."""
        record = RegistrationRecord.from_fields(session.fields)
        session.fields = record.to_fields()
        session.state = DialogueState.COMPLETE

        with trace.span(name="registration_persistence", metadata={'table': self.registrations_table}):
            await self.record_store.insert(self.registrations_table, record.to_row(session.user_id))

        logger.info(f"Registration completed for user {session.user_id}")

        with trace.span(name="welcome_message_generation") as generation_span:
            session.welcome_message = await self.prompt_composer.welcome_message(session.fields)
            generation_span.update(output=session.welcome_message)

        return DialogueResponse(reply=session.welcome_message, done=True, data=record.to_wire())

    async def _replay_completion(self, session: DialogueSession) -> DialogueResponse:
        """Answer a message sent after the registration was completed."""
        if session.welcome_message is None:
            # Persistence failed on the completing turn, so no message was stored.
            session.welcome_message = await self.prompt_composer.welcome_message(session.fields)

        record = RegistrationRecord.from_fields(session.fields)
        return DialogueResponse(reply=session.welcome_message, done=True, data=record.to_wire())

    @observe(name="llm_echo", as_type="span")
    async def echo_prompt(self, prompt: str) -> str:
        """
        Send a prompt straight to the text generator.

        Args:
            prompt: Prompt text

        Returns:
            Generated reply

        Raises:
            TextGenerationError: If no generator is configured or generation fails
        """
        if not self.text_generator:
            raise TextGenerationError("No text generator configured")
        return await self.text_generator.generate(prompt)

    def cleanup_expired_sessions(self, idle_minutes: int) -> int:
        """Evict sessions idle for longer than the given number of minutes."""
        return self.session_store.evict(datetime.now() - timedelta(minutes=idle_minutes))

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check on all components."""
        components = {
            'session_store': True,
            'text_generator': bool(self.text_generator and self.text_generator.is_initialized()),
            'record_store': True,
        }
        if hasattr(self.record_store, 'health_check'):
            components['record_store'] = self.record_store.health_check() is not None

        return {
            'status': 'healthy' if all(components.values()) else 'degraded',
            'active_sessions': len(self.session_store),
            'components': components,
        }
