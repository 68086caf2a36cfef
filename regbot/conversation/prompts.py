"""
Prompt composition for the registration dialogue.

AI Assistant Notes:
- prompt_for is the fixed question per field and never fails
- PromptComposer can ask the text generator to rephrase questions
  (settings.llm_phrase_prompts); any generation failure falls back to the
  fixed question
- Closing messages: build_welcome_prompt feeds the generator,
  build_fallback_welcome is the deterministic template used when it fails
"""

import logging
from typing import Optional

from ..agents.base import BaseTextGenerator
from ..database.models import RegistrationFields, RegistrationStep

logger = logging.getLogger(__name__)

NOT_PROVIDED = "not provided"

STEP_QUESTIONS = {
    RegistrationStep.NAME: "What is your name?",
    RegistrationStep.DATE_OF_BIRTH: "What is your date of birth? (YYYY-MM-DD)",
    RegistrationStep.GENDER: 'What is your gender? Please reply "male", "female", or "other".',
    RegistrationStep.USES_BUDGET_APP: "Do you use a budget app? (yes/no)",
}


def prompt_for(step: RegistrationStep, fields: RegistrationFields) -> str:
    """
    Get the fixed question for a field.

    Args:
        step: Field to ask for
        fields: Fields collected so far

    Returns:
        Question text
    """
    step = RegistrationStep(step)
    if step == RegistrationStep.BUDGET_APP_NAME:
        # Only reachable for budget app users; the generic wording is a fallback.
        if fields.uses_budget_app:
            return "What is the name of the budget app you use?"
        return "What is the name of your budget app?"
    return STEP_QUESTIONS[step]


def _describe(value) -> str:
    """Render a field value for an LLM prompt."""
    if value is None:
        return NOT_PROVIDED
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_rephrase_prompt(step: RegistrationStep, fields: RegistrationFields) -> str:
    """Build the prompt asking the model to phrase the next question."""
    return f"""Rephrase the following registration question in a friendly, concise way.
Keep its meaning and any format hint (such as YYYY-MM-DD or yes/no). Reply with the question only.
Question: {prompt_for(step, fields)}
Known details:
- Name: {_describe(fields.name)}"""


def build_welcome_prompt(fields: RegistrationFields) -> str:
    """Build the prompt asking the model for a closing message."""
    name = fields.name or "friend"
    return f"""Create a warm, concise welcome message for a user who completed registration.
Include their name and any provided details. Keep it under 40 words and avoid bullet points.
Details:
- Name: {name}
- Date of birth: {_describe(fields.date_of_birth)}
- Gender: {_describe(fields.gender)}
- Uses budget app: {_describe(fields.uses_budget_app)}
- Budget app name: {_describe(fields.budget_app_name)}"""


def build_fallback_welcome(fields: RegistrationFields) -> str:
    """
    Build the deterministic closing message.
    Unknown fields are left out.
    """
    name = fields.name or "friend"
    dob = f", born {fields.date_of_birth}" if fields.date_of_birth else ""
    gender = f", gender: {fields.gender}" if fields.gender else ""

    if fields.uses_budget_app is None:
        budget_app = ""
    elif fields.uses_budget_app:
        budget_app = f", budget app: {fields.budget_app_name or 'unspecified'}"
    else:
        budget_app = ", no budget app"

    return f"Registration complete for {name}{dob}{gender}{budget_app}. Welcome!"


class PromptComposer:
    """
    Produces the text shown to the user for each step and at completion.
    """

    def __init__(
        self,
        text_generator: Optional[BaseTextGenerator] = None,
        phrase_with_llm: bool = False
    ):
        """
        Initialize the composer.

        Args:
            text_generator: Generator used for closing messages and, optionally, questions
            phrase_with_llm: Ask the generator to rephrase each question
        """
        self.text_generator = text_generator
        self.phrase_with_llm = phrase_with_llm

    async def compose(self, step: RegistrationStep, fields: RegistrationFields) -> str:
        """
        Get the question for the next field.

        Args:
            step: Field to ask for
            fields: Fields collected so far

        Returns:
            Question text
        """
        question = prompt_for(step, fields)
        if not (self.phrase_with_llm and self.text_generator):
            return question

        try:
            return await self.text_generator.generate(build_rephrase_prompt(step, fields))
        except Exception as e:
            logger.warning(f"Falling back to fixed question for {RegistrationStep(step).value}: {e}")
            return question

    async def welcome_message(self, fields: RegistrationFields) -> str:
        """
        Get the closing message for a completed registration.

        Args:
            fields: Final field set

        Returns:
            Generated message, or the fallback template if generation fails
        """
        fallback = build_fallback_welcome(fields)
        if not self.text_generator:
            return fallback

        try:
            return await self.text_generator.generate(build_welcome_prompt(fields))
        except Exception as e:
            logger.error(f"Failed to generate welcome message: {e}")
            return fallback
