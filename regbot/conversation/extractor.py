"""
Registration field extraction from free-text user messages.

AI Assistant Notes:
- Pattern matching only; a miss leaves the field unset and is never an error
- Only unset fields are attempted, so re-running on a complete field set
  proposes nothing
- When no pattern matches, the whole message is taken as the answer for the
  field currently being prompted (name, budget app name)
- Gender precedence is an ordered (predicate, value) list: "male" is tested
  first, so any text containing "female" also resolves to male
- merge_fields is the only way updates reach a field set
"""

import re
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from ..database.models import (
    DATE_OF_BIRTH_PATTERN,
    Gender,
    RegistrationFields,
    RegistrationStep,
    is_set,
)

if TYPE_CHECKING:
    from .sessions import DialogueSession

logger = logging.getLogger(__name__)

FieldUpdates = Dict[str, Any]


def merge_fields(current: RegistrationFields, updates: FieldUpdates) -> RegistrationFields:
    """
    Merge proposed updates into a field set, returning a new field set.

    Fields that are already set are never overwritten. The one exception is
    budget_app_name, which is forced to None whenever uses_budget_app is
    being set to False.

    Args:
        current: Field set before this turn
        updates: Proposed values keyed by field name

    Returns:
        New field set
    """
    applied = {
        field: value
        for field, value in updates.items()
        if not is_set(getattr(current, field))
    }

    if applied.get(RegistrationStep.USES_BUDGET_APP.value) is False:
        applied[RegistrationStep.BUDGET_APP_NAME.value] = None

    if not applied:
        return current
    return current.model_copy(update=applied)


class RegistrationFieldExtractor:
    """
    Extracts registration fields from unstructured text.
    Proposes values for unset fields only.
    """

    def __init__(self):
        """Initialize the extractor with patterns and rules."""
        self.extraction_patterns = self._initialize_extraction_patterns()
        self.gender_rules = self._initialize_gender_rules()

    def _initialize_extraction_patterns(self) -> Dict[str, re.Pattern]:
        """Initialize regex patterns for field extraction."""
        flags = re.IGNORECASE | re.ASCII
        return {
            'name': re.compile(r"\b(?:name is|i am|i'm)\s+([A-Za-z][\w\s'-]{1,60})", flags),
            'date_of_birth': re.compile(r'\b\d{4}-\d{2}-\d{2}\b', re.ASCII),
            'affirmative': re.compile(r'\b(yes|yep|yeah|sure|true)\b', flags),
            'negative': re.compile(r'\b(no|nope|nah|false)\b', flags),
            'budget_app_name': re.compile(
                r"\b(?:app|application|called|using)\s+([A-Za-z][\w\s'-]{1,60})", flags),
        }

    def _initialize_gender_rules(self) -> List[Tuple[Callable[[str], bool], Gender]]:
        """Ordered gender rules, first match wins."""
        return [
            (lambda text: "male" in text, Gender.MALE),
            (lambda text: "female" in text, Gender.FEMALE),
            (lambda text: "other" in text, Gender.OTHER),
        ]

    def extract(self, session: "DialogueSession", message: str) -> FieldUpdates:
        """
        Propose field updates from a user message.

        Args:
            session: Session whose fields and current step drive extraction
            message: Raw user message

        Returns:
            Proposed values keyed by field name
        """
        return self.extract_updates(session.fields, session.current_step, message)

    def extract_updates(
        self,
        fields: RegistrationFields,
        current_step: RegistrationStep,
        message: str
    ) -> FieldUpdates:
        """
        Propose field updates from a user message.

        Args:
            fields: Fields collected so far
            current_step: Field most recently prompted for
            message: Raw user message

        Returns:
            Proposed values keyed by field name
        """
        current_step = RegistrationStep(current_step)
        updates: FieldUpdates = {}

        if not fields.is_set(RegistrationStep.NAME):
            name = self._extract_name(message, current_step)
            if name is not None:
                updates[RegistrationStep.NAME.value] = name

        if not fields.is_set(RegistrationStep.DATE_OF_BIRTH):
            date_of_birth = self._extract_date_of_birth(message)
            if date_of_birth is not None:
                updates[RegistrationStep.DATE_OF_BIRTH.value] = date_of_birth

        if not fields.is_set(RegistrationStep.GENDER):
            gender = self._extract_gender(message)
            if gender is not None:
                updates[RegistrationStep.GENDER.value] = gender.value

        if fields.uses_budget_app is None:
            uses_budget_app = self._extract_uses_budget_app(message)
            if uses_budget_app is not None:
                updates[RegistrationStep.USES_BUDGET_APP.value] = uses_budget_app
                if uses_budget_app is False:
                    updates[RegistrationStep.BUDGET_APP_NAME.value] = None

        uses_budget_app = fields.uses_budget_app or updates.get(RegistrationStep.USES_BUDGET_APP.value)
        if uses_budget_app and not fields.is_set(RegistrationStep.BUDGET_APP_NAME):
            app_name = self._extract_budget_app_name(message, current_step)
            if app_name is not None:
                updates[RegistrationStep.BUDGET_APP_NAME.value] = app_name

        if updates:
            logger.debug(f"Extracted fields: {sorted(updates)}")
        return updates

    def _extract_name(self, message: str, current_step: RegistrationStep) -> Optional[str]:
        """Extract a name from an introduction, or take the whole answer."""
        match = self.extraction_patterns['name'].search(message)
        if match:
            return match.group(1).strip()
        if current_step == RegistrationStep.NAME:
            return message.strip()
        return None

    def _extract_date_of_birth(self, message: str) -> Optional[str]:
        """Extract a YYYY-MM-DD date with month and day in range."""
        match = self.extraction_patterns['date_of_birth'].search(message)
        if match and DATE_OF_BIRTH_PATTERN.match(match.group(0)):
            return match.group(0)
        return None

    def _extract_gender(self, message: str) -> Optional[Gender]:
        """Apply the ordered gender rules to the lowercased message."""
        lower = message.lower()
        for predicate, gender in self.gender_rules:
            if predicate(lower):
                return gender
        return None

    def _extract_uses_budget_app(self, message: str) -> Optional[bool]:
        """Detect a yes/no answer."""
        lower = message.lower()
        if self.extraction_patterns['affirmative'].search(lower):
            return True
        if self.extraction_patterns['negative'].search(lower):
            return False
        return None

    def _extract_budget_app_name(self, message: str, current_step: RegistrationStep) -> Optional[str]:
        """Extract an app name from a mention, or take the whole answer."""
        match = self.extraction_patterns['budget_app_name'].search(message)
        if match:
            return match.group(1).strip()
        if current_step == RegistrationStep.BUDGET_APP_NAME:
            return message.strip()
        return None
