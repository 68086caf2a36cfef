"""
Step sequencing for the registration dialogue.
"""

from typing import List, Optional

from ..database.models import RegistrationFields, RegistrationStep

FIELD_ORDER: List[RegistrationStep] = [
    RegistrationStep.NAME,
    RegistrationStep.DATE_OF_BIRTH,
    RegistrationStep.GENDER,
    RegistrationStep.USES_BUDGET_APP,
    RegistrationStep.BUDGET_APP_NAME,
]


def applicable_steps(fields: RegistrationFields) -> List[RegistrationStep]:
    """Steps that must be answered given the answers so far."""
    return [
        step for step in FIELD_ORDER
        if not (step == RegistrationStep.BUDGET_APP_NAME and fields.uses_budget_app is False)
    ]


def next_field(fields: RegistrationFields) -> Optional[RegistrationStep]:
    """
    Find the next field to prompt for.

    Args:
        fields: Fields collected so far

    Returns:
        First unset applicable field, or None when the registration is complete
    """
    for step in applicable_steps(fields):
        if not fields.is_set(step):
            return step
    return None
