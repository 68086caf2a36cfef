"""
Pydantic models for registration data validation and serialization.

AI Assistant Notes:
- RegistrationFields is the partial, immutable field set built up across turns
- RegistrationRecord is the complete record persisted once the dialogue ends
- Python attributes are snake_case; the wire format uses camelCase aliases
- A field counts as "set" when it is neither None nor an empty string
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum
import re

DATE_OF_BIRTH_PATTERN = re.compile(
    r'^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$', re.ASCII)


class Gender(str, Enum):
    """Gender enumeration."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class RegistrationStep(str, Enum):
    """Registration fields in prompting order."""
    NAME = "name"
    DATE_OF_BIRTH = "date_of_birth"
    GENDER = "gender"
    USES_BUDGET_APP = "uses_budget_app"
    BUDGET_APP_NAME = "budget_app_name"


def is_set(value: Any) -> bool:
    """Check whether a field value counts as provided."""
    return value is not None and value != ""


class RegistrationFields(BaseModel):
    """Partial registration data collected so far."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    name: Optional[str] = Field(None, description="User name")
    date_of_birth: Optional[str] = Field(None, description="Date of birth, YYYY-MM-DD")
    gender: Optional[Gender] = Field(None, description="Gender")
    uses_budget_app: Optional[bool] = Field(None, description="Whether the user uses a budget app")
    budget_app_name: Optional[str] = Field(None, description="Budget app name")

    def get(self, step: RegistrationStep) -> Any:
        """Get the value collected for a step."""
        return getattr(self, RegistrationStep(step).value)

    def is_set(self, step: RegistrationStep) -> bool:
        """Check whether a step already has a value."""
        return is_set(self.get(step))

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the camelCase wire names."""
        return self.model_dump(by_alias=True)


class RegistrationRecord(BaseModel):
    """Completed registration with full validation."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    name: str = Field(..., min_length=1, description="User name")
    date_of_birth: str = Field(..., description="Date of birth, YYYY-MM-DD")
    gender: Gender = Field(..., description="Gender")
    uses_budget_app: bool = Field(..., description="Whether the user uses a budget app")
    budget_app_name: Optional[str] = Field(None, description="Budget app name")

    @field_validator('date_of_birth')
    @classmethod
    def validate_date_of_birth(cls, v: str) -> str:
        """Validate date of birth format (month and day ranges only)."""
        if not DATE_OF_BIRTH_PATTERN.match(v):
            raise ValueError('Date of birth must be in format YYYY-MM-DD')
        return v

    @model_validator(mode='after')
    def validate_budget_app(self) -> "RegistrationRecord":
        """Require an app name only for budget app users."""
        if self.uses_budget_app and not is_set(self.budget_app_name):
            raise ValueError('Budget app name is required when a budget app is used')
        if not self.uses_budget_app and self.budget_app_name is not None:
            raise ValueError('Budget app name must be empty when no budget app is used')
        return self

    @classmethod
    def from_fields(cls, fields: RegistrationFields) -> "RegistrationRecord":
        """Freeze a complete field set into a record."""
        return cls(
            name=fields.name,
            date_of_birth=fields.date_of_birth,
            gender=fields.gender,
            uses_budget_app=fields.uses_budget_app,
            budget_app_name=fields.budget_app_name if fields.uses_budget_app else None,
        )

    def to_fields(self) -> RegistrationFields:
        """Convert back to a field set."""
        return RegistrationFields(**self.model_dump())

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the camelCase wire names."""
        return self.model_dump(by_alias=True)

    def to_row(self, user_id: str) -> Dict[str, Any]:
        """Build the row persisted in the registrations table."""
        return {
            'user_id': user_id,
            'name': self.name,
            'date_of_birth': self.date_of_birth,
            'gender': self.gender,
            'uses_budget_app': self.uses_budget_app,
            'budget_app_name': self.budget_app_name if self.uses_budget_app else None,
            'completed': True,
        }


class StoredRegistration(BaseModel):
    """Registration row as read back from the database."""

    id: Optional[int] = Field(None, description="Database ID")
    user_id: str = Field(..., description="Caller-supplied user identifier")
    name: str = Field(..., description="User name")
    date_of_birth: str = Field(..., description="Date of birth")
    gender: Gender = Field(..., description="Gender")
    uses_budget_app: bool = Field(..., description="Whether the user uses a budget app")
    budget_app_name: Optional[str] = Field(None, description="Budget app name")
    completed: bool = Field(True, description="Registration completed flag")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    model_config = ConfigDict(use_enum_values=True)
