"""
User Profile Data Models

Stored records use the camelCase field names of the web client
(``firstName``, ``completedSurveys``, ...). Python code uses snake_case.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ProfileVisibility = Literal["public", "private"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NewUserProfile(_CamelModel):
    """Caller-supplied fields for profile creation.

    Derived fields (xp, createdAt, completedSurveys) are not accepted here;
    if present in the input they are ignored.
    """

    first_name: str
    last_name: str
    username: str = Field(..., min_length=1)
    email: str
    age: int
    gender: str
    location: Optional[str] = None
    bio: Optional[str] = None
    personality_goals: Optional[List[str]] = None
    profile_visibility: ProfileVisibility = "public"


class UserProfile(NewUserProfile):
    """Durable profile record, one per username.

    Keys the model does not declare are kept as extras and written back
    unchanged, so records written by other clients survive a rewrite.
    ``created_at`` is None only for records stored without ``createdAt``;
    it is never filled in after the fact.
    """

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    username: str = Field(..., min_length=1, frozen=True)
    xp: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = Field(default=None, frozen=True)
    completed_surveys: List[str] = Field(default_factory=list)

    @field_validator("completed_surveys")
    @classmethod
    def dedupe_surveys(cls, v: List[str]) -> List[str]:
        """Drop repeated survey ids, keeping first occurrence."""
        return list(dict.fromkeys(v))

    def to_record(self) -> str:
        """Serialise to the stored JSON form.

        camelCase keys; declared optional fields that are None are omitted,
        extra keys are written as loaded.
        """
        unset = {
            name
            for name in ("location", "bio", "personality_goals", "created_at")
            if getattr(self, name) is None
        }
        return self.model_dump_json(by_alias=True, exclude=unset)


class CompletionResult(_CamelModel):
    """Outcome of a survey completion transaction."""

    success: bool
    already_completed: bool = False
    xp_earned: int = 0
