"""
Survey Dataset Models

Rows of the datasets behind the analytics dashboard.
Field names match the JSONL files (camelCase where the source data uses it).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SurveyResponse(_CamelModel):
    """One completed survey."""

    id: str
    user_id: str
    survey_id: str
    completed_at: str  # ISO-8601
    xp_gained: int = Field(..., ge=0)


class PersonaRanking(BaseModel):
    """Share of respondents assigned to a persona, ranked by the dataset."""

    persona: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0)


class TraitInsight(BaseModel):
    trait: str
    count: int = Field(..., ge=0)
    description: str
    color: str = "#9333ea"


class Insight(BaseModel):
    title: str
    description: str


class SurveyUser(BaseModel):
    """Registered respondent as shown on the regional chart."""

    id: str
    name: str
    region: str  # "City, Country" or just "Country"
    persona: Optional[str] = None

    @property
    def country(self) -> str:
        parts = self.region.split(", ")
        if len(parts) > 1 and parts[1]:
            return parts[1]
        return self.region


class CountryCount(BaseModel):
    country: str
    count: int


class DashboardStats(BaseModel):
    """Headline numbers of the dashboard."""

    total_responses: int
    average_xp: int
    top_persona: Optional[PersonaRanking] = None
    top_region: str = "Europe"
