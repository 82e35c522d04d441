"""
Dataset Loader Module

Loads the dashboard datasets from JSONL files into validated Pydantic models.

Example Usage:
    from personasync.utils.dataset_loader import DashboardDatasets, load_dataset
    from personasync.models.survey import SurveyResponse

    responses = load_dataset("data/survey_responses.jsonl", SurveyResponse)
    datasets = DashboardDatasets.load("data")
"""

import json
from pathlib import Path
from typing import TypeVar

import jsonlines
import structlog
from pydantic import BaseModel, Field, ValidationError

from personasync.models.survey import (
    Insight,
    PersonaRanking,
    SurveyResponse,
    SurveyUser,
    TraitInsight,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def load_dataset(path: str | Path, model: type[M]) -> list[M]:
    """
    Load every row of a JSONL file as ``model``.

    Args:
        path: JSONL file path
        model: Pydantic model each row is validated into

    Returns:
        Rows in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        IOError: If the file is not valid JSONL
        pydantic.ValidationError: If a row doesn't match ``model``
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    rows: list[M] = []
    try:
        with jsonlines.open(path) as reader:
            for line_no, record in enumerate(reader, start=1):
                try:
                    rows.append(model.model_validate(record))
                except ValidationError:
                    logger.error(
                        "dataset_row_invalid", path=str(path), line=line_no, model=model.__name__
                    )
                    raise
    except (jsonlines.InvalidLineError, json.JSONDecodeError) as e:
        raise IOError(f"Corrupted dataset file {path}: {e}") from e

    logger.debug("dataset_loaded", path=str(path), rows=len(rows), model=model.__name__)
    return rows


class DashboardDatasets(BaseModel):
    """All datasets the dashboard reads."""

    survey_responses: list[SurveyResponse] = Field(default_factory=list)
    persona_rankings: list[PersonaRanking] = Field(default_factory=list)
    trait_insights: list[TraitInsight] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    users: list[SurveyUser] = Field(default_factory=list)

    @classmethod
    def load(cls, data_dir: str | Path) -> "DashboardDatasets":
        """Load the five dataset files from ``data_dir``."""
        data_dir = Path(data_dir)
        return cls(
            survey_responses=load_dataset(data_dir / "survey_responses.jsonl", SurveyResponse),
            persona_rankings=load_dataset(data_dir / "persona_rankings.jsonl", PersonaRanking),
            trait_insights=load_dataset(data_dir / "trait_insights.jsonl", TraitInsight),
            insights=load_dataset(data_dir / "insights.jsonl", Insight),
            users=load_dataset(data_dir / "users.jsonl", SurveyUser),
        )
