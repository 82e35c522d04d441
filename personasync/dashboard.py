"""
Dashboard Module

Aggregate statistics for the analytics dashboard and the spoken summary
used by "read my dashboard aloud".
"""

import math
from pathlib import Path
from typing import Optional, Sequence

from personasync.models.config import AppSettings
from personasync.models.survey import (
    CountryCount,
    DashboardStats,
    Insight,
    PersonaRanking,
    SurveyResponse,
    SurveyUser,
    TraitInsight,
)
from personasync.utils.dataset_loader import DashboardDatasets
from personasync.utils.logger import get_logger
from personasync.utils.tts_client import TextToSpeechClient

OTHER_COUNTRY = "Other"


def compute_dashboard_stats(
    responses: Sequence[SurveyResponse], rankings: Sequence[PersonaRanking]
) -> DashboardStats:
    """
    Compute the headline dashboard numbers.

    Args:
        responses: All survey responses
        rankings: Persona rankings, highest first

    Returns:
        DashboardStats with total responses, rounded mean XP (0 when there are
        no responses) and the first-ranked persona
    """
    total = len(responses)
    # half-up rounding, not banker's
    average_xp = math.floor(sum(r.xp_gained for r in responses) / total + 0.5) if total else 0

    return DashboardStats(
        total_responses=total,
        average_xp=average_xp,
        top_persona=rankings[0] if rankings else None,
    )


def normalize_country(country: str, main_countries: Sequence[str]) -> str:
    """Map a raw country name onto the main-country list, or "Other"."""
    if country == "United States" or "USA" in country:
        return "USA"
    if country == "United Kingdom" or "UK" in country:
        return "UK"
    if country not in main_countries:
        return OTHER_COUNTRY
    return country


def country_distribution(
    users: Sequence[SurveyUser], main_countries: Sequence[str]
) -> list[CountryCount]:
    """
    Count users per main country.

    Users outside the main countries are dropped. Result is sorted by count
    descending; equal counts keep first-seen order.
    """
    counts: dict[str, int] = {}
    for user in users:
        country = normalize_country(user.country, main_countries)
        counts[country] = counts.get(country, 0) + 1

    distribution = [
        CountryCount(country=country, count=count)
        for country, count in counts.items()
        if country != OTHER_COUNTRY
    ]
    distribution.sort(key=lambda c: c.count, reverse=True)
    return distribution


def _format_percentage(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_summary(
    stats: DashboardStats,
    rankings: Sequence[PersonaRanking],
    traits: Sequence[TraitInsight],
    insights: Sequence[Insight],
    countries: Sequence[CountryCount],
    top_personas: int = 2,
    top_traits: int = 2,
    top_countries: int = 3,
) -> str:
    """
    Build the spoken dashboard summary.

    The trend sentence uses the first insight and the satisfaction sentence
    the third; either is skipped when the dataset is shorter.
    """
    personas = " and ".join(
        f"{p.persona} at {_format_percentage(p.percentage)}%" for p in rankings[:top_personas]
    )
    trait_names = " and ".join(t.trait for t in traits[:top_traits])
    country_names = ", ".join(c.country for c in countries[:top_countries])

    lines = [
        "Welcome to your PersonaSync Dashboard Summary.",
        f"Our community is thriving with {stats.total_responses} total survey responses.",
    ]
    if personas:
        lines.append(f"The dominant personality types are {personas}.")
    if trait_names:
        lines.append(f"The most common traits observed are {trait_names}.")
    if len(insights) > 0:
        lines.append(f"Recent trends show that {insights[0].description}.")
    if len(insights) > 2:
        lines.append(f"Regarding user satisfaction, {insights[2].description}.")
    if country_names:
        lines.append(
            f"Our global community spans across {country_names}, "
            "with active members contributing daily."
        )
    lines.append(
        f"Users have earned an average of {stats.average_xp} XP points "
        "through meaningful interactions."
    )
    lines.append("Thank you for being part of our growing community!")

    return "\n".join(lines)


class DashboardService:
    """
    Dashboard facade over the loaded datasets.

    Computes stats and country distribution, builds the summary, and sends
    it to the text-to-speech endpoint.
    """

    def __init__(
        self,
        settings: AppSettings,
        datasets: DashboardDatasets,
        tts_client: Optional[TextToSpeechClient] = None,
        correlation_id: Optional[str] = None,
    ):
        self.settings = settings
        self.datasets = datasets
        self.tts_client = tts_client or TextToSpeechClient(
            endpoint=settings.tts.endpoint,
            timeout=settings.tts.timeout,
            max_attempts=settings.tts.max_attempts,
        )
        self.logger = get_logger(correlation_id=correlation_id, component="dashboard")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "DashboardService":
        """Load datasets from ``settings.dashboard.data_dir``."""
        return cls(settings, DashboardDatasets.load(settings.dashboard.data_dir))

    def stats(self) -> DashboardStats:
        return compute_dashboard_stats(
            self.datasets.survey_responses, self.datasets.persona_rankings
        )

    def countries(self) -> list[CountryCount]:
        return country_distribution(
            self.datasets.users, self.settings.dashboard.main_countries
        )

    def summary(self) -> str:
        config = self.settings.dashboard
        return generate_summary(
            self.stats(),
            self.datasets.persona_rankings,
            self.datasets.trait_insights,
            self.datasets.insights,
            self.countries(),
            top_personas=config.summary_personas,
            top_traits=config.summary_traits,
            top_countries=config.summary_countries,
        )

    async def share_insights(self, output_path: str | Path | None = None) -> bytes:
        """
        Synthesize the summary to audio.

        Args:
            output_path: Optional file to write the audio bytes to

        Returns:
            Audio bytes

        Raises:
            TextToSpeechError: If the endpoint rejects the request
        """
        text = self.summary()
        self.logger.info("generating_voice_summary", text_length=len(text))

        audio = await self.tts_client.synthesize(text)

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(audio)
            self.logger.info("voice_summary_saved", path=str(output_path), audio_bytes=len(audio))

        return audio
