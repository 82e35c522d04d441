#!/usr/bin/env python3
"""
Dashboard Script
Prints dashboard statistics, the country distribution and registered users' XP.
With --speak, sends the dashboard summary to the text-to-speech endpoint and
saves the returned audio.

Usage:
    python scripts/show_dashboard.py [--config config/settings.json] [--speak summary.mp3]
"""

import argparse
import asyncio
import sys

import httpx
from rich.console import Console
from rich.table import Table

from personasync.dashboard import DashboardService
from personasync.models.config import AppSettings
from personasync.session import UserSession
from personasync.utils.logger import configure_logging
from personasync.utils.tts_client import TextToSpeechError

console = Console()


def render_stats(service: DashboardService) -> Table:
    stats = service.stats()
    table = Table(title="PersonaSync Dashboard")
    table.add_column("Metric", style="bold blue")
    table.add_column("Value")
    table.add_row("Total responses", str(stats.total_responses))
    table.add_row(
        "Top persona",
        f"{stats.top_persona.persona} ({stats.top_persona.percentage}%)"
        if stats.top_persona
        else "-",
    )
    table.add_row("Average XP", str(stats.average_xp))
    table.add_row("Top region", stats.top_region)
    return table


def render_countries(service: DashboardService) -> Table:
    table = Table(title="Regional Distribution")
    table.add_column("Country", style="bold blue")
    table.add_column("Users", justify="right")
    for entry in service.countries():
        table.add_row(entry.country, str(entry.count))
    return table


def render_users(session: UserSession) -> Table:
    table = Table(title="Registered Users")
    table.add_column("Username", style="bold blue")
    table.add_column("XP", justify="right")
    table.add_column("Completed surveys", justify="right")
    current = session.get_current_username()
    for username in session.list_usernames():
        profile = session.get_user_by_username(username)
        if profile is None:
            continue
        label = f"{username} *" if username == current else username
        table.add_row(label, str(profile.xp), str(len(profile.completed_surveys)))
    return table


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show the PersonaSync dashboard")
    parser.add_argument("--config", default=None, help="Path to settings JSON")
    parser.add_argument("--speak", metavar="OUTPUT", help="Save the spoken summary to OUTPUT")
    args = parser.parse_args(argv)

    settings = AppSettings.from_env(args.config)
    configure_logging(log_file=None, log_level=settings.log_level)

    service = DashboardService.from_settings(settings)
    session = UserSession.from_settings(settings)

    console.print(render_stats(service))
    console.print(render_countries(service))
    console.print(render_users(session))

    if args.speak:
        console.print("[yellow]Generating voice summary...[/yellow]")
        try:
            asyncio.run(service.share_insights(args.speak))
        except (TextToSpeechError, httpx.TransportError) as e:
            console.print(f"[red][ERROR] {e}[/red]")
            return 1
        console.print(f"[green]Saved voice summary to {args.speak}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
