# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""CLI application for consent-telemetry using cyclopts."""

from __future__ import annotations

import sys

from typing import Annotated

import cyclopts

from rich.console import Console
from rich.table import Table

from consent_telemetry import __version__
from consent_telemetry.common import CONSENT_TELEMETRY_PREFIX
from consent_telemetry.common.logging import setup_logger
from consent_telemetry.config.settings import get_settings
from consent_telemetry.consent import ConsentStore
from consent_telemetry.exceptions import ConsentTelemetryError
from consent_telemetry.platform import create_adapter
from consent_telemetry.trackers import TrackerRegistry, traffic_source_from_url


console = Console(markup=True, emoji=True)

app = cyclopts.App(
    name="consent-telemetry",
    help="Inspect and change telemetry consent for the media client.",
    version=__version__,
    console=console,
)


def _print_error(e: ConsentTelemetryError) -> None:
    console.print(f"{CONSENT_TELEMETRY_PREFIX} [red]Error: {e.message}[/red]")
    if e.suggestions:
        console.print("[yellow]Suggestions:[/yellow]")
        for suggestion in e.suggestions:
            console.print(f"  • {suggestion}")


@app.command
def status(
    *,
    initial_url: Annotated[str | None, cyclopts.Parameter(name=["--url", "-u"])] = None,
) -> None:
    """Show consent flags and the analytics channels for this platform."""
    settings = get_settings()
    setup_logger(level=settings.log_level)
    try:
        adapter = create_adapter(settings)
        flags = ConsentStore(adapter).get()
    except ConsentTelemetryError as e:
        _print_error(e)
        sys.exit(1)
    registry = TrackerRegistry.build(
        settings.platform,
        traffic_source_from_url(initial_url, settings.traffic_source_param),
        settings=settings,
    )

    summary = Table(show_header=False, title="Telemetry Status")
    summary.add_column("Setting", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Platform", settings.platform.value)
    summary.add_row("Production build", str(settings.is_production))
    summary.add_row("Internal analytics", _on_off(flags.internal_enabled))
    summary.add_row("Third-party analytics", _on_off(flags.third_party_enabled))
    summary.add_row("Consent pinned", str(adapter.consent_pinned))
    console.print(summary)

    channels = Table(show_header=True, header_style="bold blue", title="Analytics Channels")
    channels.add_column("#", justify="right")
    channels.add_column("Tracker", style="cyan")
    channels.add_column("Name", style="green")
    for index, tracker in enumerate(registry):
        channels.add_row(str(index), tracker.id, tracker.label or "[dim]default[/dim]")
    console.print(channels)


@app.command
def consent(
    *,
    internal: bool | None = None,
    third_party: bool | None = None,
) -> None:
    """Grant or revoke consent. Only the desktop variant stores a choice."""
    settings = get_settings()
    setup_logger(level=settings.log_level)
    adapter = create_adapter(settings)
    if adapter.consent_pinned:
        console.print(
            f"{CONSENT_TELEMETRY_PREFIX} [yellow]Consent is always granted on the {settings.platform.value} variant.[/yellow]"
        )
        return
    store = ConsentStore(adapter)
    try:
        if internal is not None:
            store.set_internal(internal)
        if third_party is not None:
            store.set_third_party(third_party)
    except ConsentTelemetryError as e:
        _print_error(e)
        sys.exit(1)
    flags = store.get()
    console.print(
        f"{CONSENT_TELEMETRY_PREFIX} internal analytics {_on_off(flags.internal_enabled)}, "
        f"third-party analytics {_on_off(flags.third_party_enabled)}"
    )


def _on_off(enabled: bool) -> str:
    return "[green]on[/green]" if enabled else "[red]off[/red]"


def main() -> None:
    """Main CLI entry point."""
    try:
        app()
    except Exception as e:
        console.print(f"{CONSENT_TELEMETRY_PREFIX} [bold red]Fatal error: {e}[/bold red]")
        console.print_exception(max_frames=10)
        sys.exit(1)


__all__ = ("app", "main")
