"""Shared option handling for SkillTrust subcommands.

Loads the snapshot and the optional configuration file, turning loader
errors into the CLI's exit code 2 with a text or JSON error message.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from skilltrust.config import ScoringConfig, load_config
from skilltrust.core.engine import TrustScoringEngine
from skilltrust.exceptions import ConfigError, SnapshotError
from skilltrust.snapshot import ScoringSnapshot, load_snapshot

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_BAD_INPUT = 2

format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)

config_option = click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML scoring configuration.",
)

now_option = click.option(
    "--now", "now",
    type=int,
    default=None,
    help="Reference time in ms since the epoch (default: snapshot 'now' or the clock).",
)


def fail(message: str, output_format: str, code: int) -> NoReturn:
    """Print an error in the requested format and exit."""
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(code)


def load_inputs(
    snapshot_path: str,
    config_path: str | None,
    output_format: str,
) -> tuple[ScoringSnapshot, TrustScoringEngine]:
    """Load the snapshot and build an engine, exiting 2 on failure."""
    try:
        config = load_config(Path(config_path)) if config_path else ScoringConfig()
        engine = TrustScoringEngine(config)
        snapshot = load_snapshot(Path(snapshot_path))
    except (ConfigError, SnapshotError) as exc:
        fail(str(exc), output_format, EXIT_BAD_INPUT)
    return snapshot, engine
