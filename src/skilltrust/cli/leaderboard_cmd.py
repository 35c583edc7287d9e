"""``skilltrust leaderboard <snapshot>`` -- Rank subjects by hardened score.

Exit Codes:
    0 -- Leaderboard displayed.
    2 -- Snapshot or configuration could not be loaded, or a feedback
         value was rejected in strict mode.
"""

from __future__ import annotations

import json
import sys

import click

from skilltrust.cli.inputs import (
    EXIT_BAD_INPUT,
    EXIT_OK,
    config_option,
    fail,
    format_option,
    load_inputs,
    now_option,
)
from skilltrust.exceptions import SkillTrustError


@click.command("leaderboard")
@click.argument("snapshot_path", type=click.Path())
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show the top N only.")
@config_option
@now_option
@format_option
def leaderboard_command(
    snapshot_path: str,
    limit: int | None,
    config_path: str | None,
    now: int | None,
    output_format: str,
) -> None:
    """Rank the subjects in SNAPSHOT_PATH by hardened trust score.

    Ties are broken by subject id.
    """
    snapshot, engine = load_inputs(snapshot_path, config_path, output_format)
    try:
        reports = engine.leaderboard(snapshot, limit=limit, now=now)
    except SkillTrustError as exc:
        fail(str(exc), output_format, EXIT_BAD_INPUT)

    if output_format == "json":
        click.echo(json.dumps([
            {
                "rank": rank,
                "subject_id": r.subject_id,
                "hardened": r.hardened.summary.summary_value,
                "tier": r.hardened.summary.tier.name,
                "naive": r.naive.summary_value,
                "feedback_count": r.hardened.summary.feedback_count,
                "is_sybil": r.is_sybil,
            }
            for rank, r in enumerate(reports, start=1)
        ], indent=2))
    else:
        from skilltrust.cli.output import print_leaderboard
        print_leaderboard(reports)

    sys.exit(EXIT_OK)
