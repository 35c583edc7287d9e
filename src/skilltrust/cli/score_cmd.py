"""``skilltrust score <snapshot>`` -- Score subjects under every lens.

Loads a registry snapshot, runs the scoring engine, and prints the naive,
hardened, credibility, stake and TEE scores together with the mitigation
flags that explain the hardened score.

Exit Codes:
    0 -- Scores computed and displayed.
    1 -- ``--subject`` names a subject absent from the snapshot.
    2 -- Snapshot or configuration could not be loaded, or a feedback
         value was rejected in strict mode.
"""

from __future__ import annotations

import json
import sys

import click

from skilltrust.cli.inputs import (
    EXIT_BAD_INPUT,
    EXIT_NOT_FOUND,
    EXIT_OK,
    config_option,
    fail,
    format_option,
    load_inputs,
    now_option,
)
from skilltrust.exceptions import ScoringError, SkillTrustError


@click.command("score")
@click.argument("snapshot_path", type=click.Path())
@click.option("--subject", "subject_id", default=None, help="Score only this subject.")
@config_option
@now_option
@format_option
def score_command(
    snapshot_path: str,
    subject_id: str | None,
    config_path: str | None,
    now: int | None,
    output_format: str,
) -> None:
    """Compute trust scores for the subjects in SNAPSHOT_PATH.

    SNAPSHOT_PATH is a JSON or YAML registry snapshot. Without --subject,
    every subject is scored.

    Exit code 0 on success, 1 if the subject is unknown, 2 if the snapshot
    or configuration cannot be loaded or strict mode rejects a value.
    """
    snapshot, engine = load_inputs(snapshot_path, config_path, output_format)

    try:
        if subject_id is not None:
            reports = [engine.report(snapshot, subject_id, now)]
        else:
            reports = engine.report_all(snapshot, now)
    except ScoringError as exc:
        fail(str(exc), output_format, EXIT_NOT_FOUND)
    except SkillTrustError as exc:
        fail(str(exc), output_format, EXIT_BAD_INPUT)

    if output_format == "json":
        payload = [r.to_dict() for r in reports]
        click.echo(json.dumps(payload[0] if subject_id else payload, indent=2))
    else:
        from skilltrust.cli.output import print_report, print_score_table
        if subject_id is not None:
            print_report(reports[0])
        else:
            print_score_table(reports)

    sys.exit(EXIT_OK)
