"""``skilltrust sybil <snapshot>`` -- Show mutual-praise rings.

Lists every sybil cluster (connected addresses that rated each other) and
the per-address membership map.

Exit Codes:
    0 -- Clusters displayed (including when there are none).
    2 -- Snapshot could not be loaded.
"""

from __future__ import annotations

import json
import sys

import click

from skilltrust.cli.inputs import EXIT_OK, config_option, format_option, load_inputs


@click.command("sybil")
@click.argument("snapshot_path", type=click.Path())
@config_option
@format_option
def sybil_command(
    snapshot_path: str,
    config_path: str | None,
    output_format: str,
) -> None:
    """List sybil clusters found in SNAPSHOT_PATH."""
    snapshot, engine = load_inputs(snapshot_path, config_path, output_format)
    clusters = engine.sybil_clusters(snapshot)
    membership = engine.sybil_membership(snapshot)

    if output_format == "json":
        click.echo(json.dumps({
            "clusters": [sorted(c) for c in clusters],
            "membership": membership,
        }, indent=2))
    else:
        from skilltrust.cli.output import print_sybil_clusters
        print_sybil_clusters(clusters, membership)

    sys.exit(EXIT_OK)
