"""SkillTrust CLI -- Inspect trust scores from a registry snapshot.

Entry point for the ``skilltrust`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    score       -- Score one subject (or every subject) under every lens.
    leaderboard -- Rank subjects by hardened score.
    sybil       -- List sybil clusters and flagged addresses.

Usage::

    skilltrust score snapshot.yaml
    skilltrust score snapshot.yaml --subject skill-a --format json
    skilltrust score snapshot.json --config scoring.yaml --now 1700000000000
    skilltrust leaderboard snapshot.yaml --limit 10
    skilltrust sybil snapshot.yaml
"""

from __future__ import annotations

import logging

import click

from skilltrust import __version__
from skilltrust.cli.leaderboard_cmd import leaderboard_command
from skilltrust.cli.score_cmd import score_command
from skilltrust.cli.sybil_cmd import sybil_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """SkillTrust: Manipulation-resistant trust scores for agent skills.

    Score skills from a point-in-time registry snapshot. Compare the naive
    mean with the hardened score, see which mitigations fired, and find
    mutual-praise rings.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(score_command)
cli.add_command(leaderboard_command)
cli.add_command(sybil_command)
