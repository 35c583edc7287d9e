"""Rich output formatting helpers for the SkillTrust CLI.

Tier Color Mapping (by access decision):
    A-range = bold green, B-range = yellow, C-range = bold red
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from skilltrust.core.engine import SubjectReport
from skilltrust.core.scoring.models import ScoreSummary
from skilltrust.core.tiers import AccessDecision, tier_description

_ACCESS_STYLES: dict[AccessDecision, str] = {
    AccessDecision.FULL_ACCESS: "bold green",
    AccessDecision.THROTTLED: "yellow",
    AccessDecision.DENIED: "bold red",
}

console = Console()


def access_style(decision: AccessDecision) -> str:
    """Return the Rich style string for an access decision."""
    return _ACCESS_STYLES.get(decision, "white")


def _tier_text(summary: ScoreSummary) -> Text:
    return Text(summary.tier.name, style=access_style(summary.access_decision))


def print_score_table(reports: Sequence[SubjectReport]) -> None:
    """Print one row per subject with every lens side by side.

    Kept within 80 columns; entry counts are in the leaderboard and the
    per-subject report.

    Args:
        reports: Subject reports, in display order.
    """
    if not reports:
        console.print("[dim]No subjects in snapshot.[/dim]")
        return

    table = Table(title="SkillTrust Scores", show_header=True, header_style="bold")
    table.add_column("Subject", style="bold", no_wrap=True)
    table.add_column("Naive", justify="right")
    table.add_column("Hardened", justify="right")
    table.add_column("Tier")
    table.add_column("Cred", justify="right")
    table.add_column("Stake", justify="right")
    table.add_column("TEE", justify="right")
    table.add_column("Sybil")

    for report in reports:
        hardened = report.hardened.summary
        table.add_row(
            report.subject_id,
            f"{report.naive.summary_value:.2f}",
            f"{hardened.summary_value:.2f}",
            _tier_text(hardened),
            f"{report.credibility.summary.summary_value:.2f}",
            f"{report.stake.summary_value:.2f}",
            f"{report.tee.summary_value:.2f}",
            Text("yes", style="bold red") if report.is_sybil else Text("no", style="dim"),
        )
    console.print(table)


def print_report(report: SubjectReport) -> None:
    """Print a detailed breakdown for one subject."""
    hardened = report.hardened.summary
    header = Text.assemble(
        ("Subject: ", "bold"), (report.subject_id, ""),
        ("  Tier: ", "bold"), _tier_text(hardened),
        ("  Access: ", "bold"), (hardened.access_decision.value, "dim"),
    )
    console.print(Panel(header, title="Trust Report"))
    console.print(f"  {tier_description(hardened.tier)}")
    if report.is_sybil:
        console.print("  [bold red]Subject address is in a sybil cluster[/bold red]")
    if report.shift.shifted:
        console.print(
            f"  [yellow]Recent feedback shifted by {report.shift.magnitude:.1f} points[/yellow]"
        )

    lenses = Table(title="Lenses", show_header=True)
    lenses.add_column("Lens", style="bold")
    lenses.add_column("Score", justify="right")
    lenses.add_column("Tier")
    for name, summary in (
        ("Naive", report.naive),
        ("Hardened", hardened),
        ("Credibility", report.credibility.summary),
        (f"Stake (x{report.stake_multiplier:.3f})", report.stake),
        (f"TEE (w={report.tee_weight:.2f})", report.tee),
    ):
        lenses.add_row(name, f"{summary.summary_value:.2f}", _tier_text(summary))
    console.print(lenses)

    flags = Table(title="Mitigation Flags", show_header=True)
    flags.add_column("Mitigation", style="bold")
    flags.add_column("Entries", justify="right")
    for name, count in report.hardened.flags.as_dict().items():
        flags.add_row(name, str(count), style=None if count else "dim")
    console.print(flags)

    breakdown = report.credibility.breakdown
    usage = Table(title="Usage Breakdown", show_header=True)
    usage.add_column("Credibility Tier", style="bold")
    usage.add_column("Entries", justify="right")
    usage.add_column("Avg Weight", justify="right")
    usage.add_column("Avg Value", justify="right")
    for tier, stats in breakdown.tiers.items():
        usage.add_row(
            tier.value, str(stats.count),
            f"{stats.avg_multiplier:.2f}", f"{stats.avg_value:.1f}",
        )
    console.print(usage)
    console.print(f"  Weight differential: [bold]{breakdown.weight_differential:.1f}x[/bold]")


def print_leaderboard(reports: Sequence[SubjectReport]) -> None:
    """Print subjects ranked by hardened score."""
    if not reports:
        console.print("[dim]No subjects in snapshot.[/dim]")
        return

    table = Table(title="SkillTrust Leaderboard", show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Subject", style="bold")
    table.add_column("Hardened", justify="right")
    table.add_column("Tier")
    table.add_column("Naive", justify="right")
    table.add_column("Entries", justify="right")
    for rank, report in enumerate(reports, start=1):
        hardened = report.hardened.summary
        table.add_row(
            str(rank),
            report.subject_id,
            f"{hardened.summary_value:.2f}",
            _tier_text(hardened),
            f"{report.naive.summary_value:.2f}",
            str(hardened.feedback_count),
        )
    console.print(table)


def print_sybil_clusters(
    clusters: Sequence[frozenset[str]],
    membership: Mapping[str, bool],
) -> None:
    """Print detected sybil clusters."""
    if not clusters:
        console.print(
            Panel("[bold green]No sybil clusters detected[/bold green]", title="Sybil Analysis")
        )
        return

    flagged = sum(1 for is_sybil in membership.values() if is_sybil)
    console.print(Panel(
        f"[bold red]{len(clusters)} cluster(s), {flagged} of "
        f"{len(membership)} addresses flagged[/bold red]",
        title="Sybil Analysis",
    ))
    table = Table(show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Addresses")
    for index, cluster in enumerate(clusters, start=1):
        table.add_row(str(index), str(len(cluster)), ", ".join(sorted(cluster)))
    console.print(table)
