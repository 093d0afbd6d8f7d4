"""Console report of classified branches."""

from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_env_branches import PROG_NAME
from git_env_branches.config import Settings
from git_env_branches.models import BranchState, FeatureBranchSummary

CURRENT_MARKER = "* "
MERGED_MARKER = "X"

STATE_STYLES = {
    BranchState.ENVIRONMENT: "grey50",
    BranchState.FULLY_MERGED: "green",
    BranchState.NEVER_MERGED: "yellow",
    BranchState.LOCAL_ORPHAN: "bright_magenta",
}
DEFAULT_STYLE = "bold bright_white"


def row_style(summary: FeatureBranchSummary) -> str:
    return STATE_STYLES.get(summary.state, DEFAULT_STYLE)


def colorize(value: str, summary: FeatureBranchSummary) -> str:
    """Wrap ``value`` in the row color of ``summary`` as rich markup."""
    style = row_style(summary)
    return f"[{style}]{escape(value)}[/{style}]"


def table_row(summary: FeatureBranchSummary) -> list[str]:
    name = f"{CURRENT_MARKER if summary.is_current else ''}{escape(summary.branch)}"
    merged = [MERGED_MARKER if is_merged else "" for is_merged in summary.target.values()]
    return [
        name,
        str(len(summary.files_touched)),
        summary.commit.date,
        escape(summary.commit.author),
        *merged,
    ]


def build_table(summaries: list[FeatureBranchSummary], environment_branches: list[str]) -> Table:
    """Create the merged / unmerged overview table."""
    table = Table(
        title="Merged / unmerged branches",
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Feature branch", no_wrap=True)
    table.add_column("# files", justify="right", no_wrap=True)
    table.add_column("Last commit", no_wrap=True)
    table.add_column("By", no_wrap=True)
    for name in environment_branches:
        table.add_column(name, justify="center", no_wrap=True)

    for summary in summaries:
        table.add_row(*table_row(summary), style=row_style(summary))
    return table


@dataclass
class BranchGroups:
    """Follow-up categories. Environment branches belong to none of them."""

    mergeable: list[FeatureBranchSummary] = field(default_factory=list)
    fully_merged: list[FeatureBranchSummary] = field(default_factory=list)
    local_orphans: list[FeatureBranchSummary] = field(default_factory=list)
    never_merged: list[FeatureBranchSummary] = field(default_factory=list)

    @property
    def has_pending(self) -> bool:
        return bool(self.mergeable or self.never_merged)

    def eligible_for_deletion(self, cleanup_all: bool = False) -> list[FeatureBranchSummary]:
        if cleanup_all:
            return [*self.mergeable, *self.fully_merged, *self.never_merged, *self.local_orphans]
        return [*self.fully_merged, *self.local_orphans]


def group_branches(summaries: list[FeatureBranchSummary]) -> BranchGroups:
    groups = BranchGroups()
    by_state = {
        BranchState.MERGEABLE: groups.mergeable,
        BranchState.FULLY_MERGED: groups.fully_merged,
        BranchState.LOCAL_ORPHAN: groups.local_orphans,
        BranchState.NEVER_MERGED: groups.never_merged,
    }
    for summary in summaries:
        if summary.state in by_state:
            by_state[summary.state].append(summary)
    return groups


def cleanup_command(environment_branches: list[str]) -> str:
    return f"{PROG_NAME} -b {' '.join(environment_branches)} --cleanup"


def _current_branch(branches: list[FeatureBranchSummary]) -> Optional[FeatureBranchSummary]:
    return next((branch for branch in branches if branch.is_current), None)


def render_follow_up(
    console: Console,
    groups: BranchGroups,
    settings: Settings,
    requested_branches: list[str],
) -> None:
    """Print counts per category and what to do next."""
    if groups.mergeable:
        console.print(f"[bold bright_white]{len(groups.mergeable)}[/bold bright_white] branches have not been merged to all specified branches")
    if groups.fully_merged:
        console.print(f"[bold green]{len(groups.fully_merged)}[/bold green] branches appear to be fully merged and may be removed")
    if groups.local_orphans:
        console.print(f"[bold bright_magenta]{len(groups.local_orphans)}[/bold bright_magenta] branches appear to be local orphans and may be removed")
    if groups.never_merged:
        console.print(
            f"[bold yellow]{len(groups.never_merged)}[/bold yellow] branches appear to either a) not have been merged, "
            "or b) be still in early stages of development"
        )

    eligible = groups.eligible_for_deletion(settings.cleanup_all)
    if not eligible:
        if not groups.has_pending:
            console.print("No housekeeping necessary it seems -- keep up the good work! :thumbs_up:")
        return

    # Mergeable branches are never flagged, even in ALL mode
    current = _current_branch([*groups.fully_merged, *groups.local_orphans, *groups.never_merged])
    current_note = ""
    if current:
        current_note = (
            f"Since branch {colorize(current.branch, current)} is currently checked out, "
            "switch to another branch first if you want to remove it."
        )

    if settings.cleanup_enabled:
        if current_note:
            console.print(f"\nNB: {current_note}")
        return

    console.print(
        f"\nNB: You may run [bold cyan]{escape(cleanup_command(requested_branches))}[/bold cyan] "
        "to interactively remove fully merged branches and/or orphan local branches"
    )
    if current_note:
        console.print(f"    {current_note}")


def render_report(
    console: Console,
    summaries: list[FeatureBranchSummary],
    environment_branches: list[str],
    settings: Settings,
    requested_branches: Optional[list[str]] = None,
) -> BranchGroups:
    """Print the table and follow-up guidance. Returns the follow-up groups."""
    console.print()
    console.print(build_table(summaries, environment_branches))

    groups = group_branches(summaries)
    render_follow_up(console, groups, settings, requested_branches or environment_branches)
    return groups
