"""Interactive deletion of branches."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from git_env_branches.git import GitRepo
from git_env_branches.logging_config import get_logger
from git_env_branches.models import FeatureBranchSummary
from git_env_branches.report import colorize

logger = get_logger(__name__)

CAUTION = (
    "CAUTION: Although it may appear these branches are all safe to delete, it could well be that they are "
    "still being used and just not have been merged yet! Always contact the developer(s) first before "
    "actually deleting branches!"
)


def parse_selection(answer: str, count: int) -> list[int]:
    """Turn an answer like ``1,3 5-7`` or ``all`` into sorted zero-based indexes.

    Numbers outside ``1..count`` and unparseable parts are skipped with a warning.
    """
    answer = answer.strip().lower()
    if not answer:
        return []
    if answer == "all":
        return list(range(count))

    selected: set[int] = set()
    for part in answer.replace(",", " ").split():
        start, sep, end = part.partition("-")
        try:
            first = int(start)
            last = int(end) if sep else first
        except ValueError:
            logger.warning(f"Ignoring invalid selection '{part}'")
            continue
        if first > last:
            logger.warning(f"Ignoring reversed range '{part}'")
            continue
        if first < 1 or last > count:
            logger.warning(f"Ignoring numbers outside 1 to {count} in '{part}'")
        selected.update(range(max(first, 1) - 1, min(last, count)))
    return sorted(selected)


class CleanupOrchestrator:
    """Confirm, select, confirm again, delete. Never steps back."""

    def __init__(self, repo: GitRepo, console: Console) -> None:
        self.repo = repo
        self.console = console

    def confirm_intent(self, cleanup_all: bool) -> bool:
        self.console.print()
        self.console.print(Panel(f"[italic]{CAUTION}[/italic]", width=86))
        category = "all" if cleanup_all else "fully merged branches and/or local orphan"
        return Confirm.ask(
            f"Do you want to delete (a selection of) {category} branches?",
            console=self.console,
            default=False,
        )

    def select(self, candidates: list[FeatureBranchSummary]) -> list[str]:
        table = Table(show_header=True, header_style="bold", show_edge=True)
        table.add_column("#", justify="right")
        table.add_column("Branch", no_wrap=True)
        for number, branch in enumerate(candidates, start=1):
            table.add_row(str(number), colorize(branch.branch, branch))

        self.console.print()
        self.console.print(table)
        answer = Prompt.ask(
            "Select branches to remove (numbers like [cyan]1,3 5-7[/cyan], [cyan]all[/cyan], or empty for none)",
            console=self.console,
            default="",
            show_default=False,
        )
        return [candidates[index].branch for index in parse_selection(answer, len(candidates))]

    def confirm_delete(self, selected: list[str]) -> bool:
        return Confirm.ask(
            f"Are you sure you want to delete these {len(selected)} selected branches?",
            console=self.console,
            default=False,
        )

    def show_result(self, deleted: list[str]) -> None:
        if not deleted:
            self.console.print("\n[yellow]No branches were deleted[/yellow]")
            return

        result_table = Table(
            title=f"Successfully deleted {len(deleted)} branch(es)",
            show_header=True,
            header_style="bold",
            title_style="bold green",
            show_edge=True,
        )
        result_table.add_column("Branch", style="cyan", no_wrap=True)
        for branch in deleted:
            result_table.add_row(escape(branch))

        self.console.print()
        self.console.print(result_table)

    def run(self, candidates: list[FeatureBranchSummary], cleanup_all: bool = False) -> list[str]:
        """Run the prompts and delete what was confirmed. Returns the deleted names."""
        # The checked-out branch cannot be deleted
        candidates = [branch for branch in candidates if not branch.is_current]
        if not candidates:
            return []

        if not self.confirm_intent(cleanup_all):
            return []

        selected = self.select(candidates)
        if not selected:
            self.console.print("\n[yellow]Nothing selected[/yellow]")
            return []

        if not self.confirm_delete(selected):
            self.console.print("\n[yellow]Operation cancelled[/yellow]")
            return []

        deleted = self.repo.delete_branches(selected)
        self.show_result(deleted)
        return deleted
