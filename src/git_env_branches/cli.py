"""Command line interface for git-env-branches."""

from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from typer.core import TyperCommand

from git_env_branches import PROG_NAME, __version__
from git_env_branches.classifier import BranchClassifier
from git_env_branches.cleanup import CleanupOrchestrator
from git_env_branches.config import CLEANUP_ALL, CLEANUP_SAFE, Settings
from git_env_branches.git import GitError, GitRepo
from git_env_branches.logging_config import get_logger, setup_logging
from git_env_branches.models import RepoContext
from git_env_branches.pool import get_worker_count
from git_env_branches.report import render_report

app = typer.Typer(
    help="Displays merged and unmerged feature branches for the specified environment branches",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{PROG_NAME} {__version__}")
        raise typer.Exit()


def split_branch_names(values: list[str]) -> list[str]:
    """Flatten ``-b`` values, which may hold several comma or space separated names."""
    names: list[str] = []
    for value in values:
        for name in value.replace(",", " ").split():
            if name not in names:
                names.append(name)
    return names


def get_repo(context: RepoContext) -> Optional[GitRepo]:
    """Get git repository instance, or None when the path is not a repository."""
    try:
        repo = GitRepo(context)
    except GitError as err:
        logger.debug(str(err))
        return None
    return repo if repo.is_valid_repository() else None


CLEANUP_FLAGS = ("--cleanup", "-c")


def fill_cleanup_mode(args: list[str]) -> list[str]:
    """Give a bare ``--cleanup`` or ``-c`` the SAFE mode so the next word stays a branch name."""
    filled: list[str] = []
    for index, arg in enumerate(args):
        if arg == "--":
            return filled + args[index:]
        filled.append(arg)
        if arg in CLEANUP_FLAGS:
            following = args[index + 1] if index + 1 < len(args) else ""
            if following.upper() not in (CLEANUP_SAFE, CLEANUP_ALL):
                filled.append(CLEANUP_SAFE)
    return filled


class CleanupModeCommand(TyperCommand):
    """Command whose ``--cleanup`` option takes an optional mode."""

    def parse_args(self, ctx, args):
        return super().parse_args(ctx, fill_cleanup_mode(args))


@app.command(cls=CleanupModeCommand)
def main(
    branches: Annotated[
        List[str],
        typer.Option(
            "--branches",
            "-b",
            help="Environment branches to check against, for example '-b DEV ACC master'",
        ),
    ],
    extra_branches: Annotated[
        Optional[List[str]],
        typer.Argument(help="More environment branches following -b", show_default=False),
    ] = None,
    cleanup: Annotated[
        Optional[str],
        typer.Option(
            "--cleanup",
            "-c",
            metavar="MODE",
            show_default=False,
            help=(
                "Interactively delete fully merged and local orphan branches. "
                "Follow with ALL to choose from every branch (USE WITH CAUTION!)"
            ),
        ),
    ] = None,
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    remote: Annotated[str, typer.Option(help="Remote holding the environment branches")] = "origin",
    workers: Annotated[Optional[int], typer.Option(help="Number of parallel git queries")] = None,
    sequential: Annotated[bool, typer.Option(help="Run git queries one at a time")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show progress messages")] = False,
    debug: Annotated[bool, typer.Option(help="Show debug output")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """Show which feature branches are merged into the environment branches."""
    setup_logging(verbose=verbose, debug=debug)

    try:
        settings = Settings(
            remote=remote,
            workers=workers,
            sequential=sequential,
            cleanup=cleanup.upper() if cleanup else None,
            verbose=verbose,
            debug=debug,
        )
    except ValueError as err:
        raise typer.BadParameter(str(err)) from err

    requested = split_branch_names([*branches, *(extra_branches or [])])
    if not requested:
        console.print("[yellow]You haven't specified any branches[/yellow]")
        return

    repo = get_repo(RepoContext(path=path, remote=settings.remote))
    if repo is None:
        console.print("[yellow]The current working directory is not a Git repository.[/yellow]")
        return

    query_workers = get_worker_count(settings.workers, settings.sequential)
    environment_branches = repo.resolve_environment_branches(requested, workers=query_workers)
    if not environment_branches:
        console.print("[bold bright_red]No valid environment branches found.[/bold bright_red]")
        return

    repo.housekeeping()
    summaries = BranchClassifier(repo, settings).classify(environment_branches)
    groups = render_report(console, summaries, environment_branches, settings, requested)

    if settings.cleanup_enabled:
        candidates = groups.eligible_for_deletion(settings.cleanup_all)
        CleanupOrchestrator(repo, console).run(candidates, settings.cleanup_all)


if __name__ == "__main__":
    app()
