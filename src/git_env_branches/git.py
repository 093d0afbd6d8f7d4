"""Git repository operations."""

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from git_env_branches.logging_config import get_logger
from git_env_branches.models import CommitInfo, EnvironmentBranchData, RemoteBranch, RepoContext
from git_env_branches.pool import fan_out

logger = get_logger(__name__)


class GitError(Exception):
    """Git operation error."""


class GitRepo:
    """Git repository operations.

    Queries never raise: a failing git command is logged and treated as an
    empty result so that a report can always be printed.
    """

    def __init__(self, context: RepoContext) -> None:
        """Open the repository at ``context.path``."""
        self.context = context
        try:
            self.repo: Repo = Repo(context.path)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    @property
    def remote(self) -> str:
        return self.context.remote

    def _remote_ref(self, branch_name: str) -> str:
        return f"{self.context.remote_prefix}{branch_name}"

    def is_valid_repository(self) -> bool:
        """Check that the path is inside a git working tree."""
        try:
            return self.repo.git.rev_parse("--is-inside-work-tree").strip() == "true"
        except GitCommandError as err:
            logger.warning(f"Not a valid git repository: {err}")
            return False

    def housekeeping(self) -> None:
        """Remove untracked files and fetch with pruning.

        Never run this while queries are in flight.
        """
        try:
            self.repo.git.clean("-f")
        except GitCommandError as err:
            logger.warning(f"Failed to clean working tree: {err}")
        try:
            self.repo.git.fetch("--prune", self.remote)
        except GitCommandError as err:
            logger.warning(f"Failed to fetch from '{self.remote}': {err}")

    def is_remote_branch(self, branch_name: str) -> bool:
        """Check whether ``branch_name`` exists as a branch on the remote."""
        try:
            output = self.repo.git.ls_remote("--heads", self.remote, f"refs/heads/{branch_name}")
        except GitCommandError as err:
            logger.debug(f"ls-remote failed for '{branch_name}': {err}")
            return False
        return bool(output.strip())

    def resolve_environment_branches(self, names: list[str], workers: int = 1) -> list[str]:
        """Keep the names that exist as remote branches, in the given order."""
        exists = fan_out(self.is_remote_branch, names, workers)
        resolved = []
        for name, is_remote in zip(names, exists):
            if is_remote:
                resolved.append(name)
            else:
                logger.warning(f"'{name}' is not a valid remote branch for this repository and will be ignored.")
        return resolved

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD has no branch to protect
                return ""
        except (GitCommandError, ValueError) as err:
            logger.warning(f"Failed to get current branch: {err}")
            return ""

    def list_local_branches(self) -> list[str]:
        """Names of all local branches.

        Reads refs/heads directly so a detached HEAD never shows up as a branch.
        """
        try:
            output = self.repo.git.for_each_ref("--format=%(refname:short)", "refs/heads")
        except GitCommandError as err:
            logger.warning(f"Failed to list local branches: {err}")
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def list_remote_branches(self) -> list[RemoteBranch]:
        """Remote branches of the configured remote, most recent commit first."""
        try:
            output = self.repo.git.branch(
                "-r",
                "--sort=-committerdate",
                "--format=%(refname:short) %(objectname)",
                "--list",
                f"{self.context.remote_prefix}*",
            )
        except GitCommandError as err:
            logger.warning(f"Failed to list remote branches: {err}")
            return []

        branches = []
        for line in output.splitlines():
            name, _, commit = line.strip().partition(" ")
            # Skip the symbolic <remote>/HEAD ref
            if not name or name == self.remote or name.endswith("/HEAD"):
                continue
            branches.append(RemoteBranch(name=name, commit=commit))
        return branches

    def _remote_branches_by_merge(self, flag: str, ref: str) -> set[str]:
        try:
            output = self.repo.git.branch(
                "-r",
                flag,
                self._remote_ref(ref),
                "--format=%(refname:short)",
                "--list",
                f"{self.context.remote_prefix}*",
            )
        except GitCommandError as err:
            logger.warning(f"Failed to list branches {flag} '{self._remote_ref(ref)}': {err}")
            return set()
        return {
            line.strip()
            for line in output.splitlines()
            if line.strip() and line.strip() != self.remote and not line.strip().endswith("/HEAD")
        }

    def merged_into(self, ref: str) -> set[str]:
        """Remote branches merged into ``<remote>/<ref>``."""
        return self._remote_branches_by_merge("--merged", ref)

    def unmerged_into(self, ref: str) -> set[str]:
        """Remote branches not merged into ``<remote>/<ref>``."""
        return self._remote_branches_by_merge("--no-merged", ref)

    def environment_branch_data(self, ref: str) -> EnvironmentBranchData:
        return EnvironmentBranchData(merged=self.merged_into(ref), unmerged=self.unmerged_into(ref))

    def last_commit_info(self, commit: str) -> CommitInfo:
        """Commit date (day only) and committer of ``commit``."""
        try:
            output = self.repo.git.show("--no-patch", "--format=%ci,%cn", commit)
        except GitCommandError as err:
            logger.warning(f"Failed to read commit {commit}: {err}")
            return CommitInfo(commit=commit)

        line = output.strip().splitlines()[0] if output.strip() else ""
        date, _, author = line.partition(",")
        return CommitInfo(commit=commit, date=date.split(" ")[0], author=author.strip())

    def files_touched(self, ref: str) -> list[str]:
        """Files changed on ``ref`` since its merge base with HEAD."""
        try:
            output = self.repo.git.diff("--name-only", f"HEAD...{ref}")
        except GitCommandError as err:
            logger.warning(f"Failed to diff '{ref}': {err}")
            return []
        return [line for line in output.splitlines() if line]

    def _delete_local_branches(self, branch_names: list[str]) -> bool:
        try:
            self.repo.git.branch("-D", *branch_names)
            return True
        except GitCommandError as err:
            logger.warning(f"Failed to delete local branches {', '.join(branch_names)}: {err}")
            return False

    def delete_branches(self, branch_names: list[str]) -> list[str]:
        """Delete remote and local branches. Returns the names that were deleted.

        Remote-qualified names are pushed as deletions one at a time, then
        same-named local branches are force-deleted. Names without the remote
        prefix are local orphans and are force-deleted in one batch.
        """
        prefix = self.context.remote_prefix
        remote_names = [name[len(prefix) :] for name in branch_names if name.startswith(prefix)]
        orphan_names = [name for name in branch_names if not name.startswith(prefix)]
        deleted: list[str] = []

        if remote_names:
            logger.info(f"Deleting {len(remote_names)} remote branches...")
            for name in remote_names:
                try:
                    self.repo.git.push(self.remote, "--delete", name)
                    deleted.append(self._remote_ref(name))
                except GitCommandError as err:
                    logger.warning(f"Failed to delete remote branch '{self._remote_ref(name)}': {err}")

            local_branches = set(self.list_local_branches())
            matching = [name for name in remote_names if name in local_branches]
            if matching:
                logger.info(f"Deleting {len(matching)} local branches for the deleted remote branches...")
                if self._delete_local_branches(matching):
                    deleted.extend(matching)
            else:
                logger.info("No local branches to delete for the selected remote branches")

        if orphan_names:
            logger.info(f"Deleting {len(orphan_names)} local orphan branches...")
            if self._delete_local_branches(orphan_names):
                deleted.extend(orphan_names)

        return deleted
