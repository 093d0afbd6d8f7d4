"""Classify branches by their merge state in the environment branches."""

from git_env_branches.config import Settings
from git_env_branches.git import GitRepo
from git_env_branches.logging_config import get_logger
from git_env_branches.models import (
    BranchState,
    CommitInfo,
    EnvironmentBranchData,
    FeatureBranchSummary,
    RemoteBranch,
)
from git_env_branches.pool import fan_out, get_worker_count

logger = get_logger(__name__)


def derive_state(target: dict[str, bool], is_environment_branch: bool, empty_targets_fully_merged: bool = False) -> BranchState:
    """Merge state of a remote branch from its per-environment merge flags."""
    if is_environment_branch:
        return BranchState.ENVIRONMENT
    if not target:
        return BranchState.FULLY_MERGED if empty_targets_fully_merged else BranchState.NEVER_MERGED
    merged = target.values()
    if all(merged):
        return BranchState.FULLY_MERGED
    if not any(merged):
        return BranchState.NEVER_MERGED
    return BranchState.MERGEABLE


class BranchClassifier:
    """Builds one FeatureBranchSummary per remote branch and per local orphan."""

    def __init__(self, repo: GitRepo, settings: Settings) -> None:
        self.repo = repo
        self.settings = settings
        self.workers = get_worker_count(settings.workers, settings.sequential)

    def environment_data(self, environment_branches: list[str]) -> dict[str, EnvironmentBranchData]:
        """Merged and unmerged sets for each environment branch."""
        data = fan_out(self.repo.environment_branch_data, environment_branches, self.workers)
        return dict(zip(environment_branches, data))

    def _branch_details(self, branch: RemoteBranch) -> tuple[CommitInfo, list[str]]:
        return self.repo.last_commit_info(branch.commit), self.repo.files_touched(branch.name)

    def classify_remote(
        self,
        environment_branches: list[str],
        remote_branches: list[RemoteBranch],
        current: str,
    ) -> list[FeatureBranchSummary]:
        targets = self.environment_data(environment_branches)
        environment_refs = {self.repo.context.remote_prefix + name for name in environment_branches}
        current_ref = self.repo.context.remote_prefix + current if current else ""

        details = fan_out(self._branch_details, remote_branches, self.workers)

        summaries = []
        for branch, (commit, files) in zip(remote_branches, details):
            target = {name: branch.name in targets[name].merged for name in environment_branches}
            state = derive_state(
                target,
                branch.name in environment_refs,
                self.settings.empty_targets_fully_merged,
            )
            summaries.append(
                FeatureBranchSummary(
                    branch=branch.name,
                    state=state,
                    target=target,
                    commit=commit,
                    files_touched=files,
                    is_current=branch.name == current_ref,
                )
            )
        return summaries

    def classify_local(
        self,
        environment_branches: list[str],
        remote_branches: list[RemoteBranch],
        current: str,
    ) -> list[FeatureBranchSummary]:
        """Records for local branches without a same-named remote branch."""
        prefix = self.repo.context.remote_prefix
        remote_as_local = {branch.name[len(prefix) :] for branch in remote_branches if branch.name.startswith(prefix)}
        orphans = [name for name in self.repo.list_local_branches() if name not in remote_as_local]
        files = fan_out(self.repo.files_touched, orphans, self.workers)

        return [
            FeatureBranchSummary(
                branch=name,
                state=BranchState.LOCAL_ORPHAN,
                target={env: False for env in environment_branches},
                files_touched=touched,
                is_current=name == current,
            )
            for name, touched in zip(orphans, files)
        ]

    def classify(self, environment_branches: list[str]) -> list[FeatureBranchSummary]:
        """Classify all remote branches followed by the local orphans."""
        remote_branches = self.repo.list_remote_branches()
        current = self.repo.get_current_branch_name()
        logger.info(
            f"Classifying {len(remote_branches)} remote branches against {', '.join(environment_branches) or 'no branches'}"
        )

        summaries = self.classify_remote(environment_branches, remote_branches, current)
        summaries.extend(self.classify_local(environment_branches, remote_branches, current))
        return summaries
