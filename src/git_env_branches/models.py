"""Branch models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class BranchState(Enum):
    """Merge state of a branch relative to the environment branches."""

    ENVIRONMENT = "environment"
    FULLY_MERGED = "fully merged"
    NEVER_MERGED = "never merged"
    MERGEABLE = "mergeable"
    LOCAL_ORPHAN = "local orphan"


@dataclass(frozen=True)
class RepoContext:
    """Location of the working copy and the remote every query runs against."""

    path: Path = Path(".")
    remote: str = "origin"

    @property
    def remote_prefix(self) -> str:
        return f"{self.remote}/"


@dataclass(frozen=True)
class CommitInfo:
    """Last commit on a branch. Empty strings when unknown."""

    commit: str = ""
    date: str = ""
    author: str = ""


@dataclass(frozen=True)
class RemoteBranch:
    name: str
    commit: str


@dataclass
class EnvironmentBranchData:
    """Remote branches merged and not merged into one environment branch."""

    merged: set[str] = field(default_factory=set)
    unmerged: set[str] = field(default_factory=set)


@dataclass
class FeatureBranchSummary:
    """Classified branch, one per table row."""

    branch: str
    state: BranchState
    target: dict[str, bool] = field(default_factory=dict)
    commit: CommitInfo = field(default_factory=CommitInfo)
    files_touched: list[str] = field(default_factory=list)
    is_current: bool = False
    # Reserved, never set.
    has_possible_conflicting_files: bool = False

    @property
    def is_fully_merged(self) -> bool:
        return self.state == BranchState.FULLY_MERGED

    @property
    def is_never_merged(self) -> bool:
        return self.state == BranchState.NEVER_MERGED

    @property
    def is_environment_branch(self) -> bool:
        return self.state == BranchState.ENVIRONMENT

    @property
    def is_local_only(self) -> bool:
        return self.state == BranchState.LOCAL_ORPHAN
