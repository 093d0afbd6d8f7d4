"""Run settings for git-env-branches."""

from dataclasses import dataclass
from typing import Optional

CLEANUP_SAFE = "SAFE"
CLEANUP_ALL = "ALL"


@dataclass
class Settings:
    """Settings for a single run, validated on creation."""

    remote: str = "origin"
    workers: Optional[int] = None  # None = derive from CPU count
    sequential: bool = False
    cleanup: Optional[str] = None  # None, SAFE or ALL
    # Outcome for a branch when there are no environment branches to compare against
    empty_targets_fully_merged: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        self._validate_remote()
        self._validate_workers()
        self._validate_cleanup()

    def _validate_remote(self):
        if not self.remote or not self.remote.strip():
            raise ValueError("remote cannot be empty")
        self.remote = self.remote.strip()

    def _validate_workers(self):
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def _validate_cleanup(self):
        allowed = [None, CLEANUP_SAFE, CLEANUP_ALL]
        if self.cleanup not in allowed:
            raise ValueError(f"cleanup must be one of {allowed}, got '{self.cleanup}'")

    @property
    def cleanup_enabled(self) -> bool:
        return self.cleanup is not None

    @property
    def cleanup_all(self) -> bool:
        return self.cleanup == CLEANUP_ALL
