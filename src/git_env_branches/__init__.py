"""Environment branch merge overview for git repositories.

Features:
- Show which feature branches are merged into each environment branch (DEV, ACC, PROD, ...)
- Classify branches as fully merged, never merged, mergeable or local orphan
- Color-coded table with follow-up guidance
- Interactive cleanup of branches that are safe to remove
"""

__version__ = "1.0.0"

PROG_NAME = "git-env-branches"
