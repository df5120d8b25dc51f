"""Staged-file discovery for commitgate.

Reads the staged change set from git, removes ignored paths and classifies
the remaining files into checker groups.
"""

from __future__ import annotations

from commitgate.staging.classifier import (
    FileGroup,
    StagedFile,
    WorkingSet,
    classify,
    classify_changes,
)
from commitgate.staging.git_helper import (
    ChangeKind,
    ChangeRecord,
    GitStatusError,
    RepositoryNotFoundError,
    find_repo_root,
    read_staged_changes,
)
from commitgate.staging.path_filter import filter_ignored, load_ignore_set

__all__ = [
    # Git status
    "ChangeKind",
    "ChangeRecord",
    "GitStatusError",
    "RepositoryNotFoundError",
    "find_repo_root",
    "read_staged_changes",
    # Ignore list
    "filter_ignored",
    "load_ignore_set",
    # Classification
    "FileGroup",
    "StagedFile",
    "WorkingSet",
    "classify",
    "classify_changes",
]
