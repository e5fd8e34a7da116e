"""Working tree status: uncommitted changes and untracked files."""

import logging

from git import Repo

from .models import WorkspaceStatus


def _paths(diffs):
    return sorted({diff.a_path or diff.b_path for diff in diffs})


def get_workspace_status(repo: Repo) -> WorkspaceStatus:
    """Collect staged, unstaged and untracked paths of the working tree."""
    logger = logging.getLogger('refscout.git_refs.workspace')

    unstaged = _paths(repo.index.diff(None))

    if repo.head.is_valid():
        staged = _paths(repo.index.diff("HEAD"))
    else:
        # No commit yet: everything in the index is staged
        staged = sorted(path for path, _stage in repo.index.entries)

    untracked = sorted(repo.untracked_files)

    logger.debug(
        f"Workspace: {len(staged)} staged, {len(unstaged)} unstaged, {len(untracked)} untracked"
    )
    return WorkspaceStatus(staged=staged, unstaged=unstaged, untracked=untracked)
