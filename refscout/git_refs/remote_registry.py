"""Remote discovery for ref reconciliation."""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .error_types import NoRemoteConfigured, NotAVersionControlRepository
from .models import Remote


def open_repository(path: Union[str, Path]) -> Repo:
    """
    Open the git repository containing `path`.

    Raises:
        NotAVersionControlRepository: if `path` is not inside a git working tree
    """
    logger = logging.getLogger('refscout.git_refs.remote_registry')

    try:
        repo = Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise NotAVersionControlRepository(str(path), type(e).__name__)

    if repo.bare:
        raise NotAVersionControlRepository(str(path), "bare repository has no working tree")

    logger.debug(f"Opened repository at {repo.working_tree_dir}")
    return repo


def _remote_url(repo: Repo, name: str) -> str:
    try:
        return next(iter(repo.remote(name).urls), "")
    except (GitCommandError, ValueError):
        # Remote declared without a url
        return ""


def discover_remotes(repo: Repo, candidates: Iterable[str] = ("upstream", "origin")) -> List[Remote]:
    """
    Return the configured remotes that appear in `candidates`, in candidate order.

    Raises:
        NoRemoteConfigured: if none of the candidates exist
    """
    logger = logging.getLogger('refscout.git_refs.remote_registry')
    candidates = list(dict.fromkeys(candidates))
    configured = {remote.name for remote in repo.remotes}

    remotes = [
        Remote(name=name, url=_remote_url(repo, name))
        for name in candidates
        if name in configured
    ]

    if not remotes:
        logger.debug(f"No candidate remote configured; repository has {sorted(configured)}")
        raise NoRemoteConfigured(candidates)

    logger.debug(f"Checking against remotes: {', '.join(remote.name for remote in remotes)}")
    return remotes
