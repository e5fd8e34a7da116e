"""Helpers for building throwaway git repositories in tests."""

from pathlib import Path
from typing import Optional

from git import Repo


def init_repo(path: Path, branch: str = "main") -> Repo:
    """Create a working repository with a fixed identity and default branch."""
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(path)
    repo.git.symbolic_ref("HEAD", f"refs/heads/{branch}")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")
        writer.set_value("tag", "gpgsign", "false")
    return repo


def init_bare(path: Path) -> Repo:
    """Create a bare repository that stands in for a remote."""
    path.mkdir(parents=True, exist_ok=True)
    return Repo.init(path, bare=True)


def commit_file(repo: Repo, name: str, content: str, message: Optional[str] = None) -> str:
    """Write a file, commit it and return the new commit id."""
    file_path = Path(repo.working_tree_dir) / name
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content)
    repo.git.add(name)
    repo.git.commit("-m", message or f"Update {name}")
    return repo.head.commit.hexsha


def add_remote(repo: Repo, name: str, target) -> None:
    """Register a remote pointing at a bare repository (or any path/URL)."""
    url = target.git_dir if isinstance(target, Repo) else str(target)
    repo.create_remote(name, url)
