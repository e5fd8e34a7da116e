"""Run reconciliation over every repository directly below a root directory."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from .config import Config
from .git_refs.error_types import RefScoutError
from .git_refs.models import ReconciliationReport
from .git_refs.reconciler import reconcile


@dataclass
class RepositoryOutcome:
    """Report or fatal error for one repository of a batch scan."""
    path: Path
    report: Optional[ReconciliationReport] = None
    error: Optional[RefScoutError] = None

    @property
    def success(self) -> bool:
        return self.error is None


def find_repositories(root: Union[str, Path]) -> Iterator[Path]:
    """Yield the immediate subdirectories of `root` that contain a .git entry."""
    root = Path(root)
    for child in sorted(root.iterdir()):
        if child.is_dir() and (child / ".git").exists():
            yield child


def scan_repositories(
    root: Union[str, Path],
    config: Config,
    include_workspace: bool = False
) -> Iterator[RepositoryOutcome]:
    """
    Reconcile each repository under `root`.

    Fatal per-repository errors (no remote, broken repository) are captured
    in the outcome so one bad repository does not stop the scan.
    """
    logger = logging.getLogger('refscout.batch')

    for path in find_repositories(root):
        logger.info(f"Processing {path}")
        try:
            report = reconcile(path, config=config, include_workspace=include_workspace)
        except RefScoutError as e:
            logger.warning(f"Skipping {path}: {e}")
            yield RepositoryOutcome(path=path, error=e)
            continue
        yield RepositoryOutcome(path=path, report=report)
