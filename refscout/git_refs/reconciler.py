"""Classification of local refs against the configured remotes."""

import dataclasses
import logging
from itertools import islice
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from git import Repo

from ..config import Config, load_configuration
from .enumerator import RefEnumerator, changed_files
from .error_types import RemoteUnreachable
from .models import (
    CategoryReport, ClassificationResult, LocalRef, RefCategory,
    ReconcileMode, ReconciliationReport, Remote
)
from .remote_registry import discover_remotes, open_repository
from .snapshot import RemoteSnapshotCache
from .workspace import get_workspace_status

ProgressCallback = Callable[[int, int], None]

# Default for `limit`: keep whatever the base configuration says
_KEEP_LIMIT = object()


class Reconciler:
    """
    Reconciles the local ref namespace of one repository for one run.

    A ref is local-only when it is absent from every reachable remote;
    presence in any single remote excludes it from the report. Remotes that
    cannot be listed are dropped for that category and reported as warnings.
    """

    def __init__(
        self,
        repo: Repo,
        config: Config,
        remotes: Optional[List[Remote]] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        self.repo = repo
        self.config = config
        self.remotes = remotes if remotes is not None else discover_remotes(repo, config.remote_candidates)
        self.cache = RemoteSnapshotCache(repo, config)
        self.on_progress = on_progress
        self.logger = logging.getLogger('refscout.git_refs.reconciler')

    def _reachable_remotes(self, category: RefCategory, warnings: List[str]) -> List[Remote]:
        reachable = []
        for remote in self.remotes:
            try:
                self.cache.snapshot(remote, category)
            except RemoteUnreachable as e:
                self.logger.warning(str(e))
                warnings.append(
                    f"remote '{remote.name}' unreachable ({e.category.value}) after "
                    f"{e.attempts} attempt(s); {category.value} were not checked against it"
                )
                continue
            reachable.append(remote)
        return reachable

    def classify(self, ref: LocalRef, remotes: Sequence[Remote]) -> ClassificationResult:
        """Check `ref` against every remote in registry order."""
        matches = []
        for remote in remotes:
            kind = self.cache.lookup(remote, ref)
            if kind is not None:
                matches.append((remote.name, kind))
        if matches:
            found = ", ".join(f"{name} ({kind.value})" for name, kind in matches)
            self.logger.debug(f"{ref.category.singular} {ref.name}: present on {found}")
        else:
            self.logger.debug(f"{ref.category.singular} {ref.name}: local-only")
            ref = dataclasses.replace(ref, files=changed_files(self.repo, ref))
        return ClassificationResult(ref=ref, matches=tuple(matches))

    def _report_progress(self, done: int, total: int) -> None:
        if self.on_progress is not None:
            self.on_progress(done, total)

    def reconcile_category(self, category: RefCategory) -> CategoryReport:
        """Evaluate the first `limit` refs of one category."""
        refs = list(RefEnumerator(self.repo, category))
        total = len(refs)
        limit = self.config.limit
        selected = refs if limit is None else list(islice(refs, limit))

        warnings: List[str] = []
        remotes = self._reachable_remotes(category, warnings) if selected else []
        if selected and not remotes:
            warnings.append(f"no remote could be checked; every local {category.singular} is reported")

        results = []
        for done, ref in enumerate(selected, start=1):
            results.append(self.classify(ref, remotes))
            if done % self.config.progress_interval == 0 and done < len(selected):
                self._report_progress(done, len(selected))
        self._report_progress(len(selected), len(selected))

        if limit is not None and len(selected) < total:
            self.logger.info(f"Processed {len(selected)}/{total} {category.value} (limit {limit})")

        return CategoryReport(
            category=category,
            results=results,
            total=total,
            warnings=warnings,
            limit=limit,
        )

    def run(self, include_workspace: bool = False) -> ReconciliationReport:
        sections = [self.reconcile_category(category) for category in self.config.categories]
        self.cache.performance.log_performance_summary()
        return ReconciliationReport(
            repository_path=str(self.repo.working_tree_dir),
            mode=self.config.mode,
            remotes=list(self.remotes),
            categories=sections,
            workspace=get_workspace_status(self.repo) if include_workspace else None,
        )


def _remote_names(remotes) -> Optional[Tuple[str, ...]]:
    if remotes is None:
        return None
    if isinstance(remotes, str):
        return (remotes,)
    return tuple(remotes)


def reconcile(
    repository: Union[str, Path] = ".",
    categories: Optional[Iterable[Union[str, RefCategory]]] = None,
    mode: Optional[Union[str, ReconcileMode]] = None,
    remotes: Optional[Union[str, Iterable[str]]] = None,
    limit: Optional[int] = _KEEP_LIMIT,
    config: Optional[Config] = None,
    on_progress: Optional[ProgressCallback] = None,
    include_workspace: bool = False
) -> ReconciliationReport:
    """
    Find the local branches, tags and stashes that no configured remote holds.

    Args:
        repository: Path inside the working tree to inspect
        categories: Ref categories to check (default: all)
        mode: "exact" (query remotes) or "heuristic" (local signals only)
        remotes: Candidate remote names in priority order (default: upstream, origin)
        limit: Evaluate only the first N refs of each category; None removes
               a limit set by the configuration, omitting it keeps that limit
        config: Base configuration; explicit arguments override its fields
        on_progress: Called as on_progress(done, total) while refs are classified
        include_workspace: Also collect uncommitted changes and untracked files

    Returns:
        ReconciliationReport; iterating it yields every ClassificationResult

    Raises:
        NotAVersionControlRepository: `repository` is not a git working tree
        NoRemoteConfigured: none of the candidate remotes exist
    """
    base = config or load_configuration()
    run_config = base.replace(
        categories=categories,
        mode=mode,
        remote_candidates=_remote_names(remotes),
    )
    if limit is not _KEEP_LIMIT:
        run_config = dataclasses.replace(run_config, limit=limit)

    repo = open_repository(repository)
    try:
        reconciler = Reconciler(repo, run_config, on_progress=on_progress)
        return reconciler.run(include_workspace=include_workspace)
    finally:
        repo.close()
