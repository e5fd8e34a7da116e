"""
Per-run cache of what each remote holds.

Exact mode asks every remote once per category with `git ls-remote`.
Heuristic mode never touches the network. A ref counts as present only on a
name-level signal: a remote-tracking ref of the same name (branches), or a
fetch/pull/push reflog entry naming it whose commit is reachable from one of
the remote's tracking tips. Reachability alone proves nothing about the name,
so a new branch or tag on an already-pushed commit stays local-only. The
heuristic is biased towards reporting refs as local-only.
"""

import logging
from typing import Dict, List, Optional, Tuple

from git import GitCommandError, Repo

from ..config import Config
from .error_strategies import categorize_error
from .error_types import RemoteUnreachable
from .models import LocalRef, MatchKind, RefCategory, ReconcileMode, Remote, RemoteRefSnapshot
from .operations import execute_git_operation_with_retry
from .performance_logger import PerformanceLogger
from .utils import mentions_ref, strip_ref_prefix

HEURISTIC_BIAS_NOTE = (
    "heuristic mode does not query remotes; refs it cannot tie to a remote by name "
    "are reported as local-only, and results are only as current as the last fetch"
)

_PREFIXES = {
    RefCategory.BRANCHES: "refs/heads/",
    RefCategory.TAGS: "refs/tags/",
}
_LS_REMOTE_FLAGS = {
    RefCategory.BRANCHES: "--heads",
    RefCategory.TAGS: "--tags",
}
_PEELED_SUFFIX = "^{}"


def parse_ls_remote(output: str, category: RefCategory) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Parse `git ls-remote` output into advertised and peeled mappings.

    Returns:
        Tuple of (ref name -> object id, tag name -> peeled commit id)
    """
    prefix = _PREFIXES[category]
    refs: Dict[str, str] = {}
    peeled: Dict[str, str] = {}

    for line in output.splitlines():
        parts = line.strip().split("\t", 1)
        if len(parts) != 2:
            continue
        object_id, ref_path = parts[0].strip(), parts[1].strip()
        name = strip_ref_prefix(ref_path, prefix)
        if not name:
            continue
        if name.endswith(_PEELED_SUFFIX):
            peeled[name[:-len(_PEELED_SUFFIX)]] = object_id
        else:
            refs[name] = object_id

    return refs, peeled


class RemoteSnapshotCache:
    """
    Lazily built, read-only view of every remote for one run.

    Each (remote, category) snapshot is built at most once and reused for
    every lookup against it.
    """

    def __init__(self, repo: Repo, config: Config, mode: Optional[ReconcileMode] = None):
        self.repo = repo
        self.config = config
        self.mode = mode or config.mode
        self.logger = logging.getLogger('refscout.git_refs.snapshot')
        self.performance = PerformanceLogger()
        self._snapshots: Dict[Tuple[str, RefCategory], RemoteRefSnapshot] = {}
        self._failures: Dict[Tuple[str, RefCategory], RemoteUnreachable] = {}
        self._refreshed: set = set()
        self._reachable: Dict[Tuple[str, str], bool] = {}

    @property
    def query_count(self) -> int:
        """Number of snapshots built so far."""
        return len(self._snapshots) + len(self._failures)

    def snapshot(self, remote: Remote, category: RefCategory) -> RemoteRefSnapshot:
        """
        Return the snapshot of `remote` for `category`, building it on first use.

        Raises:
            RemoteUnreachable: exact mode only, when listing failed after retries
        """
        key = (remote.name, category)
        if key in self._snapshots:
            return self._snapshots[key]
        if key in self._failures:
            raise self._failures[key]

        try:
            if category is RefCategory.STASHES:
                # Stashes live in refs/stash, which is never pushed
                snapshot = RemoteRefSnapshot(remote_name=remote.name, category=category, source="none")
            elif self.mode is ReconcileMode.EXACT:
                snapshot = self._build_exact(remote, category)
            else:
                snapshot = self._build_heuristic(remote, category)
        except RemoteUnreachable as e:
            self._failures[key] = e
            raise

        self._snapshots[key] = snapshot
        return snapshot

    def lookup(self, remote: Remote, ref: LocalRef) -> Optional[MatchKind]:
        """Return how `ref` was found on `remote`, or None when it was not."""
        snapshot = self.snapshot(remote, ref.category)

        if ref.category is RefCategory.STASHES:
            return None

        if snapshot.source == "ls-remote":
            if ref.category is RefCategory.TAGS and ref.name in snapshot.peeled:
                return MatchKind.PEELED
            if ref.name in snapshot.refs:
                return MatchKind.DIRECT
            return None

        return self._heuristic_lookup(remote, snapshot, ref)

    def _refresh_tracking(self, remote: Remote) -> None:
        if remote.name in self._refreshed:
            return
        self._refreshed.add(remote.name)

        with self.performance.time_operation(f"fetch {remote.name}", {"remote": remote.name}) as outcome:
            result = execute_git_operation_with_retry(
                lambda: self.repo.git.fetch(remote.name, "--prune"),
                f"fetch {remote.name}",
                self.config
            )
            outcome["success"] = result.success
        if not result.success:
            self.logger.warning(f"Could not refresh tracking refs for {remote.name}: {result.stderr}")

    def _build_exact(self, remote: Remote, category: RefCategory) -> RemoteRefSnapshot:
        if self.config.refresh_tracking:
            self._refresh_tracking(remote)

        operation = f"ls-remote {_LS_REMOTE_FLAGS[category]} {remote.name}"
        with self.performance.time_operation(operation, {"remote": remote.name, "category": category.value}) as outcome:
            result = execute_git_operation_with_retry(
                lambda: self.repo.git.ls_remote(_LS_REMOTE_FLAGS[category], remote.name),
                operation,
                self.config
            )
            outcome["success"] = result.success

        if not result.success:
            raise RemoteUnreachable(
                remote.name,
                result.attempts,
                result.stderr or result.message,
                categorize_error(result.stderr)
            )

        refs, peeled = parse_ls_remote(result.output, category)
        self.logger.debug(
            f"{remote.name} advertises {len(refs)} {category.value} ({len(peeled)} peeled)"
        )
        return RemoteRefSnapshot(
            remote_name=remote.name,
            category=category,
            source="ls-remote",
            refs=refs,
            peeled=peeled,
        )

    def _tracking_refs(self, remote: Remote) -> List:
        prefix = f"refs/remotes/{remote.name}/"
        return [
            ref for ref in self.repo.refs
            if ref.path.startswith(prefix) and ref.path != f"{prefix}HEAD"
        ]

    def _reflog_messages(self, refs) -> List[str]:
        messages = []
        for ref in refs:
            try:
                messages.extend(entry.message for entry in ref.log())
            except (OSError, ValueError) as e:
                self.logger.debug(f"No readable reflog for {ref.path}: {e}")
        return messages

    def _build_heuristic(self, remote: Remote, category: RefCategory) -> RemoteRefSnapshot:
        tracking = self._tracking_refs(remote)
        prefix = f"refs/remotes/{remote.name}/"

        messages = self._reflog_messages(tracking)
        # HEAD's reflog records pulls, e.g. "pull origin feature-x: Fast-forward"
        messages.extend(
            message for message in self._reflog_messages([self.repo.head])
            if message.startswith(("pull", "fetch")) and mentions_ref(message, remote.name)
        )
        messages = [
            message for message in messages
            if message.startswith(("fetch", "pull", "update by push"))
        ]

        tips = []
        for ref in tracking:
            try:
                tips.append(ref.commit.hexsha)
            except ValueError as e:
                self.logger.debug(f"Skipping tracking ref {ref.path}: {e}")

        snapshot = RemoteRefSnapshot(
            remote_name=remote.name,
            category=category,
            source="local",
            tracking_names=frozenset(ref.path[len(prefix):] for ref in tracking),
            tracking_tips=tuple(tips),
            reflog_messages=tuple(messages),
        )
        self.logger.debug(
            f"Heuristic snapshot for {remote.name}: {len(snapshot.tracking_names)} tracking refs, "
            f"{len(messages)} reflog entries"
        )
        return snapshot

    def _heuristic_lookup(
        self, remote: Remote, snapshot: RemoteRefSnapshot, ref: LocalRef
    ) -> Optional[MatchKind]:
        if ref.category is RefCategory.BRANCHES and ref.name in snapshot.tracking_names:
            return MatchKind.TRACKING

        if not any(mentions_ref(message, ref.name) for message in snapshot.reflog_messages):
            return None

        # A reflog mention only counts when the commit it names is on the remote
        if ref.commit and snapshot.tracking_tips and self._is_reachable(remote, ref.commit):
            return MatchKind.REFLOG

        return None

    def _is_reachable(self, remote: Remote, commit: str) -> bool:
        key = (remote.name, commit)
        if key not in self._reachable:
            try:
                output = self.repo.git.for_each_ref(
                    "--contains", commit,
                    "--format=%(refname)",
                    f"refs/remotes/{remote.name}"
                )
                self._reachable[key] = bool(output.strip())
            except GitCommandError as e:
                self.logger.debug(f"Reachability check failed for {commit[:12]}: {e}")
                self._reachable[key] = False
        return self._reachable[key]
