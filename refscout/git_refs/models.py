"""Data structures shared by the ref reconciliation components."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class RefCategory(Enum):
    """Categories of local refs that can be reconciled."""
    BRANCHES = "branches"
    TAGS = "tags"
    STASHES = "stashes"

    @property
    def singular(self) -> str:
        return {"branches": "branch", "tags": "tag", "stashes": "stash"}[self.value]


# Canonical processing and reporting order
ALL_CATEGORIES: Tuple[RefCategory, ...] = (
    RefCategory.BRANCHES,
    RefCategory.TAGS,
    RefCategory.STASHES,
)


class ReconcileMode(Enum):
    """How remote existence is determined."""
    EXACT = "exact"          # Live `git ls-remote` query per remote
    HEURISTIC = "heuristic"  # Local tracking refs and reflog only, no network


class MatchKind(Enum):
    """Which signal proved that a ref exists on a remote."""
    DIRECT = "direct"
    PEELED = "peeled"
    TRACKING = "tracking"
    REFLOG = "reflog"


@dataclass(frozen=True)
class Remote:
    """A configured remote repository."""
    name: str
    url: str


@dataclass(frozen=True)
class LocalRef:
    """A local branch, tag or stash with its commit metadata."""
    category: RefCategory
    name: str
    commit: str
    author: str = ""
    author_email: str = ""
    subject: str = ""
    date: str = ""
    object_id: Optional[str] = None
    stash_index: Optional[int] = None
    stash_branch: Optional[str] = None
    tracking: Optional[str] = None
    ahead: int = 0
    metadata_error: Optional[str] = None
    # Paths touched by the ref's commit (or the stash), filled in for local-only refs
    files: Tuple[str, ...] = ()

    @property
    def author_line(self) -> str:
        if self.author_email:
            return f"{self.author} <{self.author_email}>"
        return self.author

    @property
    def show_command(self) -> str:
        if self.category is RefCategory.STASHES:
            return f"git stash show -p {self.name}"
        return f"git show {self.name}"

    @property
    def delete_command(self) -> str:
        if self.category is RefCategory.BRANCHES:
            return f"git branch -D {self.name}"
        if self.category is RefCategory.TAGS:
            return f"git tag -d {self.name}"
        return f"git stash drop {self.name}"


@dataclass(frozen=True)
class RemoteRefSnapshot:
    """
    What one remote is known to hold for one ref category.

    Exact snapshots carry the advertised refs (`refs`) and, for annotated
    tags, the peeled commits (`peeled`). Heuristic snapshots carry the local
    signals instead: remote-tracking names and tips plus fetch/push reflog
    messages.
    """
    remote_name: str
    category: RefCategory
    source: str
    refs: Dict[str, str] = field(default_factory=dict)
    peeled: Dict[str, str] = field(default_factory=dict)
    tracking_names: frozenset = frozenset()
    tracking_tips: Tuple[str, ...] = ()
    reflog_messages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of checking one local ref against every reachable remote."""
    ref: LocalRef
    matches: Tuple[Tuple[str, MatchKind], ...] = ()

    @property
    def local_only(self) -> bool:
        return not self.matches

    @property
    def matched_remotes(self) -> List[str]:
        return [remote_name for remote_name, _ in self.matches]


@dataclass
class CategoryReport:
    """Classification results for one ref category."""
    category: RefCategory
    results: List[ClassificationResult]
    total: int
    warnings: List[str] = field(default_factory=list)
    limit: Optional[int] = None

    @property
    def evaluated(self) -> int:
        return len(self.results)

    @property
    def truncated(self) -> bool:
        return self.evaluated < self.total

    @property
    def local_only(self) -> List[ClassificationResult]:
        return [result for result in self.results if result.local_only]


@dataclass
class WorkspaceStatus:
    """Uncommitted changes and untracked files of the working tree."""
    staged: List[str] = field(default_factory=list)
    unstaged: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)


@dataclass
class ReconciliationReport:
    """Everything one reconciliation run produced."""
    repository_path: str
    mode: ReconcileMode
    remotes: List[Remote]
    categories: List[CategoryReport]
    generated_at: datetime = field(default_factory=datetime.now)
    workspace: Optional[WorkspaceStatus] = None

    @property
    def repository_name(self) -> str:
        return self.repository_path.rstrip("/\\").replace("\\", "/").rsplit("/", 1)[-1]

    @property
    def warnings(self) -> List[str]:
        return [warning for section in self.categories for warning in section.warnings]

    def category(self, category: RefCategory) -> Optional[CategoryReport]:
        for section in self.categories:
            if section.category is category:
                return section
        return None

    def __iter__(self) -> Iterator[ClassificationResult]:
        for section in self.categories:
            yield from section.results

    def __len__(self) -> int:
        return sum(section.evaluated for section in self.categories)
