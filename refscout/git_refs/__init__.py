"""Local ref reconciliation against remote repositories."""

from .models import (
    ALL_CATEGORIES,
    CategoryReport,
    ClassificationResult,
    LocalRef,
    MatchKind,
    RefCategory,
    ReconcileMode,
    ReconciliationReport,
    Remote,
    RemoteRefSnapshot,
    WorkspaceStatus,
)
from .error_types import (
    MalformedRefMetadata,
    NoRemoteConfigured,
    NotAVersionControlRepository,
    RefScoutError,
    RemoteUnreachable,
)

__all__ = [
    'ALL_CATEGORIES',
    'CategoryReport',
    'ClassificationResult',
    'LocalRef',
    'MatchKind',
    'RefCategory',
    'ReconcileMode',
    'ReconciliationReport',
    'Remote',
    'RemoteRefSnapshot',
    'WorkspaceStatus',
    'MalformedRefMetadata',
    'NoRemoteConfigured',
    'NotAVersionControlRepository',
    'RefScoutError',
    'RemoteUnreachable',
]
