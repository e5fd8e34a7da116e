"""Configuration management for refscout."""

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Optional, List, Tuple

from dotenv import load_dotenv

from .git_refs.models import ALL_CATEGORIES, RefCategory, ReconcileMode
from .platform import get_platform_specific_defaults

load_dotenv()  # Load .env file if it exists


DEFAULT_REMOTE_CANDIDATES: Tuple[str, ...] = ("upstream", "origin")
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_categories(value) -> Tuple[RefCategory, ...]:
    """Turn names or enum members into categories in canonical order."""
    if value is None:
        return ALL_CATEGORIES
    if isinstance(value, (str, RefCategory)):
        value = [value]

    requested = set()
    for item in value:
        if isinstance(item, RefCategory):
            requested.add(item)
            continue
        for name in str(item).split(","):
            name = name.strip().lower()
            if not name:
                continue
            try:
                requested.add(RefCategory(name))
            except ValueError:
                valid = ", ".join(category.value for category in ALL_CATEGORIES)
                raise ValueError(f"Invalid category: {name}. Must be one of {valid}")

    return tuple(category for category in ALL_CATEGORIES if category in requested)


def parse_mode(value) -> ReconcileMode:
    if isinstance(value, ReconcileMode):
        return value
    try:
        return ReconcileMode(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid mode: {value}. Must be 'exact' or 'heuristic'")


@dataclass(frozen=True)
class Config:
    """Immutable configuration for one reconciliation run."""

    # Remotes, checked in this order
    remote_candidates: Tuple[str, ...] = DEFAULT_REMOTE_CANDIDATES

    # What to reconcile
    categories: Tuple[RefCategory, ...] = ALL_CATEGORIES
    mode: ReconcileMode = ReconcileMode.EXACT
    limit: Optional[int] = None
    refresh_tracking: bool = False

    # Remote listing retries
    git_retry_attempts: int = 3
    git_retry_delay: float = 1.0

    # Logging and progress
    log_level: str = "INFO"
    debug: bool = False
    progress_interval: int = 10

    def __post_init__(self):
        """Normalize and validate configuration after initialization."""
        # Frozen dataclass: normalization goes through object.__setattr__
        object.__setattr__(self, "remote_candidates", tuple(self.remote_candidates))
        object.__setattr__(self, "categories", parse_categories(self.categories))
        object.__setattr__(self, "mode", parse_mode(self.mode))
        object.__setattr__(self, "log_level", self.log_level.upper())

        if not self.remote_candidates:
            raise ValueError("remote_candidates must name at least one remote")

        if not self.categories:
            raise ValueError("categories must include at least one ref category")

        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")

        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be non-negative")

        # At least one attempt is always made
        if self.git_retry_attempts < 1:
            raise ValueError("git_retry_attempts must be at least 1")

        if self.git_retry_delay < 0:
            raise ValueError("git_retry_delay must be non-negative")

        if self.progress_interval <= 0:
            raise ValueError("progress_interval must be positive")

    @property
    def effective_log_level(self) -> str:
        """DEBUG when tracing is enabled, the configured level otherwise."""
        return "DEBUG" if self.debug else self.log_level

    def replace(self, **changes) -> "Config":
        """Return a copy with the given fields changed; None values are ignored."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return dataclasses.replace(self, **changes)


def _parse_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


def load_configuration() -> Config:
    """Load configuration from environment variables with platform-specific defaults."""
    try:
        platform_defaults = get_platform_specific_defaults()

        remotes = os.getenv("REFSCOUT_REMOTES")
        candidates = (
            tuple(name.strip() for name in remotes.split(",") if name.strip())
            if remotes else DEFAULT_REMOTE_CANDIDATES
        )

        return Config(
            remote_candidates=candidates,
            categories=parse_categories(os.getenv("REFSCOUT_CATEGORIES", "branches,tags,stashes")),
            mode=parse_mode(os.getenv("REFSCOUT_MODE", "exact")),
            limit=_parse_optional_int(os.getenv("REFSCOUT_LIMIT")),
            refresh_tracking=os.getenv("REFSCOUT_REFRESH_TRACKING", "false").lower() == "true",
            git_retry_attempts=int(os.getenv("REFSCOUT_GIT_RETRY_ATTEMPTS", str(platform_defaults['git_retry_attempts']))),
            git_retry_delay=float(os.getenv("REFSCOUT_GIT_RETRY_DELAY", str(platform_defaults['git_retry_delay']))),
            log_level=os.getenv("REFSCOUT_LOG_LEVEL", platform_defaults['log_level']).upper(),
            debug=os.getenv("REFSCOUT_DEBUG", "false").lower() == "true",
            progress_interval=int(os.getenv("REFSCOUT_PROGRESS_INTERVAL", str(platform_defaults['progress_interval'])))
        )
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")


def validate_configuration(config: Config) -> List[str]:
    """Return configuration warnings that do not prevent a run."""
    issues = []

    if config.mode is ReconcileMode.HEURISTIC and config.refresh_tracking:
        issues.append("WARNING: refresh_tracking is ignored in heuristic mode (no network access)")

    if config.limit == 0:
        issues.append("WARNING: limit is 0, no refs will be evaluated")

    if config.git_retry_attempts > 10:
        issues.append("WARNING: High git_retry_attempts may make unreachable remotes very slow to report")

    logging.getLogger('refscout.config').debug(
        f"Configuration validated with {len(issues)} issue(s)"
    )
    return issues
