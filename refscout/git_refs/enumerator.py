"""
Local ref enumeration.

Branches and tags are read with a single `git for-each-ref` call each, stashes
with `git stash list`; both use NUL-separated formats so every record maps
onto a LocalRef without pattern matching over human-readable output.
"""

import logging
import re
from typing import Iterator, List, Optional, Tuple

from git import GitCommandError, Repo

from .error_types import MalformedRefMetadata
from .models import LocalRef, RefCategory

UNKNOWN_BRANCH_LABEL = "(unknown)"

_BRANCH_FIELDS = (
    "%(refname:strip=2)",
    "%(objectname)",
    "%(authorname)",
    "%(authoremail)",
    "%(subject)",
    "%(committerdate:iso8601)",
    "%(upstream:short)",
    "%(upstream:track)",
)

_TAG_FIELDS = (
    "%(refname:strip=2)",
    "%(objecttype)",
    "%(objectname)",
    "%(*objectname)",
    "%(authorname)",
    "%(authoremail)",
    "%(*authorname)",
    "%(*authoremail)",
    "%(subject)",
    "%(creatordate:iso8601)",
)

_STASH_FIELDS = ("%gd", "%H", "%an", "%ae", "%ci", "%gs")

# "WIP on main: 1a2b3c4 message" (git stash) or "On main: message" (git stash push -m)
_STASH_SUBJECT = re.compile(r"^(?:WIP on|On) (?P<branch>[^:]+?):(?: |$)")
_STASH_INDEX = re.compile(r"^stash@\{(\d+)\}$")
_AHEAD = re.compile(r"ahead (\d+)")


def parse_stash_subject(subject: str) -> str:
    """
    Extract the original branch label from a stash's reflog subject.

    Accepts both "WIP on <branch>: ..." and "On <branch>: ..." forms.

    Raises:
        MalformedRefMetadata: if neither form matches
    """
    match = _STASH_SUBJECT.match(subject.strip())
    if not match:
        raise MalformedRefMetadata("stash", f"unrecognized stash subject: {subject!r}")
    return match.group("branch").strip()


def _strip_email(email: str) -> str:
    return email.strip().strip("<>")


def _split_record(line: str, expected: int, ref_name: str) -> List[str]:
    fields = line.split("\x00")
    if len(fields) != expected:
        raise MalformedRefMetadata(
            ref_name, f"expected {expected} fields, got {len(fields)}"
        )
    return fields


def _for_each_ref(repo: Repo, fields: Tuple[str, ...], namespace: str) -> List[str]:
    output = repo.git.for_each_ref(
        f"--format={'%00'.join(fields)}",
        "--sort=refname",
        namespace
    )
    return [line for line in output.splitlines() if line]


def _branch_from_record(line: str) -> LocalRef:
    name = line.split("\x00", 1)[0]
    try:
        fields = _split_record(line, len(_BRANCH_FIELDS), name)
    except MalformedRefMetadata as e:
        return LocalRef(category=RefCategory.BRANCHES, name=name, commit="", metadata_error=e.detail)

    name, commit, author, email, subject, date, upstream, track = fields
    ahead_match = _AHEAD.search(track)
    return LocalRef(
        category=RefCategory.BRANCHES,
        name=name,
        commit=commit,
        author=author,
        author_email=_strip_email(email),
        subject=subject,
        date=date,
        tracking=upstream or None,
        ahead=int(ahead_match.group(1)) if ahead_match else 0,
    )


def _tag_from_record(line: str) -> LocalRef:
    name = line.split("\x00", 1)[0]
    try:
        fields = _split_record(line, len(_TAG_FIELDS), name)
    except MalformedRefMetadata as e:
        return LocalRef(category=RefCategory.TAGS, name=name, commit="", metadata_error=e.detail)

    (name, object_type, object_id, peeled_id, author, email,
     peeled_author, peeled_email, subject, date) = fields

    annotated = object_type == "tag"
    return LocalRef(
        category=RefCategory.TAGS,
        name=name,
        commit=peeled_id if annotated and peeled_id else object_id,
        object_id=object_id,
        author=peeled_author if annotated else author,
        author_email=_strip_email(peeled_email if annotated else email),
        subject=subject,
        date=date,
    )


def _stash_from_record(line: str) -> LocalRef:
    name = line.split("\x00", 1)[0]
    try:
        fields = _split_record(line, len(_STASH_FIELDS), name)
    except MalformedRefMetadata as e:
        return LocalRef(
            category=RefCategory.STASHES, name=name, commit="",
            stash_branch=UNKNOWN_BRANCH_LABEL, metadata_error=e.detail
        )

    name, commit, author, email, date, subject = fields
    index_match = _STASH_INDEX.match(name)

    metadata_error: Optional[str] = None
    try:
        branch = parse_stash_subject(subject)
    except MalformedRefMetadata as e:
        logging.getLogger('refscout.git_refs.enumerator').warning(f"{name}: {e.detail}")
        branch = UNKNOWN_BRANCH_LABEL
        metadata_error = e.detail

    return LocalRef(
        category=RefCategory.STASHES,
        name=name,
        commit=commit,
        author=author,
        author_email=email,
        subject=subject,
        date=date,
        stash_index=int(index_match.group(1)) if index_match else None,
        stash_branch=branch,
        metadata_error=metadata_error,
    )


def _has_stash(repo: Repo) -> bool:
    return any(ref.path == "refs/stash" for ref in repo.refs)


def iter_local_refs(repo: Repo, category: RefCategory) -> Iterator[LocalRef]:
    """
    Yield the local refs of one category.

    Branches and tags come in lexical name order, stashes newest first.
    An empty category (or an empty repository) yields nothing.
    """
    logger = logging.getLogger('refscout.git_refs.enumerator')

    if category is RefCategory.BRANCHES:
        lines, parse = _for_each_ref(repo, _BRANCH_FIELDS, "refs/heads"), _branch_from_record
    elif category is RefCategory.TAGS:
        lines, parse = _for_each_ref(repo, _TAG_FIELDS, "refs/tags"), _tag_from_record
    else:
        if not _has_stash(repo):
            logger.debug("No stash ref present")
            return
        output = repo.git.stash("list", f"--format={'%x00'.join(_STASH_FIELDS)}")
        lines, parse = [line for line in output.splitlines() if line], _stash_from_record

    logger.debug(f"Enumerated {len(lines)} local {category.value}")
    for line in lines:
        yield parse(line)


class RefEnumerator:
    """Restartable sequence of the local refs of one category."""

    def __init__(self, repo: Repo, category: RefCategory):
        self.repo = repo
        self.category = category

    def __iter__(self) -> Iterator[LocalRef]:
        return iter_local_refs(self.repo, self.category)


def changed_files(repo: Repo, ref: LocalRef) -> Tuple[str, ...]:
    """
    List the paths changed by a ref's commit, or by a stash's changes.

    Returns an empty tuple when git cannot show the object.
    """
    try:
        if ref.category is RefCategory.STASHES:
            output = repo.git.stash("show", "--name-only", ref.name)
        else:
            if not ref.commit:
                return ()
            output = repo.git.show("--name-only", "--format=", ref.commit)
    except GitCommandError as e:
        logging.getLogger('refscout.git_refs.enumerator').warning(
            f"Could not list changed files for {ref.name}: {e}"
        )
        return ()
    return tuple(line.strip() for line in output.splitlines() if line.strip())
