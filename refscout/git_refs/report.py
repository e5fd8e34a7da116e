"""Text and dictionary rendering of reconciliation reports."""

from typing import Any, Dict, List

from .models import (
    CategoryReport, ClassificationResult, RefCategory, ReconcileMode,
    ReconciliationReport, WorkspaceStatus
)
from .snapshot import HEURISTIC_BIAS_NOTE

NO_UPSTREAM_STATUS = "no upstream"

_SECTION_TITLES = {
    RefCategory.BRANCHES: "LOCAL BRANCHES NOT IN REMOTES",
    RefCategory.TAGS: "LOCAL TAGS NOT IN REMOTES",
    RefCategory.STASHES: "LOCAL STASHES NOT IN REMOTES",
}


def _header(title: str) -> str:
    return f"===== {title} ====="


def _render_ref(result: ClassificationResult) -> List[str]:
    ref = result.ref
    label = ref.category.singular.capitalize()

    if ref.category is RefCategory.STASHES:
        lines = [f"{label}: {ref.name} (on {ref.stash_branch})"]
    else:
        lines = [f"{label}: {ref.name}"]

    lines.append(f"  Commit: {ref.commit or '(unknown)'}")
    if ref.author:
        lines.append(f"  Author: {ref.author_line}")

    if ref.category is RefCategory.TAGS:
        lines.append(f"  Tag message: {ref.subject}")
        lines.append(f"  Tag date: {ref.date}")
    elif ref.category is RefCategory.STASHES:
        lines.append(f"  Message: {ref.subject}")
        lines.append(f"  Date: {ref.date}")
    else:
        lines.append(f"  Last commit message: {ref.subject}")
        lines.append(f"  Last commit date: {ref.date}")
        if ref.tracking:
            ahead = f" (ahead {ref.ahead})" if ref.ahead else ""
            lines.append(f"  Tracking: {ref.tracking}{ahead}")
        else:
            lines.append(f"  Status: {NO_UPSTREAM_STATUS}")

    if ref.files:
        lines.append("  Files changed:")
        lines.extend(f"    - {path}" for path in ref.files)
    else:
        lines.append("  Files changed: (none)")

    if ref.metadata_error:
        lines.append(f"  Note: metadata incomplete ({ref.metadata_error})")

    lines.append(f"  Show command: {ref.show_command}")
    lines.append(f"  Delete command: {ref.delete_command}")
    return lines


def _render_section(section: CategoryReport) -> List[str]:
    lines = [_header(_SECTION_TITLES[section.category]), ""]

    for warning in section.warnings:
        lines.append(f"WARNING: {warning}")
    if section.warnings:
        lines.append("")

    if section.truncated:
        lines.append(
            f"Processed {section.evaluated}/{section.total} {section.category.value} "
            f"(limit {section.limit})"
        )
        lines.append("")

    local_only = section.local_only
    if not local_only:
        lines.append(f"No local-only {section.category.value} found.")
        lines.append("")
        return lines

    for result in local_only:
        lines.extend(_render_ref(result))
        lines.append("")
    return lines


def _render_workspace(workspace: WorkspaceStatus) -> List[str]:
    lines = [_header("UNCOMMITTED CHANGES"), ""]
    if not workspace.staged and not workspace.unstaged:
        lines.append("No uncommitted changes.")
    if workspace.unstaged:
        lines.append("Unstaged changes:")
        lines.extend(f"  {path}" for path in workspace.unstaged)
    if workspace.staged:
        lines.append("Changes staged for commit:")
        lines.extend(f"  {path}" for path in workspace.staged)
    lines.extend(["", _header("UNTRACKED FILES"), ""])
    if workspace.untracked:
        lines.extend(workspace.untracked)
    else:
        lines.append("No untracked files.")
    lines.append("")
    return lines


def render(report: ReconciliationReport) -> str:
    """Render a report as plain text; never executes the suggested commands."""
    lines = [
        f"Repository: {report.repository_name}",
        f"Date: {report.generated_at:%Y-%m-%d %H:%M:%S}",
        f"Checking against remotes: {' '.join(remote.name for remote in report.remotes)}",
        f"Mode: {report.mode.value}",
    ]
    if report.mode is ReconcileMode.HEURISTIC:
        lines.append(f"Note: {HEURISTIC_BIAS_NOTE}")
    lines.append("")

    for section in report.categories:
        lines.extend(_render_section(section))

    if report.workspace is not None:
        lines.extend(_render_workspace(report.workspace))

    return "\n".join(lines).rstrip("\n") + "\n"


def _result_to_dict(result: ClassificationResult) -> Dict[str, Any]:
    ref = result.ref
    data = {
        "name": ref.name,
        "commit": ref.commit,
        "author": ref.author_line,
        "subject": ref.subject,
        "date": ref.date,
        "files": list(ref.files),
        "local_only": result.local_only,
        "matched_remotes": [
            {"remote": remote_name, "match": kind.value} for remote_name, kind in result.matches
        ],
        "show_command": ref.show_command,
        "delete_command": ref.delete_command,
    }
    if ref.category is RefCategory.STASHES:
        data["branch"] = ref.stash_branch
    if ref.category is RefCategory.BRANCHES:
        data["tracking"] = ref.tracking
        data["ahead"] = ref.ahead
        if not ref.tracking:
            data["status"] = NO_UPSTREAM_STATUS
    if ref.metadata_error:
        data["metadata_error"] = ref.metadata_error
    return data


def render_json(report: ReconciliationReport) -> Dict[str, Any]:
    """Render a report as a JSON-serializable dictionary."""
    data: Dict[str, Any] = {
        "repository": report.repository_path,
        "generated_at": report.generated_at.isoformat(),
        "mode": report.mode.value,
        "remotes": [{"name": remote.name, "url": remote.url} for remote in report.remotes],
        "categories": {},
        "warnings": report.warnings,
    }
    if report.mode is ReconcileMode.HEURISTIC:
        data["note"] = HEURISTIC_BIAS_NOTE

    for section in report.categories:
        data["categories"][section.category.value] = {
            "total": section.total,
            "evaluated": section.evaluated,
            "truncated": section.truncated,
            "warnings": list(section.warnings),
            "local_only": [_result_to_dict(result) for result in section.local_only],
        }

    if report.workspace is not None:
        data["workspace"] = {
            "staged": list(report.workspace.staged),
            "unstaged": list(report.workspace.unstaged),
            "untracked": list(report.workspace.untracked),
        }
    return data
