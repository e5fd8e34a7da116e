"""
refscout - find local git refs that were never pushed.

Reconciles local branches, tags and stashes against the repository's
'upstream' and 'origin' remotes and reports the local-only ones together
with the commands that would delete them.
"""

__version__ = "1.0.0"
__author__ = "refscout Team"
__description__ = "Report local-only git branches, tags and stashes"

from .git_refs.reconciler import reconcile
from .git_refs.report import render, render_json

__all__ = ["reconcile", "render", "render_json"]
