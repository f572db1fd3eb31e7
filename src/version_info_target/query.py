"""Build-time phase: query git, render both templates and write the outputs."""

from __future__ import annotations

import logging
from pathlib import Path

from version_info_target.git_info import GitRunner, collect_git_snapshot, run_git
from version_info_target.models import GitSnapshot, QueryParameters
from version_info_target.renderer import render_version_info, write_version_info

logger = logging.getLogger(__name__)

DIRTY_TREE_WARNING = "Git repository is dirty (uncommitted changes); do not release this version"


def run_query(params: QueryParameters, git_runner: GitRunner = run_git) -> tuple[Path, Path]:
    """Regenerate the VersionInfo header and source for one target.

    Every step runs in order and nothing is written until both files are
    rendered, so a failing git query leaves the previous outputs untouched.

    Raises:
        QueryError: If git or a template is unavailable, or an output cannot
            be written.
    """
    snapshot: GitSnapshot | None = None
    if params.git_work_tree is not None:
        snapshot = collect_git_snapshot(params.git_work_tree, params.git_executable, runner=git_runner)
        if snapshot.uncommitted_changes:
            logger.warning("%s: %s", params.target_name, DIRTY_TREE_WARNING)

    rendered = render_version_info(params, snapshot)
    header, source = write_version_info(params, rendered)
    logger.info("%s: wrote %s and %s", params.target_name, header, source)
    return header, source
