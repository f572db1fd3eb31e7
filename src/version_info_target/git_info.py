"""Git client discovery and build-time repository queries."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from version_info_target.errors import GitQueryError
from version_info_target.models import GitSnapshot

GitRunner = Callable[[str, Path, list[str]], str]

STATUS_ARGS = ["status", "--porcelain", "--untracked-files=no"]
HASH_ARGS = ["rev-parse", "HEAD"]
DATE_ARGS = ["show", "-s", "--format=%cd", "HEAD"]
USER_NAME_ARGS = ["show", "-s", "--format=%cn", "HEAD"]
USER_EMAIL_ARGS = ["show", "-s", "--format=%ce", "HEAD"]


def find_git() -> str | None:
    """Locate the git client via ``GIT_EXECUTABLE`` or ``PATH``."""
    configured = (os.getenv("GIT_EXECUTABLE") or "").strip()
    if configured:
        return configured if Path(configured).exists() else shutil.which(configured)
    return shutil.which("git")


def run_git(git_executable: str, work_tree: Path, args: list[str]) -> str:
    """Run one git command inside ``work_tree`` and return stdout."""
    cmd = [git_executable, *args]
    try:
        proc = subprocess.run(cmd, cwd=work_tree, check=False, capture_output=True, text=True)
    except OSError as exc:
        raise GitQueryError(f"git command could not be started: {' '.join(cmd)}: {exc}") from exc
    if proc.returncode != 0:
        raise GitQueryError(f"git command failed: {' '.join(cmd)}\n{proc.stderr.strip()}")
    return proc.stdout


def is_git_repository(work_tree: Path, git_executable: str, runner: GitRunner = run_git) -> bool:
    """Return ``True`` when ``work_tree`` resolves a ``HEAD`` commit."""
    try:
        runner(git_executable, work_tree, HASH_ARGS)
    except GitQueryError:
        return False
    return True


def collect_git_snapshot(
    work_tree: Path,
    git_executable: str,
    runner: GitRunner = run_git,
) -> GitSnapshot:
    """Query dirtiness and ``HEAD`` commit metadata of ``work_tree``.

    Untracked files never make the tree dirty. The committer date is used
    rather than the author date so rebased commits report when they landed.

    Raises:
        GitQueryError: If git is missing or any query exits non-zero.
    """
    if not git_executable:
        raise GitQueryError("A git work tree was requested but no git executable is configured")
    if not Path(work_tree).is_dir():
        raise GitQueryError(f"Git work tree does not exist: {work_tree}")

    status = runner(git_executable, work_tree, STATUS_ARGS)
    commit_hash = runner(git_executable, work_tree, HASH_ARGS).rstrip()
    commit_date = runner(git_executable, work_tree, DATE_ARGS).rstrip()
    user_name = runner(git_executable, work_tree, USER_NAME_ARGS).rstrip()
    user_email = runner(git_executable, work_tree, USER_EMAIL_ARGS).rstrip()

    return GitSnapshot(
        uncommitted_changes=bool(status.strip()),
        commit_hash=commit_hash,
        commit_date=commit_date,
        user_name=user_name,
        user_email=user_email,
    )
