from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from version_info_target.errors import GitQueryError
from version_info_target.graph import BuildGraph, Target
from version_info_target.models import ProjectContext, QueryParameters, ToolchainContext
from version_info_target.renderer import template_paths

FAKE_HASH = "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture
def toolchain() -> ToolchainContext:
    return ToolchainContext(
        c_compiler_id="GNU",
        c_compiler_version="13.2.0",
        cxx_compiler_id="GNU",
        cxx_compiler_version="13.2.0",
        system_processor="x86_64",
    )


@pytest.fixture
def graph(tmp_path, toolchain) -> BuildGraph:
    graph = BuildGraph(
        project=ProjectContext(name="AmbientProject", version="4.5.6"),
        toolchain=toolchain,
        binary_dir=tmp_path / "build",
    )
    graph.add_library("core", sources=[tmp_path / "core.cpp"])
    graph.add_target(Target(name="app", kind="executable", sources=[tmp_path / "main.cpp"]))
    return graph


@pytest.fixture
def make_git_runner() -> Callable[..., Callable[[str, Path, list[str]], str]]:
    """Build a fake git runner returning canned output per subcommand."""

    def factory(status: str = "", fail_on: str | None = None, calls: list[list[str]] | None = None):
        outputs = {
            "status": status,
            "rev-parse": f"{FAKE_HASH}\n",
            "--format=%cd": "Sat Jan 3 10:00:00 2026 +0000\n",
            "--format=%cn": "Alice Example\n",
            "--format=%ce": "alice@example.com\n",
        }

        def runner(git_executable: str, work_tree: Path, args: list[str]) -> str:
            if calls is not None:
                calls.append(list(args))
            key = args[0] if args[0] in ("status", "rev-parse") else args[2]
            if key == fail_on:
                raise GitQueryError(f"git command failed: {key}")
            return outputs[key]

        return runner

    return factory


@pytest.fixture
def make_params(tmp_path) -> Callable[..., QueryParameters]:
    """Build ``QueryParameters`` for the bundled templates of a language."""

    def factory(language: str = "CXX", **overrides) -> QueryParameters:
        header_template, source_template = template_paths(language)
        header_ext, source_ext = ("hpp", "cpp") if language == "CXX" else ("h", "c")
        values = {
            "target_name": "VInfoCPP",
            "language": language,
            "project_name": "VInfoCPP",
            "project_version": "1.2.3",
            "project_version_major": "1",
            "project_version_minor": "2",
            "project_version_patch": "3",
            "project_version_tweak": "",
            "namespace_access_prefix": "QrX_WdZ_",
            "namespace_scope_opening": "namespace QrX { namespace WdZ {",
            "namespace_scope_closing": "} /* namespace WdZ */ } /* namespace QrX */",
            "namespace_scope_resolve": "QrX::WdZ::",
            "header_template": header_template,
            "header_path": tmp_path / "out" / "include" / "VInfoCPP" / f"VersionInfo.{header_ext}",
            "source_template": source_template,
            "source_path": tmp_path / "out" / f"VersionInfo.{source_ext}",
            "compiler_id": "GNU",
            "compiler_version": "13.2.0",
            "system_processor": "x86_64",
            "build_type": "Release",
        }
        values.update(overrides)
        return QueryParameters(**values)

    return factory


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)


@pytest.fixture
def git_repo(tmp_path) -> Path:
    """A real repository with one commit of ``tracked.txt``."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "--quiet")
    _git(repo, "config", "user.name", "Alice Example")
    _git(repo, "config", "user.email", "alice@example.com")
    _git(repo, "config", "commit.gpgsign", "false")
    (repo / "tracked.txt").write_text("one\n", encoding="utf-8")
    _git(repo, "add", "tracked.txt")
    _git(repo, "commit", "--quiet", "-m", "initial")
    return repo
