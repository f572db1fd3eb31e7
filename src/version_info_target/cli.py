"""Typer-based CLI for wiring, querying, and building VersionInfo targets."""

from __future__ import annotations

import platform
import subprocess
from pathlib import Path

import typer

from version_info_target import __version__
from version_info_target.errors import BuildGraphError, ConfigurationError, QueryError
from version_info_target.git_info import find_git
from version_info_target.graph import BuildGraph, Target, expand_command
from version_info_target.logger_config import get_logger, setup_logging
from version_info_target.models import ProjectContext, ToolchainContext
from version_info_target.query import run_query
from version_info_target.query_script import parse_definitions
from version_info_target.wiring import add_version_info_target

app = typer.Typer(add_completion=False, help="vinfo: compile project and git metadata into a static library")

logger = get_logger(__name__)

DEFAULT_GRAPH_PATH = Path("build/version-info-graph.json")
DEFAULT_BINARY_DIR = Path("build")

GraphOption = typer.Option(DEFAULT_GRAPH_PATH, "--graph", envvar="VINFO_GRAPH", help="Build graph manifest path")


def _echo_step(step: int, total: int, message: str) -> None:
    """Print a normalized progress step line."""
    typer.echo(f"[{step}/{total}] {message}")


def _load_graph(graph_path: Path) -> BuildGraph:
    """Load the manifest or fail with a CLI-friendly message."""
    if not graph_path.exists():
        raise typer.BadParameter(f"Build graph not found: {graph_path}. Run init first.")
    try:
        return BuildGraph.load(graph_path)
    except BuildGraphError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", envvar="VINFO_LOG_LEVEL", help="Logging level"),
) -> None:
    """Configure logging for every command."""
    setup_logging(log_level)


@app.command("init")
def init(
    graph_path: Path = GraphOption,
    project_name: str = typer.Option(..., help="Ambient project name"),
    project_version: str = typer.Option("", help="Ambient project version"),
    binary_dir: Path = typer.Option(DEFAULT_BINARY_DIR, help="Directory receiving generated files"),
    c_compiler_id: str = typer.Option("", envvar="VINFO_C_COMPILER_ID", help="Resolved C compiler ID"),
    c_compiler_version: str = typer.Option("", envvar="VINFO_C_COMPILER_VERSION", help="Resolved C compiler version"),
    cxx_compiler_id: str = typer.Option("", envvar="VINFO_CXX_COMPILER_ID", help="Resolved C++ compiler ID"),
    cxx_compiler_version: str = typer.Option(
        "", envvar="VINFO_CXX_COMPILER_VERSION", help="Resolved C++ compiler version"
    ),
    system_processor: str = typer.Option(platform.machine(), help="Target processor architecture"),
) -> None:
    """Create a build graph manifest holding project and toolchain context."""
    graph = BuildGraph(
        project=ProjectContext(name=project_name, version=project_version),
        toolchain=ToolchainContext(
            c_compiler_id=c_compiler_id,
            c_compiler_version=c_compiler_version,
            cxx_compiler_id=cxx_compiler_id,
            cxx_compiler_version=cxx_compiler_version,
            system_processor=system_processor,
        ),
        binary_dir=binary_dir,
    )
    graph.save(graph_path)
    typer.echo(f"Build graph initialized: {graph_path}")


@app.command("declare")
def declare(
    name: str = typer.Argument(..., help="Target name"),
    kind: str = typer.Option("executable", help="executable, static_library or shared_library"),
    sources: list[Path] | None = typer.Option(None, "--source", help="Target source file"),
    graph_path: Path = GraphOption,
) -> None:
    """Register a user target so version-info libraries can link into it."""
    if kind not in ("executable", "static_library", "shared_library"):
        raise typer.BadParameter(f"Unsupported target kind: {kind}")
    graph = _load_graph(graph_path)
    try:
        graph.add_target(Target(name=name, kind=kind, sources=sources or []))
    except BuildGraphError as exc:
        raise typer.BadParameter(str(exc)) from exc
    graph.save(graph_path)
    typer.echo(f"Declared {kind} target: {name}")


@app.command(
    "configure",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def configure(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Unique name of the version-info library"),
    link_to: list[str] | None = typer.Option(None, "--link-to", help="Target linking the library"),
    namespace: list[str] | None = typer.Option(None, "--namespace", help="Namespace segment (repeatable)"),
    language: str | None = typer.Option(None, help="C or CXX (default CXX)"),
    git_work_tree: Path | None = typer.Option(None, help="Git work tree queried at build time"),
    project_name: str | None = typer.Option(None, help="Override the ambient project name"),
    project_version: str | None = typer.Option(None, help="Override the ambient project version"),
    graph_path: Path = GraphOption,
) -> None:
    """Add a VersionInfo library and its always-run query target."""
    _echo_step(1, 3, "Loading build graph")
    graph = _load_graph(graph_path)

    _echo_step(2, 3, f"Wiring version info target {name}")
    try:
        target = add_version_info_target(
            graph,
            name=name,
            link_to=link_to or [],
            namespace=namespace,
            language=language,
            git_work_tree=git_work_tree,
            project_name=project_name,
            project_version=project_version,
            unparsed_arguments=list(ctx.args),
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _echo_step(3, 3, "Saving build graph")
    graph.save(graph_path)
    typer.echo(
        "Configure complete. "
        f"library={target.library_target} query={target.query_target} header={target.artifacts.header}"
    )


@app.command("query")
def query(
    definitions: list[str] | None = typer.Option(None, "-D", "--define", help="KEY=VALUE parameter"),
) -> None:
    """Build-time step: query git and regenerate the VersionInfo files."""
    try:
        params = parse_definitions(definitions or [])
        header, source = run_query(params)
    except QueryError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"VersionInfo written: {header} {source}")


@app.command("build")
def build(
    targets: list[str] | None = typer.Argument(None, help="Targets to build (default: all)"),
    config: str = typer.Option("", "--config", help="Build configuration name, e.g. Release"),
    graph_path: Path = GraphOption,
) -> None:
    """Run custom target commands in dependency order."""
    graph = _load_graph(graph_path)
    try:
        order = graph.build_order(targets or None)
    except BuildGraphError as exc:
        raise typer.BadParameter(str(exc)) from exc

    total = len(order)
    for step, name in enumerate(order, start=1):
        target = graph.get_target(name)
        if target.kind != "custom":
            _echo_step(step, total, f"{name} ({target.kind}, {len(target.sources)} sources) ready")
            continue

        _echo_step(step, total, target.comment or f"Running {name}")
        proc = subprocess.run(expand_command(target.command, config), check=False)
        if proc.returncode != 0:
            logger.error("Custom target %s failed with exit code %s", name, proc.returncode)
            raise typer.Exit(code=proc.returncode)

    typer.echo(f"Build complete. targets={total} config={config or '<none>'}")


@app.command("show")
def show(graph_path: Path = GraphOption) -> None:
    """Print targets of the build graph."""
    graph = _load_graph(graph_path)
    typer.echo(f"Project: {graph.project.name} {graph.project.version}".rstrip())
    for target in graph.targets.values():
        typer.echo(f"- {target.name} [{target.kind}]")
        if target.dependencies:
            typer.echo(f"    after: {', '.join(target.dependencies)}")
        if target.link_libraries:
            typer.echo(f"    links: {', '.join(target.link_libraries)}")
        for byproduct in target.byproducts:
            typer.echo(f"    produces: {byproduct}")


@app.command("doctor")
def doctor(graph_path: Path = GraphOption) -> None:
    """Print local environment diagnostics used by the CLI."""
    typer.echo(f"vinfo {__version__}")
    git_executable = find_git()
    typer.echo(f"Git found: {bool(git_executable)} ({git_executable or 'not found'})")
    has_graph = graph_path.exists()
    typer.echo(f"Build graph exists: {has_graph} ({graph_path})")
    if has_graph:
        graph = _load_graph(graph_path)
        typer.echo(f"C compiler: {graph.toolchain.c_compiler_id or 'not found'}")
        typer.echo(f"C++ compiler: {graph.toolchain.cxx_compiler_id or 'not found'}")


if __name__ == "__main__":
    app()
