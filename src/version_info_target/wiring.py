"""Configuration-time phase: wire a VersionInfo library into the build graph."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from version_info_target.git_info import GitRunner, find_git, run_git
from version_info_target.graph import CONFIG_PLACEHOLDER, BuildGraph
from version_info_target.models import (
    BuildArtifacts,
    GenerationRequest,
    NamespaceSpec,
    ProjectContext,
    QueryParameters,
    VersionInfoTarget,
    VersionSpec,
)
from version_info_target.namespace import compose_namespace
from version_info_target.query_script import build_query_command, emit_query_script
from version_info_target.renderer import file_extensions, template_paths
from version_info_target.validator import QUERY_TARGET_SUFFIX, validate_request
from version_info_target.version_spec import parse_version_spec

logger = logging.getLogger(__name__)

QUERY_SCRIPT_NAME = "VersionInfoQuery.py"
QUERY_COMMENT = "Querying project version information and writing VersionInfo files..."


def plan_artifacts(request: GenerationRequest, binary_dir: Path, templates_dir: Path | None = None) -> BuildArtifacts:
    """Compute every path owned by the target without touching the disk."""
    header_ext, source_ext = file_extensions(request.language)
    if templates_dir is None:
        header_template, source_template = template_paths(request.language)
    else:
        header_template, source_template = template_paths(request.language, templates_dir)

    workspace = Path(binary_dir).resolve() / request.name
    return BuildArtifacts(
        workspace=workspace,
        header=workspace / "include" / request.name / f"VersionInfo.{header_ext}",
        source=workspace / f"VersionInfo.{source_ext}",
        query_script=workspace / QUERY_SCRIPT_NAME,
        header_template=header_template,
        source_template=source_template,
    )


def build_query_parameters(
    request: GenerationRequest,
    version: VersionSpec,
    namespace: NamespaceSpec,
    artifacts: BuildArtifacts,
    graph: BuildGraph,
) -> QueryParameters:
    """Freeze every derived value the build-time phase needs."""
    compiler_id, compiler_version = graph.toolchain.compiler_for(request.language)
    return QueryParameters(
        target_name=request.name,
        language=request.language,
        project_name=request.project_name,
        project_version=version.full,
        project_version_major=version.major,
        project_version_minor=version.minor,
        project_version_patch=version.patch,
        project_version_tweak=version.tweak,
        namespace_access_prefix=namespace.access_prefix,
        namespace_scope_opening=namespace.scope_opening,
        namespace_scope_closing=namespace.scope_closing,
        namespace_scope_resolve=namespace.scope_resolve,
        header_template=artifacts.header_template,
        header_path=artifacts.header,
        source_template=artifacts.source_template,
        source_path=artifacts.source,
        git_work_tree=request.git_work_tree,
        git_executable=request.git_executable,
        compiler_id=compiler_id,
        compiler_version=compiler_version,
        system_processor=graph.toolchain.system_processor,
        build_type=CONFIG_PLACEHOLDER,
    )


def _touch_placeholder(path: Path) -> None:
    """Create ``path`` if missing without truncating existing content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8"):
        pass


def add_version_info_target(
    graph: BuildGraph,
    name: str | None,
    link_to: Sequence[str] = (),
    namespace: Sequence[str] | None = None,
    language: str | None = None,
    git_work_tree: str | Path | None = None,
    project_name: str | None = None,
    project_version: str | None = None,
    project: ProjectContext | None = None,
    templates_dir: Path | None = None,
    python_executable: str | None = None,
    git_finder: Callable[[], str | None] = find_git,
    git_runner: GitRunner = run_git,
    unparsed_arguments: Sequence[str] = (),
    **unparsed: object,
) -> VersionInfoTarget:
    """Add a static VersionInfo library and its always-run query target.

    Creates two targets in ``graph``:

    1. ``<name>_QueryVersionInfo``: runs the query script on every build and
       produces the header and source.
    2. ``<name>``: a static library compiling exactly those two files, ordered
       after the query target and exposing the header both as
       ``VersionInfo.<ext>`` and ``<name>/VersionInfo.<ext>``.

    Every ``link_to`` target is then privately linked to the library.

    Raises:
        ConfigurationError: If any argument is invalid; nothing is wired then.
    """
    logger.info("add_version_info_target('%s')", name)

    request = validate_request(
        graph,
        name=name,
        link_to=link_to,
        namespace=namespace,
        language=language,
        git_work_tree=git_work_tree,
        project_name=project_name,
        project_version=project_version,
        project=project,
        unparsed=[*unparsed_arguments, *(f"{key}={value}" for key, value in unparsed.items())],
        git_finder=git_finder,
        git_runner=git_runner,
    )
    version = parse_version_spec(request.project_version)
    namespace_spec = compose_namespace(request.namespace)
    artifacts = plan_artifacts(request, graph.binary_dir, templates_dir)
    params = build_query_parameters(request, version, namespace_spec, artifacts, graph)

    emit_query_script(artifacts.query_script)
    _touch_placeholder(artifacts.header)
    _touch_placeholder(artifacts.source)

    query_target = f"{request.name}{QUERY_TARGET_SUFFIX}"
    graph.add_custom_target(
        query_target,
        command=build_query_command(artifacts.query_script, params, python_executable),
        byproducts=[artifacts.header, artifacts.source],
        depends=[artifacts.header_template, artifacts.source_template, artifacts.query_script],
        comment=QUERY_COMMENT,
        always_run=True,
        replace=True,
    )

    graph.add_library(
        request.name,
        sources=[artifacts.header, artifacts.source],
        kind="static_library",
        linker_language=request.language,
        replace=True,
    )
    include_dirs = list(artifacts.include_directories)
    graph.target_include_directories(request.name, interface=include_dirs, private=include_dirs)
    graph.add_dependencies(request.name, query_target)

    for target in request.link_to:
        logger.info("  privately linking target %s to %s", target, request.name)
        graph.target_link_libraries(target, request.name)

    logger.info("add_version_info_target('%s') - success", request.name)
    return VersionInfoTarget(
        request=request,
        version=version,
        namespace=namespace_spec,
        artifacts=artifacts,
        query_target=query_target,
        library_target=request.name,
        parameters=params,
        linked_targets=request.link_to,
    )
