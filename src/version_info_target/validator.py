"""Configuration-time validation of ``add_version_info_target`` arguments."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from version_info_target.errors import ConfigurationError
from version_info_target.git_info import GitRunner, find_git, is_git_repository, run_git
from version_info_target.graph import BuildGraph
from version_info_target.models import GenerationRequest, Language, ProjectContext
from version_info_target.namespace import is_valid_identifier

logger = logging.getLogger(__name__)

LANGUAGE_ALIASES: dict[str, Language] = {"C": "C", "CXX": "CXX", "C++": "CXX"}
QUERY_TARGET_SUFFIX = "_QueryVersionInfo"


def is_version_info_library(graph: BuildGraph, name: str) -> bool:
    """Return ``True`` when ``name`` is a library wired by an earlier call."""
    target = graph.get_target(name)
    return target.kind == "static_library" and f"{name}{QUERY_TARGET_SUFFIX}" in target.dependencies


def normalize_language(language: str | None) -> Language:
    """Map a language tag to ``C`` or ``CXX``; ``None`` selects ``CXX``."""
    if not language:
        return "CXX"
    try:
        return LANGUAGE_ALIASES[language.strip().upper()]
    except KeyError:
        raise ConfigurationError("Parameter LANGUAGE must be one of: C or CXX") from None


def validate_request(
    graph: BuildGraph,
    name: str | None,
    link_to: Sequence[str] = (),
    namespace: Sequence[str] | None = None,
    language: str | None = None,
    git_work_tree: str | Path | None = None,
    project_name: str | None = None,
    project_version: str | None = None,
    project: ProjectContext | None = None,
    unparsed: Iterable[str] = (),
    git_finder: Callable[[], str | None] = find_git,
    git_runner: GitRunner = run_git,
) -> GenerationRequest:
    """Check every argument and return an immutable ``GenerationRequest``.

    ``project`` supplies the fallback name and version; it defaults to the
    graph's project context. Re-using the name of a library wired by an
    earlier call and any unparsed argument only produce warnings; any other
    existing target of that name is an error.

    Raises:
        ConfigurationError: On the first invalid argument.
    """
    for argument in unparsed:
        logger.warning("Unparsed argument: %s", argument)

    if not name:
        raise ConfigurationError("NAME parameter is required")

    if not is_valid_identifier(name):
        raise ConfigurationError(f"Provided NAME [{name}] isn't a valid identifier")

    if graph.has_target(name):
        if not is_version_info_library(graph, name):
            raise ConfigurationError(f"NAME [{name}] belongs to an existing target that is not a VersionInfo library")
        logger.warning("A target with this NAME[%s] already exists", name)

    identifiers = tuple(namespace or ())
    for identifier in identifiers:
        if not is_valid_identifier(identifier):
            raise ConfigurationError(f"Provided NAMESPACE [{identifier}] isn't valid in C/C++")

    for target in link_to:
        if not graph.has_target(target):
            raise ConfigurationError(f"LINK_TO parameter invalid: [{target}] isn't a target")

    work_tree: Path | None = None
    git_executable = ""
    if git_work_tree:
        work_tree = Path(git_work_tree).expanduser().resolve()
        if not work_tree.exists():
            raise ConfigurationError(f"Provided GIT_WORK_TREE does not exist: {git_work_tree}")
        git_executable = git_finder() or ""
        if not git_executable:
            raise ConfigurationError("Parameter GIT_WORK_TREE provided but Git not found")
        if not is_git_repository(work_tree, git_executable, runner=git_runner):
            raise ConfigurationError(f"Provided GIT_WORK_TREE is not a git repository: {git_work_tree}")

    selected = normalize_language(language)

    compiler_id, _ = graph.toolchain.compiler_for(selected)
    if not compiler_id:
        raise ConfigurationError(f"LANGUAGE {selected} specified but no {selected} compiler found")

    context = project or graph.project
    return GenerationRequest(
        name=name,
        link_to=tuple(link_to),
        namespace=identifiers,
        language=selected,
        git_work_tree=work_tree,
        git_executable=git_executable,
        project_name=project_name or context.name,
        project_version=project_version or context.version,
    )
