"""Pydantic models shared across configuration, build-time and graph layers."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Language = Literal["C", "CXX"]


class ProjectContext(BaseModel):
    """Ambient project values used when a request does not override them."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = ""


class ToolchainContext(BaseModel):
    """Compiler and platform strings already resolved by the host build system."""

    model_config = ConfigDict(frozen=True)

    c_compiler_id: str = ""
    c_compiler_version: str = ""
    cxx_compiler_id: str = ""
    cxx_compiler_version: str = ""
    system_processor: str = ""

    def compiler_for(self, language: Language) -> tuple[str, str]:
        """Return ``(compiler_id, compiler_version)`` for ``language``."""
        if language == "C":
            return self.c_compiler_id, self.c_compiler_version
        return self.cxx_compiler_id, self.cxx_compiler_version


class GenerationRequest(BaseModel):
    """Validated input of one ``add_version_info_target`` call."""

    model_config = ConfigDict(frozen=True)

    name: str
    link_to: tuple[str, ...] = ()
    namespace: tuple[str, ...] = ()
    language: Language = "CXX"
    git_work_tree: Path | None = None
    git_executable: str = ""
    project_name: str
    project_version: str


class VersionSpec(BaseModel):
    """Version components; absent trailing components are empty strings."""

    model_config = ConfigDict(frozen=True)

    full: str = ""
    major: str = ""
    minor: str = ""
    patch: str = ""
    tweak: str = ""


class NamespaceSpec(BaseModel):
    """Identifier-scoping strings for both the C and the C++ naming schemes."""

    model_config = ConfigDict(frozen=True)

    identifiers: tuple[str, ...]
    access_prefix: str
    scope_opening: str
    scope_closing: str
    scope_resolve: str


class GitSnapshot(BaseModel):
    """Repository state observed at build time."""

    model_config = ConfigDict(frozen=True)

    uncommitted_changes: bool
    commit_hash: str
    commit_date: str
    user_name: str
    user_email: str


class BuildArtifacts(BaseModel):
    """Files owned by one version-info target."""

    model_config = ConfigDict(frozen=True)

    workspace: Path
    header: Path
    source: Path
    query_script: Path
    header_template: Path
    source_template: Path

    @property
    def include_directories(self) -> tuple[Path, Path]:
        """Both include roots: ``<ws>/include`` and ``<ws>/include/<name>``."""
        return self.header.parent.parent, self.header.parent


class QueryParameters(BaseModel):
    """Fully resolved record handed from configuration time to build time."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_name: str
    language: Language
    project_name: str
    project_version: str = ""
    project_version_major: str = ""
    project_version_minor: str = ""
    project_version_patch: str = ""
    project_version_tweak: str = ""
    namespace_access_prefix: str
    namespace_scope_opening: str
    namespace_scope_closing: str
    namespace_scope_resolve: str
    header_template: Path
    header_path: Path
    source_template: Path
    source_path: Path
    git_work_tree: Path | None = None
    git_executable: str = ""
    compiler_id: str = ""
    compiler_version: str = ""
    system_processor: str = ""
    build_type: str = ""


class VersionInfoTarget(BaseModel):
    """Result of wiring one version-info library into the build graph."""

    model_config = ConfigDict(frozen=True)

    request: GenerationRequest
    version: VersionSpec
    namespace: NamespaceSpec
    artifacts: BuildArtifacts
    query_target: str
    library_target: str
    parameters: QueryParameters
    linked_targets: tuple[str, ...] = Field(default_factory=tuple)


class RenderedVersionInfo(BaseModel):
    """Complete header and source text, rendered before anything is written."""

    model_config = ConfigDict(frozen=True)

    header: str
    source: str
