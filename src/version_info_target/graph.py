"""Minimal persisted build graph standing in for the host build system."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from version_info_target.errors import BuildGraphError
from version_info_target.models import ProjectContext, ToolchainContext

TargetKind = Literal["executable", "static_library", "shared_library", "custom"]

CONFIG_PLACEHOLDER = "$<CONFIG>"


class Target(BaseModel):
    """One named node of the build graph."""

    name: str
    kind: TargetKind
    sources: list[Path] = Field(default_factory=list)
    command: list[str] = Field(default_factory=list)
    byproducts: list[Path] = Field(default_factory=list)
    depends: list[Path] = Field(default_factory=list)
    comment: str = ""
    always_run: bool = False
    dependencies: list[str] = Field(default_factory=list)
    interface_include_directories: list[Path] = Field(default_factory=list)
    private_include_directories: list[Path] = Field(default_factory=list)
    link_libraries: list[str] = Field(default_factory=list)
    linker_language: str = ""


class BuildGraph(BaseModel):
    """Targets plus the ambient project and toolchain context they build in."""

    project: ProjectContext = Field(default_factory=ProjectContext)
    toolchain: ToolchainContext = Field(default_factory=ToolchainContext)
    binary_dir: Path = Path("build")
    targets: dict[str, Target] = Field(default_factory=dict)

    def has_target(self, name: str) -> bool:
        return name in self.targets

    def get_target(self, name: str) -> Target:
        try:
            return self.targets[name]
        except KeyError:
            raise BuildGraphError(f"Unknown target: {name}") from None

    def add_target(self, target: Target, replace: bool = False) -> Target:
        """Register ``target``; an existing name is only overwritten with ``replace``."""
        if target.name in self.targets and not replace:
            raise BuildGraphError(f"Target already exists: {target.name}")
        self.targets[target.name] = target
        return target

    def add_custom_target(
        self,
        name: str,
        command: list[str],
        byproducts: list[Path],
        depends: list[Path],
        comment: str = "",
        always_run: bool = True,
        replace: bool = False,
    ) -> Target:
        return self.add_target(
            Target(
                name=name,
                kind="custom",
                command=command,
                byproducts=byproducts,
                depends=depends,
                comment=comment,
                always_run=always_run,
            ),
            replace=replace,
        )

    def add_library(
        self,
        name: str,
        sources: list[Path],
        kind: TargetKind = "static_library",
        linker_language: str = "",
        replace: bool = False,
    ) -> Target:
        return self.add_target(
            Target(name=name, kind=kind, sources=sources, linker_language=linker_language),
            replace=replace,
        )

    def add_dependencies(self, name: str, *dependencies: str) -> None:
        """Add ordering edges: every dependency is built before ``name``."""
        target = self.get_target(name)
        for dependency in dependencies:
            self.get_target(dependency)
            if dependency not in target.dependencies:
                target.dependencies.append(dependency)

    def target_include_directories(
        self,
        name: str,
        interface: list[Path] | None = None,
        private: list[Path] | None = None,
    ) -> None:
        target = self.get_target(name)
        for directory in interface or []:
            if directory not in target.interface_include_directories:
                target.interface_include_directories.append(directory)
        for directory in private or []:
            if directory not in target.private_include_directories:
                target.private_include_directories.append(directory)

    def target_link_libraries(self, name: str, *libraries: str) -> None:
        """Privately link ``libraries`` into ``name``."""
        target = self.get_target(name)
        for library in libraries:
            self.get_target(library)
            if library not in target.link_libraries:
                target.link_libraries.append(library)

    def build_order(self, names: list[str] | None = None) -> list[str]:
        """Return targets so that ordering and link dependencies come first.

        Raises:
            BuildGraphError: On unknown targets or dependency cycles.
        """
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = " -> ".join([*visiting[visiting.index(name):], name])
                raise BuildGraphError(f"Dependency cycle: {cycle}")
            target = self.get_target(name)
            visiting.append(name)
            for dependency in [*target.dependencies, *target.link_libraries]:
                visit(dependency)
            visiting.pop()
            done.add(name)
            order.append(name)

        for name in names if names is not None else list(self.targets):
            visit(name)
        return order

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> BuildGraph:
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise BuildGraphError(f"Unable to read build graph {path}: {exc}") from exc
        except ValidationError as exc:
            raise BuildGraphError(f"Invalid build graph {path}: {exc}") from exc


def expand_command(command: list[str], config: str) -> list[str]:
    """Resolve the build-configuration placeholder in a custom command."""
    return [part.replace(CONFIG_PLACEHOLDER, config) for part in command]
