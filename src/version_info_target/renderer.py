"""Render VersionInfo header/source templates from build-time parameters."""

from __future__ import annotations

import re
from pathlib import Path

from version_info_target.errors import QueryError
from version_info_target.models import GitSnapshot, Language, QueryParameters, RenderedVersionInfo

TEMPLATES_DIR = Path(__file__).with_name("templates")

FILE_EXTENSIONS: dict[str, tuple[str, str]] = {
    "C": ("h", "c"),
    "CXX": ("hpp", "cpp"),
}

AUTOGENERATED_FILE_WARNING = "This file was autogenerated by version-info-target, do not edit"
UNCOMMITTED_CHANGES_MARKER = " (uncommitted changes)"

_NON_IDENTIFIER_RE = re.compile(r"[^A-Za-z0-9_]")


def file_extensions(language: Language) -> tuple[str, str]:
    """Return ``(header_ext, source_ext)`` for ``language``."""
    return FILE_EXTENSIONS[language]


def template_paths(language: Language, templates_dir: Path = TEMPLATES_DIR) -> tuple[Path, Path]:
    """Return the bundled ``(header_template, source_template)`` for ``language``."""
    header_ext, source_ext = file_extensions(language)
    return (
        templates_dir / f"VersionInfo.{header_ext}.in",
        templates_dir / f"VersionInfo.{source_ext}.in",
    )


def c_string_literal(value: str) -> str:
    """Quote ``value`` as a C/C++ string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def compose_version_summary(params: QueryParameters, snapshot: GitSnapshot | None) -> list[str]:
    """Build the human-readable lines shown by a ``--version`` style output."""
    version = params.project_version
    if params.build_type:
        version = f"{version}-{params.build_type}" if version else params.build_type

    compiler = " ".join(part for part in (params.compiler_id, params.compiler_version) if part)
    lines = [
        " ".join(part for part in (params.project_name, version) if part),
        f"Compiler: {compiler}",
        f"Architecture: {params.system_processor}",
    ]

    if snapshot is not None:
        marker = UNCOMMITTED_CHANGES_MARKER if snapshot.uncommitted_changes else ""
        lines.extend(
            [
                f"CommitHash: {snapshot.commit_hash}{marker}",
                f"CommitUser: {snapshot.user_name} ({snapshot.user_email})",
                f"CommitDate: {snapshot.commit_date}",
            ]
        )

    return lines


def _format_summary_literal(lines: list[str]) -> str:
    """Format summary lines as adjacent string literals, one per source line."""
    literals = [c_string_literal(lines[0])]
    literals.extend(c_string_literal(f"\n{line}") for line in lines[1:])
    return "\n    ".join(literals)


def _git_declarations(params: QueryParameters) -> str:
    if params.language == "C":
        prefix = params.namespace_access_prefix
        lines = [
            f"extern const int         {prefix}GitUncommittedChanges; /* 0 - false, 1 - true */",
            f"extern const char* const {prefix}GitCommitHash;",
            f"extern const char* const {prefix}GitCommitDate;",
            f"extern const char* const {prefix}GitUserName;",
            f"extern const char* const {prefix}GitUserEmail;",
        ]
    else:
        lines = [
            "extern const bool        GitUncommittedChanges;",
            "extern const char* const GitCommitHash;",
            "extern const char* const GitCommitDate;",
            "extern const char* const GitUserName;",
            "extern const char* const GitUserEmail;",
        ]
    return "\n" + "\n".join(lines) + "\n"


def _git_definitions(params: QueryParameters, snapshot: GitSnapshot) -> str:
    if params.language == "C":
        prefix = params.namespace_access_prefix
        flag_type, flag_value = "int        ", "1" if snapshot.uncommitted_changes else "0"
    else:
        prefix = params.namespace_scope_resolve
        flag_type, flag_value = "bool       ", "true" if snapshot.uncommitted_changes else "false"

    lines = [
        f"const {flag_type} {prefix}GitUncommittedChanges = {flag_value};",
        f"const char* const {prefix}GitCommitHash = {c_string_literal(snapshot.commit_hash)};",
        f"const char* const {prefix}GitCommitDate = {c_string_literal(snapshot.commit_date)};",
        f"const char* const {prefix}GitUserName   = {c_string_literal(snapshot.user_name)};",
        f"const char* const {prefix}GitUserEmail  = {c_string_literal(snapshot.user_email)};",
    ]
    return "\n" + "\n".join(lines) + "\n"


def _include_guard(target_name: str) -> str:
    return f"{_NON_IDENTIFIER_RE.sub('_', target_name).upper()}_VERSIONINFO_H"


def build_replacements(params: QueryParameters, snapshot: GitSnapshot | None) -> dict[str, str]:
    """Map every ``{{TOKEN}}`` of the templates to its substitution text.

    The git blocks are whole fragments: without a snapshot they are empty and
    no git symbol is declared or defined at all.
    """
    if params.language == "C":
        warning = f"/* {AUTOGENERATED_FILE_WARNING} */"
    else:
        warning = f"// {AUTOGENERATED_FILE_WARNING}"

    return {
        "AUTOGENERATED_FILE_WARNING": warning,
        "INCLUDE_GUARD": _include_guard(params.target_name),
        "NAMESPACE_ACCESS_PREFIX": params.namespace_access_prefix,
        "NAMESPACE_SCOPE_OPENING": params.namespace_scope_opening,
        "NAMESPACE_SCOPE_CLOSING": params.namespace_scope_closing,
        "NAMESPACE_SCOPE_RESOLVE": params.namespace_scope_resolve,
        "PROJECT_NAME": c_string_literal(params.project_name),
        "PROJECT_VERSION": c_string_literal(params.project_version),
        "PROJECT_VERSION_MAJOR": c_string_literal(params.project_version_major),
        "PROJECT_VERSION_MINOR": c_string_literal(params.project_version_minor),
        "PROJECT_VERSION_PATCH": c_string_literal(params.project_version_patch),
        "PROJECT_VERSION_TWEAK": c_string_literal(params.project_version_tweak),
        "COMPILER_ID": c_string_literal(params.compiler_id),
        "COMPILER_VERSION": c_string_literal(params.compiler_version),
        "SYSTEM_PROCESSOR": c_string_literal(params.system_processor),
        "BUILD_TYPE": c_string_literal(params.build_type),
        "VERSION_SUMMARY": _format_summary_literal(compose_version_summary(params, snapshot)),
        "GIT_VARIABLE_DECLARATIONS": _git_declarations(params) if snapshot is not None else "",
        "GIT_VARIABLE_DEFINITIONS": _git_definitions(params, snapshot) if snapshot is not None else "",
    }


def render_version_info(params: QueryParameters, snapshot: GitSnapshot | None) -> RenderedVersionInfo:
    """Render header and source text fully in memory.

    Raises:
        QueryError: If a template file cannot be read.
    """
    replacements = build_replacements(params, snapshot)
    return RenderedVersionInfo(
        header=_render_template(_load_template(params.header_template), replacements),
        source=_render_template(_load_template(params.source_template), replacements),
    )


def write_version_info(params: QueryParameters, rendered: RenderedVersionInfo) -> tuple[Path, Path]:
    """Overwrite the header and source outputs with rendered content.

    Both files are staged next to their destinations first and only moved
    into place once both were written, so a failed write leaves the previous
    pair untouched.

    Raises:
        QueryError: If either output cannot be written.
    """
    outputs = [(params.header_path, rendered.header), (params.source_path, rendered.source)]
    staged: list[tuple[Path, Path]] = []
    try:
        for path, text in outputs:
            path.parent.mkdir(parents=True, exist_ok=True)
            staging = path.with_name(f".{path.name}.tmp")
            staged.append((staging, path))
            staging.write_text(text, encoding="utf-8")
        for staging, path in staged:
            staging.replace(path)
    except OSError as exc:
        for staging, _ in staged:
            staging.unlink(missing_ok=True)
        raise QueryError(f"Unable to write VersionInfo files for {params.target_name}: {exc}") from exc
    return params.header_path, params.source_path


def _render_template(template: str, replacements: dict[str, str]) -> str:
    """Replace ``{{TOKEN}}`` placeholders in a template string."""
    rendered = template
    for token, value in replacements.items():
        rendered = rendered.replace(f"{{{{{token}}}}}", value)
    return rendered


def _load_template(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise QueryError(f"Unable to read template {path}: {exc}") from exc
