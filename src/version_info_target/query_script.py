"""Emit the build-time query script and translate its named parameters."""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import ValidationError

from version_info_target.errors import QueryError
from version_info_target.models import QueryParameters

QUERY_SCRIPT = '''\
#!/usr/bin/env python3
# This file is auto-generated by version-info-target, do not edit.
#
# It writes the VersionInfo header and source of one library target with
# project, toolchain and system information, plus git repository state
# (dirty status, commit hash, commit date, committer name and email) when a
# work tree was configured.
#
# It is not meant to be imported. The build graph runs it as the command of
# an always-run custom target that every VersionInfo library depends on, so
# the metadata is captured right before the library is compiled. All values
# arrive as -D KEY=VALUE arguments.
import sys

from version_info_target.cli import app

if __name__ == "__main__":
    app(args=["query", *sys.argv[1:]], prog_name="VersionInfoQuery")
'''


def emit_query_script(path: Path) -> Path:
    """Write the query script; its content is the same for every target."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(QUERY_SCRIPT, encoding="utf-8")
    return path


def parameters_to_definitions(params: QueryParameters) -> list[str]:
    """Flatten ``params`` into ``KEY=VALUE`` strings, skipping unset values."""
    definitions: list[str] = []
    for field_name, value in params.model_dump().items():
        if value is None:
            continue
        definitions.append(f"{field_name.upper()}={value}")
    return definitions


def build_query_command(
    script: Path,
    params: QueryParameters,
    python_executable: str | None = None,
) -> list[str]:
    """Return the command line that runs ``script`` with every parameter."""
    command = [python_executable or sys.executable, str(script)]
    for definition in parameters_to_definitions(params):
        command.extend(["-D", definition])
    return command


def parse_definitions(definitions: list[str]) -> QueryParameters:
    """Parse ``KEY=VALUE`` strings back into a ``QueryParameters`` record.

    Raises:
        QueryError: If a definition is malformed or repeated, or the record is
            incomplete.
    """
    values: dict[str, str] = {}
    for definition in definitions:
        key, sep, value = definition.partition("=")
        if not sep or not key.strip():
            raise QueryError(f"Malformed parameter (expected KEY=VALUE): {definition}")
        field_name = key.strip().lower()
        if field_name in values:
            raise QueryError(f"Duplicate parameter: {key.strip()}")
        values[field_name] = value

    try:
        return QueryParameters.model_validate(values)
    except ValidationError as exc:
        raise QueryError(f"Invalid query parameters: {exc}") from exc
