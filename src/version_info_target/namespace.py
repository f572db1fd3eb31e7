from __future__ import annotations

import re
from collections.abc import Sequence

from version_info_target.models import NamespaceSpec

DEFAULT_NAMESPACE = "VersionInfo"
IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_valid_identifier(name: str) -> bool:
    """Return ``True`` when ``name`` is usable as a C/C++ identifier."""
    return IDENTIFIER_RE.fullmatch(name) is not None


def compose_namespace(identifiers: Sequence[str]) -> NamespaceSpec:
    """Build the C prefix and the nested C++ scope strings for ``identifiers``.

    ``["Abc", "XyZ"]`` gives ``Abc_XyZ_`` for C and
    ``namespace Abc { namespace XyZ {`` / ``} /* namespace XyZ */ } /* namespace Abc */``
    / ``Abc::XyZ::`` for C++. An empty list falls back to ``DEFAULT_NAMESPACE``.
    """
    names = tuple(identifiers) or (DEFAULT_NAMESPACE,)
    root, *rest = names

    access_prefix = f"{root}_"
    opening = f"namespace {root} {{"
    closing = f"}} /* namespace {root} */"
    resolve = f"{root}::"

    for name in rest:
        access_prefix += f"{name}_"
        opening += f" namespace {name} {{"
        closing = f"}} /* namespace {name} */ " + closing
        resolve += f"{name}::"

    return NamespaceSpec(
        identifiers=names,
        access_prefix=access_prefix,
        scope_opening=opening,
        scope_closing=closing,
        scope_resolve=resolve,
    )
