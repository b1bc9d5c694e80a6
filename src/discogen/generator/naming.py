"""Identifier derivation and collision-free name issuance.

Everything the generator names goes through this module:

* :func:`initial_cap` -- type names (``tasks.readonly`` -> ``TasksReadonly``).
* :func:`python_identifier` -- attribute, argument and method names
  (``maxResults`` -> ``max_results``, ``class`` -> ``class_``).
* :func:`scope_identifier` -- OAuth2 scope constants.
* :class:`NameAllocator` -- hands out names that are unique within one
  namespace.

Examples::

    >>> initial_cap("Task.links")
    'TaskLinks'
    >>> python_identifier("showDeleted")
    'show_deleted'
    >>> scope_identifier("https://www.googleapis.com/auth/tasks.readonly")
    'TASKS_READONLY_SCOPE'
"""

from __future__ import annotations

import keyword
import re
from typing import Iterable

from discogen.exceptions import ScopeURLError

SCOPE_PREFIX = "https://www.googleapis.com/auth/"
"""Every OAuth2 scope URL in a discovery document must start with this."""

_SEPARATORS = frozenset("-.$/")

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")

# Names that are legal identifiers but would shadow something a generated
# module relies on.
_SOFT_RESERVED = frozenset({"self", "cls", "_"})


class NameAllocator:
    """Issues names that are unique within a single namespace.

    :meth:`get` returns the preferred name the first time it is asked for.
    On a collision it appends a ``1`` to the last candidate tried and checks
    again, so repeated requests for ``"Foo"`` yield ``"Foo"``, ``"Foo1"``,
    ``"Foo11"``. The suffix is concatenated onto the previous attempt and
    never parsed or incremented.

    Distinct namespaces need distinct allocators: the generation pass owns
    one for module-level names and each call builder gets a fresh one for
    its setter parameters.

    Args:
        reserved: Names marked as used before the first :meth:`get`.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._used: set[str] = set(reserved)

    def get(self, preferred: str) -> str:
        """Return a free name based on *preferred* and mark it used."""
        name = preferred
        while name in self._used:
            name = f"{name}1"
        self._used.add(name)
        return name

    def is_used(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)


def depunct(ident: str, need_cap: bool) -> str:
    """Remove ``-``, ``.``, ``$`` and ``/`` from *ident*.

    The character following a removed separator is upper-cased, as is the
    first character when *need_cap* is true.
    """
    out: list[str] = []
    for ch in ident:
        if ch in _SEPARATORS:
            need_cap = True
            continue
        if need_cap:
            ch = ch.upper()
            need_cap = False
        out.append(ch)
    return "".join(out)


def initial_cap(ident: str) -> str:
    """Return *ident* with separators removed and a leading capital.

    Raises:
        ValueError: If *ident* is empty.
    """
    if not ident:
        raise ValueError("blank identifier")
    return depunct(ident, True)


def python_identifier(name: str) -> str:
    """Convert a native API name to a snake_case Python identifier.

    Applies, in order: CamelCase splitting, lowercasing, separator and
    invalid-character replacement, underscore collapsing, a ``_`` prefix
    for a leading digit, and a trailing ``_`` for keywords and names that
    would shadow ``self``.

    Example::

        >>> python_identifier("pageToken")
        'page_token'
        >>> python_identifier("X-Upload-Content-Type")
        'x_upload_content_type'
        >>> python_identifier("import")
        'import_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result) or keyword.issoftkeyword(result) or result in _SOFT_RESERVED:
        result = f"{result}_"
    return result


def scope_identifier(url: str) -> str:
    """Derive the module constant name for an OAuth2 scope URL.

    Raises:
        ScopeURLError: If *url* does not start with :data:`SCOPE_PREFIX`.
    """
    if not url.startswith(SCOPE_PREFIX):
        raise ScopeURLError(url, SCOPE_PREFIX)
    rest = url[len(SCOPE_PREFIX):]
    if not rest:
        raise ScopeURLError(url, SCOPE_PREFIX)
    return python_identifier(initial_cap(rest)).upper() + "_SCOPE"
