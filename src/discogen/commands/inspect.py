"""Inspect commands -- examine what a document would generate.

Provides the ``discogen inspect`` sub-command group with read-only commands
that run a generation pass without rendering or writing anything, then
show its results: schema records, call builders, and scope constants.
Useful for checking the names a document produces before generating it.
"""

from __future__ import annotations

from typing import Optional

import typer

from discogen.commands import abort
from discogen.exceptions import DiscogenError
from discogen.output import debug, get_output


inspect_app = typer.Typer(no_args_is_help=True)

_DOCUMENT_OPTION = typer.Option(
    ..., "--document", "-d", help="Discovery document (URL, file, or '-')."
)


def _build_api(source: str):  # noqa: ANN202
    """Load *source* and run the generation pass over it.

    Raises:
        typer.Exit: With the error's exit code when the document cannot be
            loaded or is malformed.
    """
    from discogen.cache import DocumentCache
    from discogen.config import get_cache_dir, resolve_config
    from discogen.generator.api import API
    from discogen.parser import load_document, parse_document

    try:
        config = resolve_config()
        with DocumentCache(get_cache_dir(), config.cache) as doc_cache:
            raw = load_document(source, cache=doc_cache)
        api = API(parse_document(raw)).build()
    except DiscogenError as exc:
        abort(exc)
    debug(f"Loaded {api.id} from {source}")
    return api


@inspect_app.command("schemas")
def inspect_schemas(source: str = _DOCUMENT_OPTION) -> None:
    """List every schema and the Python name it is generated as.

    Synthesized sub-schemas (inline objects, array elements) are included
    under their compound keys.

    Example::

        discogen inspect schemas --document tasks.json
    """
    api = _build_api(source)
    graph = api.type_graph
    rows: list[list[str]] = []
    for schema in graph.schemas():
        typ = schema.type
        if typ.is_struct:
            shape = f"record ({len(schema.properties())} fields)"
        elif typ.is_reference:
            shape = f"ref {typ.reference}"
        else:
            shape = graph.target_type(typ)
        rows.append([schema.api_name, schema.name, shape])

    get_output().print_table(
        ["Schema", "Name", "Shape"], rows, title=f"{api.title} -- Schemas ({len(rows)})"
    )


@inspect_app.command("methods")
def inspect_methods(
    source: str = _DOCUMENT_OPTION,
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="Only show methods of this resource."
    ),
) -> None:
    """List every method with its call builder and arguments.

    Example::

        discogen inspect methods --document tasks.json --resource tasks
    """
    api = _build_api(source)
    rows: list[list[str]] = []
    for method in api.methods():
        if resource is not None and (method.resource is None or method.resource.name != resource):
            continue
        args = ", ".join(f"{a.name}: {a.target_type}" for a in method.arguments())
        setters = ", ".join(method.setter_names()[p.name] for p in method.setter_params())
        rows.append([method.id, method.call_name, args or "-", setters or "-"])

    get_output().print_table(
        ["Method", "Call", "Arguments", "Options"],
        rows,
        title=f"{api.title} -- Methods ({len(rows)})",
    )


@inspect_app.command("scopes")
def inspect_scopes(source: str = _DOCUMENT_OPTION) -> None:
    """List the OAuth2 scopes and their generated constants.

    Example::

        discogen inspect scopes --document tasks.json
    """
    api = _build_api(source)
    rows = [[s.identifier, s.url, s.description or "-"] for s in api.scopes()]
    get_output().print_table(
        ["Constant", "URL", "Description"], rows, title=f"{api.title} -- Scopes ({len(rows)})"
    )
