"""Render a built :class:`~discogen.generator.api.API` as a Python module.

The emitter decides nothing about names or shapes; it reads them from the
generation pass and lays them out through the Jinja2 template
``templates/client.py.j2``:

1. Module docstring, API constants and one ``*_SCOPE`` constant per scope.
2. The root ``Service`` class and one service class per resource.
3. One pydantic record per struct schema, then subclasses for reference
   schemas, then ``list[...]`` aliases for array schemas.
4. One call-builder class per method.

The rendered text is parsed with :func:`ast.parse` before it is returned,
so a template or naming bug surfaces as a :class:`~discogen.exceptions.GenerateError`
instead of an unimportable module.
"""

from __future__ import annotations

import ast
import logging
import textwrap
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from discogen import __version__
from discogen.exceptions import GenerateError
from discogen.generator.api import API
from discogen.generator.methods import Method
from discogen.generator.types import Schema

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

COMMENT_WIDTH = 70
DOC_WIDTH = 72


class RenderError(GenerateError):
    """The rendered module is not valid Python.

    Attributes:
        source: The rendered text, kept so it can be written for diagnosis.
    """

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source


def render_module(api: API) -> str:
    """Render the client module for *api*.

    :meth:`API.build` is run first if it has not been.

    Raises:
        DocumentError: If the pass fails.
        RenderError: If the rendered text does not parse.
    """
    api.build()
    env = _create_jinja_env()
    template = env.get_template("client.py.j2")
    source = template.render(**_build_context(api))
    validate_source(source, f"{api.package}_gen.py")
    logger.debug("Rendered %s (%d bytes)", api.id, len(source))
    return source


def validate_source(source: str, filename: str = "<generated>") -> None:
    """Raise :class:`RenderError` unless *source* parses as Python."""
    try:
        ast.parse(source, filename=filename)
    except SyntaxError as exc:
        raise RenderError(
            f"generated module {filename} does not parse: {exc.msg} (line {exc.lineno})",
            source,
        ) from exc


# ---------------------------------------------------------------------------
# Jinja2 environment
# ---------------------------------------------------------------------------


def _create_jinja_env() -> Environment:
    """Create the environment for the module template.

    Autoescaping is disabled for ``.py.j2`` templates, which produce Python,
    not HTML.  ``pyrepr`` renders a value as a Python literal.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["pyrepr"] = repr
    env.filters["comment"] = comment
    env.filters["docstring"] = docstring
    return env


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def comment(text: str, indent: int = 0) -> str:
    """Format *text* as ``#`` comment lines wrapped at 70 columns."""
    pad = " " * indent
    lines: list[str] = []
    for paragraph in text.strip().splitlines():
        wrapped = textwrap.wrap(paragraph, COMMENT_WIDTH) or [""]
        lines.extend(f"{pad}# {line}".rstrip() for line in wrapped)
    return "\n".join(lines)


def docstring(text: str, indent: int = 0) -> str:
    """Format *text* as a triple-quoted docstring body at *indent*.

    Backslashes and quote runs are escaped so any description renders as a
    valid literal.
    """
    pad = " " * indent
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    width = max(DOC_WIDTH - indent, 40)
    paragraphs = []
    for para in text.split("\n\n"):
        # Indented paragraphs are literal blocks and keep their lines.
        if any(line.startswith(" ") for line in para.splitlines()):
            paragraphs.append(para)
        else:
            paragraphs.append(textwrap.fill(para, width))
    body = "\n\n".join(paragraphs)
    lines = body.splitlines()
    if len(lines) <= 1:
        return f'{pad}"""{body}"""'
    rest = "\n".join(f"{pad}{line}".rstrip() for line in lines[1:])
    return f'{pad}"""{lines[0]}\n{rest}\n{pad}"""'


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def _build_context(api: API) -> dict[str, Any]:
    records, subclasses, aliases = _schema_context(api)
    return {
        "version": __version__,
        "api": {
            "id": api.id,
            "name": api.name,
            "version": api.version,
            "title": api.title,
            "package": api.package,
            "documentation_link": api.document.documentation_link or "",
            "base_url": api.base_url,
            "data_wrapper": api.needs_data_wrapper,
        },
        "scopes": api.scopes(),
        "service": {
            "name": api.service_name,
            "resources": [
                {"attr": r.attr_name, "class_name": r.service_name}
                for r in api.resources()
            ],
            "methods": [_factory_context(m) for m in api.top_level_methods()],
        },
        "resources": [
            {
                "class_name": r.service_name,
                "name": r.name,
                "methods": [_factory_context(m) for m in r.methods()],
            }
            for r in api.resources()
        ],
        "records": records,
        "subclasses": subclasses,
        "aliases": aliases,
        "rebuild": [r["name"] for r in records] + [s["name"] for s in subclasses],
        "calls": [_call_context(m) for m in api.methods()],
    }


def _schema_context(api: API) -> tuple[list[dict], list[dict], list[dict]]:
    graph = api.type_graph
    records: list[dict] = []
    subclasses: list[dict] = []
    aliases: list[dict] = []
    for schema in graph.schemas():
        typ = schema.type
        if typ.is_struct:
            records.append(_record_context(schema))
        elif typ.is_reference:
            target = _final_struct(schema)
            if target is not None:
                subclasses.append({
                    "name": schema.name,
                    "base": target.name,
                    "description": schema.description,
                    "api_name": schema.api_name,
                })
            else:
                aliases.append({
                    "name": schema.name,
                    "annotation": graph.target_type(typ),
                    "api_name": schema.api_name,
                })
        else:
            aliases.append({
                "name": schema.name,
                "annotation": graph.target_type(typ),
                "api_name": schema.api_name,
            })
    return records, subclasses, aliases


def _final_struct(schema: Schema) -> Optional[Schema]:
    """Follow a chain of reference schemas to the struct schema it ends at."""
    graph = schema.graph
    seen = {schema.api_name}
    current = graph.reference_schema(schema.type)
    while current is not None and current.type.is_reference:
        if current.api_name in seen:
            return None
        seen.add(current.api_name)
        current = graph.reference_schema(current.type)
    if current is not None and current.type.is_struct:
        return current
    return None


def _record_context(schema: Schema) -> dict[str, Any]:
    graph = schema.graph
    return {
        "name": schema.name,
        "api_name": schema.api_name,
        "description": schema.description,
        "fields": [
            {
                "name": prop.field_name,
                "alias": prop.api_name,
                "annotation": graph.target_type(prop.type),
                "description": prop.description,
            }
            for prop in schema.properties()
        ],
    }


def _factory_context(method: Method) -> dict[str, Any]:
    args = method.arguments()
    return {
        "attr": method.attr_name,
        "call_name": method.call_name,
        "description": method.description,
        "params": [{"name": a.name, "annotation": a.target_type} for a in args],
        "arg_names": args.names(),
    }


def _setter_doc(method: Method, api_name: str, description: str) -> str:
    des = description.replace("Optional.", "", 1).strip()
    doc = f"Sets the optional parameter {api_name!r}"
    param = method.param(api_name)
    if param is not None and param.is_required:
        doc = f"Sets the required parameter {api_name!r}"
    return f"{doc}: {des}" if des else f"{doc}."


def _call_context(method: Method) -> dict[str, Any]:
    args = method.arguments()
    names = method.setter_names()
    body = args.body_arg()
    by_api = {a.api_name: a for a in args if a.location != "body"}
    return {
        "name": method.call_name,
        "id": method.id,
        "description": method.description,
        "http_method": method.http_method,
        "path": method.path,
        "params": [{"name": a.name, "annotation": a.target_type} for a in args],
        "arg_names": args.names(),
        "path_params": [
            {"api_name": a.api_name, "arg": a.name} for a in args.for_location("path")
        ],
        "query": [
            {"api_name": p.name, "arg": by_api[p.name].name}
            for p in method.required_query_params() if p.name in by_api
        ],
        "repeated_query": [
            {"api_name": p.name, "arg": by_api[p.name].name}
            for p in method.required_repeated_query_params() if p.name in by_api
        ],
        "setters": [
            {
                "name": names[p.name],
                "api_name": p.name,
                "annotation": p.target_type(),
                "doc": _setter_doc(method, p.name, p.description),
            }
            for p in method.setter_params()
        ],
        "body": body.name if body else None,
        "response": method.response_type(),
        "media": method.supports_media(),
        "media_path": method.media_path(),
    }
