"""Resolve a discovery document's schemas into a flat graph of named types.

A discovery document only names its top-level schemas.  Objects nested
inside properties, and objects used as array elements, are anonymous; to
emit them as standalone records the :class:`TypeGraph` synthesizes a key
for each one from its structural position:

* ``"<parent>.<property>"`` for an object property, an array-of-object
  property, or an array-of-array-of-object property (the innermost object
  is registered; the intermediate array gets no name of its own);
* ``"<parent>.Item"`` for an array schema whose elements are objects.

Every schema's display name is issued once by the pass's
:class:`~discogen.generator.naming.NameAllocator` and memoized.

Resolution to a Python annotation is lazy and memoized per :class:`Type`.
A ``$ref`` to an object schema resolves to that schema's *name*; it never
descends into the referenced properties, so self-referential and mutually
referential schemas resolve without recursion.
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping, Optional

from pydantic import BaseModel

from discogen.exceptions import (
    DuplicateSchemaError,
    UnresolvedReferenceError,
    UnsupportedTypeError,
)
from discogen.generator.naming import NameAllocator, initial_cap, python_identifier
from discogen.models import JsonSchema

logger = logging.getLogger(__name__)

# Names a record field may not take: they shadow pydantic's BaseModel API,
# the runtime ``Record`` helpers, or the builtins used in annotations.
RECORD_RESERVED_FIELDS = frozenset(
    {name for name in dir(BaseModel) if not name.startswith("_")}
    | {"bool", "str", "float", "int", "list", "dict", "to_wire"}
)


# ---------------------------------------------------------------------------
# Primitive conversion
# ---------------------------------------------------------------------------


def simple_type(api_type: Optional[str], fmt: Optional[str] = None) -> Optional[str]:
    """Map a primitive discovery type to a Python annotation.

    Strings carrying an ``int64``/``uint64``/``int32``/``uint32`` format
    are integers on the wire and map to ``int``.  Returns ``None`` for
    anything that is not a primitive (``object``, ``array``, ``$ref``).

    Example::

        >>> simple_type("string", "int64")
        'int'
        >>> simple_type("number")
        'float'
        >>> simple_type("object") is None
        True
    """
    if api_type == "boolean":
        return "bool"
    if api_type == "string":
        if fmt in ("int64", "uint64", "int32", "uint32"):
            return "int"
        return "str"
    if api_type == "number":
        return "float"
    if api_type == "integer":
        return "int"
    if api_type == "any":
        return "Any"
    return None


# ---------------------------------------------------------------------------
# Type / Property / Schema
# ---------------------------------------------------------------------------


class Type:
    """The shape of one schema node.

    Instances are only created through :meth:`TypeGraph.type_of`, which
    returns the same object for the same node.  When the node is an
    anonymous (or top-level) object registered as a :class:`Schema`,
    :attr:`schema_key` records that association.
    """

    def __init__(self, graph: TypeGraph, node: JsonSchema, path: str) -> None:
        self.graph = graph
        self.node = node
        self.path = path
        self.schema_key: Optional[str] = None

    def __repr__(self) -> str:
        return f"Type(path={self.path!r}, type={self.api_type!r}, ref={self.reference!r})"

    @property
    def api_type(self) -> Optional[str]:
        """The declared ``type``; ``None`` on reference types."""
        return self.node.type

    @property
    def format(self) -> Optional[str]:
        return self.node.format

    @property
    def reference(self) -> Optional[str]:
        return self.node.ref or None

    @property
    def is_simple(self) -> bool:
        return simple_type(self.api_type, self.format) is not None

    @property
    def is_struct(self) -> bool:
        return self.api_type == "object"

    @property
    def is_reference(self) -> bool:
        return self.reference is not None

    @property
    def is_array(self) -> bool:
        return self.api_type == "array"

    def element(self) -> Type:
        """Return the element type of an array.

        Raises:
            UnsupportedTypeError: If the array declares no ``items``.
        """
        if not self.is_array:
            raise TypeError(f"{self!r} is not an array type")
        if self.node.items is None:
            raise UnsupportedTypeError(
                "array type is missing its 'items' key", self.path, self.node
            )
        return self.graph.type_of(self.node.items, f"{self.path}.items")


class Property:
    """A named field of a struct-shaped :class:`Schema`.

    Attributes:
        schema: The owning schema.
        api_name: The native property name, used as the wire alias.
        field_name: The Python attribute name, unique within the record.
    """

    def __init__(self, schema: Schema, api_name: str, node: JsonSchema, field_name: str) -> None:
        self.schema = schema
        self.api_name = api_name
        self.node = node
        self.field_name = field_name
        self.type = schema.graph.type_of(node, f"{schema.path}.properties.{api_name}")

    def __repr__(self) -> str:
        return f"Property({self.schema.api_name}.{self.api_name})"

    @property
    def description(self) -> str:
        return self.node.description or ""


class Schema:
    """A named type definition, explicit or synthesized."""

    def __init__(self, graph: TypeGraph, api_name: str, node: JsonSchema, path: str) -> None:
        self.graph = graph
        self.api_name = api_name
        self.node = node
        self.path = path
        self.type = graph.type_of(node, path)
        self._properties: Optional[list[Property]] = None

    def __repr__(self) -> str:
        return f"Schema({self.api_name!r})"

    @property
    def name(self) -> str:
        """The display name; issued on first access."""
        return self.graph.name_of(self)

    @property
    def description(self) -> str:
        return self.node.description or ""

    def properties(self) -> list[Property]:
        """Return this struct's properties sorted by native name.

        Field names are Python identifiers deduplicated within the record.
        """
        if not self.type.is_struct:
            raise TypeError(f"{self!r} is not an object schema")
        if self._properties is None:
            fields = NameAllocator(RECORD_RESERVED_FIELDS)
            self._properties = [
                Property(self, name, self.node.properties[name],
                         fields.get(_field_identifier(name)))
                for name in sorted(self.node.properties)
            ]
        return self._properties


def _field_identifier(api_name: str) -> str:
    # pydantic treats underscore-prefixed attributes as private, not fields.
    ident = python_identifier(api_name)
    if ident.startswith("_"):
        ident = f"field{ident}"
    return ident


# ---------------------------------------------------------------------------
# TypeGraph
# ---------------------------------------------------------------------------


class TypeGraph:
    """All schemas of one API, keyed by native (or synthesized) name.

    Args:
        allocator: The generation pass's module-level name allocator.
            Display names of schemas are drawn from it.

    Example::

        graph = TypeGraph(NameAllocator())
        graph.resolve(document.schemas)
        graph.target_type(graph.get("Task").properties()[0].type)
    """

    def __init__(self, allocator: NameAllocator) -> None:
        self.allocator = allocator
        self._schemas: dict[str, Schema] = {}
        # Memo tables keyed by object identity.  Every JsonSchema node is
        # kept alive by the document, so ids stay unique for the pass.
        self._types: dict[int, Type] = {}
        self._names: dict[str, str] = {}
        self._targets: dict[int, str] = {}

    # -- lookup -------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._schemas)

    def __contains__(self, api_name: object) -> bool:
        return api_name in self._schemas

    def __iter__(self) -> Iterator[Schema]:
        return iter(self.schemas())

    def get(self, api_name: str) -> Optional[Schema]:
        return self._schemas.get(api_name)

    def schemas(self) -> list[Schema]:
        """Return every registered schema sorted by native name."""
        return [self._schemas[key] for key in sorted(self._schemas)]

    def type_of(self, node: JsonSchema, path: str = "") -> Type:
        """Return the memoized :class:`Type` for *node*."""
        typ = self._types.get(id(node))
        if typ is None:
            typ = Type(self, node, path)
            self._types[id(node)] = typ
        return typ

    # -- resolution ---------------------------------------------------------

    def resolve(self, schemas: Mapping[str, JsonSchema]) -> None:
        """Register every top-level schema and its anonymous sub-schemas.

        Schemas are visited in sorted order so synthesized keys and any
        failure are reproducible.

        Raises:
            DuplicateSchemaError: If a key is registered twice.
            UnsupportedTypeError: For a schema or property shape the
                dialect does not cover.
        """
        for name in sorted(schemas):
            schema = self._add(name, schemas[name], f"schemas.{name}")
            self._populate_sub_schemas(schema)
        logger.debug("Resolved %d schemas (%d top-level)", len(self._schemas), len(schemas))

    def _add(self, api_name: str, node: JsonSchema, path: str) -> Schema:
        if api_name in self._schemas:
            raise DuplicateSchemaError(f"dup schema apiName: {api_name}", path, node)
        schema = Schema(self, api_name, node, path)
        schema.type.schema_key = api_name
        self._schemas[api_name] = schema
        logger.debug("Registered schema %s", api_name)
        return schema

    def _add_sub_struct(self, api_name: str, typ: Type) -> None:
        schema = self._add(api_name, typ.node, typ.path)
        self._populate_sub_schemas(schema)

    def _populate_sub_schemas(self, schema: Schema) -> None:
        typ = schema.type

        if typ.is_struct:
            for prop in schema.properties():
                self._populate_property(schema, prop)
            return

        if typ.is_array:
            elem = typ.element()
            if elem.is_simple or elem.is_reference:
                return
            sub_name = f"{schema.api_name}.Item"
            if elem.is_struct:
                self._add_sub_struct(sub_name, elem)
                return
            raise UnsupportedTypeError(
                f"Unknown array type for {sub_name!r}", elem.path, elem.node
            )

        if typ.is_reference:
            return

        raise UnsupportedTypeError(
            f"unsupported type for schema {schema.api_name!r}", schema.path, schema.node
        )

    def _populate_property(self, schema: Schema, prop: Property) -> None:
        ptype = prop.type
        if ptype.is_simple:
            return
        sub_name = f"{schema.api_name}.{prop.api_name}"

        if ptype.is_array:
            elem = ptype.element()
            if elem.is_simple or elem.is_reference:
                return
            if elem.is_struct:
                self._add_sub_struct(sub_name, elem)
                return
            if elem.is_array:
                inner = elem.element()
                if inner.is_struct:
                    self._add_sub_struct(sub_name, inner)
                    return
            raise UnsupportedTypeError(
                f"Unknown property array type for {sub_name!r}", elem.path, elem.node
            )

        if ptype.is_struct:
            self._add_sub_struct(sub_name, ptype)
            return
        if ptype.is_reference:
            return
        raise UnsupportedTypeError(f"Unknown type for {sub_name!r}", ptype.path, ptype.node)

    # -- naming and representation -----------------------------------------

    def name_of(self, schema: Schema) -> str:
        """Return the display name of *schema*, issuing it on first call."""
        name = self._names.get(schema.api_name)
        if name is None:
            name = self.allocator.get(initial_cap(schema.api_name))
            self._names[schema.api_name] = name
        return name

    def target_type(self, typ: Type) -> str:
        """Resolve *typ* to the Python annotation used in generated code.

        Raises:
            UnresolvedReferenceError: If a reference names no registered
                schema, or a struct type was never registered.
            UnsupportedTypeError: If the shape cannot be represented.
        """
        cached = self._targets.get(id(typ))
        if cached is None:
            cached = self._target_type(typ, ())
            self._targets[id(typ)] = cached
        return cached

    def _target_type(self, typ: Type, chain: tuple[str, ...]) -> str:
        simple = simple_type(typ.api_type, typ.format)
        if simple is not None:
            return simple

        if typ.is_array:
            return f"list[{self._target_type(typ.element(), chain)}]"

        if typ.is_reference:
            ref = typ.reference
            target = self._schemas.get(ref)
            if target is None:
                raise UnresolvedReferenceError(
                    f"failed to find referenced type {ref!r}", typ.path, typ.node
                )
            if ref in chain:
                raise UnresolvedReferenceError(
                    f"reference cycle through {' -> '.join(chain + (ref,))}",
                    typ.path, typ.node,
                )
            # Struct targets short-circuit to their name below.
            return self._target_type(target.type, chain + (ref,))

        if typ.is_struct:
            key = typ.schema_key
            if key is None or key not in self._schemas:
                raise UnresolvedReferenceError(
                    "no schema registered for struct type", typ.path, typ.node
                )
            return self.name_of(self._schemas[key])

        raise UnsupportedTypeError("unhandled type", typ.path, typ.node)

    def reference_target(self, ref: str, path: str = "") -> str:
        """Resolve a bare ``$ref`` name, as used by method request/response."""
        target = self._schemas.get(ref)
        if target is None:
            raise UnresolvedReferenceError(
                f"failed to find referenced type {ref!r}", path, {"$ref": ref}
            )
        return self.target_type(target.type)

    def reference_schema(self, typ: Type) -> Optional[Schema]:
        """Return the schema a reference type points at, or ``None``."""
        if not typ.is_reference:
            return None
        target = self._schemas.get(typ.reference)
        if target is None:
            raise UnresolvedReferenceError(
                f"failed to find referenced type {typ.reference!r}", typ.path, typ.node
            )
        return target
