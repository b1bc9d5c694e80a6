"""Per-operation call model: parameters, constructor arguments, services.

For every method of a discovery document this module decides the contract
of the generated call builder:

* **Arguments** -- the constructor parameters.  Exactly the names listed in
  ``parameterOrder``, in that order, followed by a body argument when the
  method declares a ``request`` schema.  Nothing else; a parameter flagged
  ``required`` but missing from ``parameterOrder`` is *not* an argument.
* **Optional parameters** -- every parameter not flagged ``required``.  Each
  becomes a chained setter on the builder.
* **Required query parameters** -- split by the ``repeated`` flag, because
  a repeated value contributes one query entry per element.

Types are resolved against the pass's :class:`~discogen.generator.types.TypeGraph`,
which must be fully populated before any method is inspected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from discogen.exceptions import DocumentError, UnsupportedTypeError
from discogen.generator.naming import NameAllocator, initial_cap, python_identifier
from discogen.generator.types import simple_type
from discogen.models import JsonSchema, MethodDef, ResourceDef

if TYPE_CHECKING:
    from discogen.generator.api import API

logger = logging.getLogger(__name__)

BODY = "body"

# Identifiers a generated call builder already uses for itself.
CALL_RESERVED = ("self", "service")

# Method names every generated call builder inherits or defines.
CALL_MEMBERS = ("self", "execute", "media", "service")

# Attribute names a generated service class uses for itself.
SERVICE_MEMBERS = ("self", "client", "base_url", "data_wrapper", "service")


# ---------------------------------------------------------------------------
# Param
# ---------------------------------------------------------------------------


class Param:
    """One declared parameter of a :class:`Method`."""

    def __init__(self, method: Method, name: str, node: JsonSchema) -> None:
        self.method = method
        self.name = name
        self.node = node

    def __repr__(self) -> str:
        return f"Param({self.method.id}:{self.name})"

    @property
    def path(self) -> str:
        return f"{self.method.path_in_document}.parameters.{self.name}"

    @property
    def is_required(self) -> bool:
        return self.node.required

    @property
    def is_repeated(self) -> bool:
        return self.node.repeated

    @property
    def location(self) -> str:
        return self.node.location or "query"

    @property
    def description(self) -> str:
        return self.node.description or ""

    def target_type(self) -> str:
        """Return the Python annotation for values of this parameter.

        Raises:
            UnsupportedTypeError: If the declared type is not primitive.
        """
        typ = simple_type(self.node.type, self.node.format)
        if typ is None:
            raise UnsupportedTypeError(
                f"failed to convert parameter type "
                f"type={self.node.type!r}, format={self.node.format!r}",
                self.path, self.node,
            )
        if self.is_repeated:
            return f"list[{typ}]"
        return typ


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


@dataclass
class Argument:
    """One constructor parameter of a call builder.

    Attributes:
        api_name: The native parameter name, or the request schema name for
            the body argument.
        name: The Python identifier, unique within the argument list.
        target_type: Python annotation of the value.
        location: ``"path"``, ``"query"`` or ``"body"``.
        repeated: Whether the value is a sequence sent once per element.
    """

    api_name: str
    name: str
    target_type: str
    location: str
    repeated: bool = False


class Arguments:
    """The ordered constructor parameters of one call builder.

    :meth:`add` keeps names unique: a clashing identifier gets ``2``, then
    ``3`` and so on appended to its original form.  The list starts with
    the builder's own identifiers marked taken.
    """

    def __init__(self, reserved: tuple[str, ...] = CALL_RESERVED) -> None:
        self._args: list[Argument] = []
        self._taken: set[str] = set(reserved)

    def __iter__(self) -> Iterator[Argument]:
        return iter(self._args)

    def __len__(self) -> int:
        return len(self._args)

    def __getitem__(self, index: int) -> Argument:
        return self._args[index]

    def add(self, arg: Argument) -> Argument:
        original = arg.name
        n = 1
        while arg.name in self._taken:
            n += 1
            arg.name = f"{original}{n}"
        self._taken.add(arg.name)
        self._args.append(arg)
        return arg

    def names(self) -> list[str]:
        return [arg.name for arg in self._args]

    def for_location(self, location: str) -> list[Argument]:
        return [arg for arg in self._args if arg.location == location]

    def body_arg(self) -> Optional[Argument]:
        for arg in self._args:
            if arg.location == BODY:
                return arg
        return None


# ---------------------------------------------------------------------------
# Method
# ---------------------------------------------------------------------------


class Method:
    """One API operation, attached to a :class:`Resource` or the API root.

    Args:
        api: The generation pass that owns this method.
        name: The method's key in its ``methods`` map.
        node: The decoded method definition.
        resource: The containing resource; ``None`` for top-level methods.
        attr_name: Python name of the method on its service class.
    """

    def __init__(
        self,
        api: API,
        name: str,
        node: MethodDef,
        resource: Optional[Resource] = None,
        attr_name: Optional[str] = None,
    ) -> None:
        self.api = api
        self.name = name
        self.node = node
        self.resource = resource
        self.attr_name = attr_name or python_identifier(name)
        self._params: Optional[list[Param]] = None
        self._arguments: Optional[Arguments] = None
        self._call_name: Optional[str] = None
        self._setter_names: Optional[dict[str, str]] = None

    def __repr__(self) -> str:
        return f"Method({self.id!r})"

    @property
    def id(self) -> str:
        return self.node.id or self.name

    @property
    def http_method(self) -> str:
        return self.node.http_method

    @property
    def path(self) -> str:
        return self.node.path

    @property
    def description(self) -> str:
        return self.node.description or ""

    @property
    def path_in_document(self) -> str:
        if self.resource is None:
            return f"methods.{self.name}"
        return f"resources.{self.resource.name}.methods.{self.name}"

    @property
    def call_name(self) -> str:
        """The call-builder class name, issued from the API allocator once."""
        if self._call_name is None:
            prefix = initial_cap(self.resource.name) if self.resource else ""
            self._call_name = self.api.allocator.get(
                f"{prefix}{initial_cap(self.name)}Call"
            )
        return self._call_name

    # -- parameters ---------------------------------------------------------

    def params(self) -> list[Param]:
        """Return all declared parameters sorted by name."""
        if self._params is None:
            self._params = [
                Param(self, name, self.node.parameters[name])
                for name in sorted(self.node.parameters)
            ]
        return self._params

    def param(self, name: str) -> Optional[Param]:
        for p in self.params():
            if p.name == name:
                return p
        return None

    def optional_params(self) -> list[Param]:
        return [p for p in self.params() if not p.is_required]

    def required_query_params(self) -> list[Param]:
        return [
            p for p in self.params()
            if p.is_required and not p.is_repeated and p.location == "query"
        ]

    def required_repeated_query_params(self) -> list[Param]:
        return [
            p for p in self.params()
            if p.is_required and p.is_repeated and p.location == "query"
        ]

    def unbound_required_params(self) -> list[Param]:
        """Required parameters that ``parameterOrder`` does not list.

        They are not constructor arguments, so the emitter exposes them as
        setters next to the optional parameters.
        """
        ordered = set(self.node.parameter_order)
        return [p for p in self.params() if p.is_required and p.name not in ordered]

    def setter_params(self) -> list[Param]:
        """Parameters reachable through chained setters, sorted by name."""
        ordered = set(self.node.parameter_order)
        return [p for p in self.params() if not p.is_required or p.name not in ordered]

    def setter_names(self) -> dict[str, str]:
        """Map each setter parameter to its Python name on the builder.

        Names come from a private allocator seeded with the builder's own
        members, so a parameter called ``self`` or ``execute`` cannot shadow
        them.
        """
        if self._setter_names is None:
            pool = NameAllocator(CALL_MEMBERS)
            self._setter_names = {
                p.name: pool.get(python_identifier(p.name)) for p in self.setter_params()
            }
        return self._setter_names

    # -- arguments ----------------------------------------------------------

    def arguments(self) -> Arguments:
        """Build the ordered constructor parameters.

        Raises:
            DocumentError: If ``parameterOrder`` names an undeclared
                parameter.
        """
        if self._arguments is not None:
            return self._arguments
        args = Arguments()
        for pname in self.node.parameter_order:
            param = self.param(pname)
            if param is None:
                raise DocumentError(
                    f"parameterOrder names unknown parameter {pname!r}",
                    f"{self.path_in_document}.parameterOrder",
                    self.node.parameter_order,
                )
            args.add(Argument(
                api_name=pname,
                name=python_identifier(pname),
                target_type=param.target_type(),
                location=param.location,
                repeated=param.is_repeated,
            ))
        request = self.request_schema_name()
        if request is not None:
            args.add(Argument(
                api_name=request,
                name=python_identifier(request.lower()),
                target_type=self.request_type(),
                location=BODY,
            ))
        self._arguments = args
        return args

    # -- request / response -------------------------------------------------

    def request_schema_name(self) -> Optional[str]:
        if self.node.request is None or not self.node.request.ref:
            return None
        return self.node.request.ref

    def request_type(self) -> Optional[str]:
        return self._ref_target(self.request_schema_name(), "request")

    def response_type(self) -> Optional[str]:
        ref = self.node.response.ref if self.node.response else None
        return self._ref_target(ref, "response")

    def _ref_target(self, ref: Optional[str], key: str) -> Optional[str]:
        if not ref:
            return None
        return self.api.type_graph.reference_target(ref, f"{self.path_in_document}.{key}")

    # -- media --------------------------------------------------------------

    def supports_media(self) -> bool:
        return self.node.media_upload is not None

    def media_path(self) -> str:
        upload = self.node.media_upload
        if upload is None or upload.protocols.simple is None:
            return ""
        return upload.protocols.simple.path or ""


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


class Resource:
    """A named group of methods, generated as its own service class."""

    def __init__(self, api: API, name: str, node: ResourceDef, attr_name: Optional[str] = None) -> None:
        self.api = api
        self.name = name
        self.node = node
        self.attr_name = attr_name or python_identifier(name)
        self._service_name: Optional[str] = None
        self._methods: Optional[list[Method]] = None
        if node.resources:
            logger.warning(
                "Nested resources of %r are not generated: %s",
                name, ", ".join(sorted(node.resources)),
            )

    def __repr__(self) -> str:
        return f"Resource({self.name!r})"

    @property
    def service_name(self) -> str:
        """The service class name, issued from the API allocator once."""
        if self._service_name is None:
            self._service_name = self.api.allocator.get(f"{initial_cap(self.name)}Service")
        return self._service_name

    def methods(self) -> list[Method]:
        """Return this resource's methods sorted by name."""
        if self._methods is None:
            members = NameAllocator(SERVICE_MEMBERS)
            self._methods = [
                Method(self.api, name, self.node.methods[name], self,
                       members.get(python_identifier(name)))
                for name in sorted(self.node.methods)
            ]
        return self._methods
