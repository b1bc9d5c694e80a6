"""The per-API generation pass.

An :class:`API` owns every piece of mutable state one generation needs:
the module-level :class:`~discogen.generator.naming.NameAllocator`, the
:class:`~discogen.generator.types.TypeGraph`, and the resource and method
models.  Nothing is shared between two :class:`API` instances, so several
passes can run on different threads at once.

:meth:`API.build` fixes the order in which names are issued.  Because the
allocator is first-come first-served, that order is part of the output::

    api = API(parse_document(raw))
    api.build()
    for schema in api.type_graph.schemas():
        print(schema.api_name, "->", schema.name)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urljoin

from discogen.generator.methods import SERVICE_MEMBERS, Method, Resource
from discogen.generator.naming import NameAllocator, python_identifier, scope_identifier
from discogen.generator.types import TypeGraph
from discogen.models import DiscoveryDocument

logger = logging.getLogger(__name__)

DISCOVERY_BASE = "https://www.googleapis.com/discovery/v1/apis"
"""``basePath`` values are resolved relative to this URL."""

DATA_WRAPPER_FEATURE = "dataWrapper"

# Module-level names every generated module defines or imports.
RESERVED_NAMES = frozenset({
    "Any", "IO", "Optional", "Field", "Record", "BaseService", "Call",
    "ServiceError", "API_ID", "API_NAME", "API_VERSION", "BASE_PATH",
    "ResourceService", "httpx",
})


@dataclass
class Scope:
    """An OAuth2 scope and the module constant that names it."""

    url: str
    identifier: str
    description: str = ""


class API:
    """One generation pass over one discovery document.

    Args:
        document: The decoded discovery document.
        reserved: Module-level names that schemas and builders may not take.
    """

    def __init__(
        self,
        document: DiscoveryDocument,
        reserved: Iterable[str] = RESERVED_NAMES,
    ) -> None:
        self.document = document
        self.allocator = NameAllocator(reserved)
        self.type_graph = TypeGraph(self.allocator)
        self.service_name: Optional[str] = None
        self._scopes: Optional[list[Scope]] = None
        self._resources: Optional[list[Resource]] = None
        self._methods: Optional[list[Method]] = None
        self._built = False

    def __repr__(self) -> str:
        return f"API({self.id!r})"

    # -- identity -----------------------------------------------------------

    @property
    def id(self) -> str:
        return self.document.id or f"{self.document.name}:{self.document.version}"

    @property
    def name(self) -> str:
        return self.document.name

    @property
    def version(self) -> str:
        return self.document.version

    @property
    def title(self) -> str:
        return self.document.title or self.document.name

    @property
    def package(self) -> str:
        """The generated package name: the lower-cased API name."""
        return python_identifier(self.document.name.lower())

    @property
    def base_url(self) -> str:
        doc = self.document
        if doc.root_url and doc.service_path is not None:
            return doc.root_url + doc.service_path
        return urljoin(DISCOVERY_BASE, doc.base_path or "")

    @property
    def needs_data_wrapper(self) -> bool:
        return DATA_WRAPPER_FEATURE in self.document.features

    # -- the pass -----------------------------------------------------------

    def build(self) -> API:
        """Validate the document and issue every module-level name.

        Order: scope constants, the root ``Service``, resource services,
        schema resolution, schema names, then call builders for top-level
        methods followed by each resource's methods.

        Raises:
            DocumentError: On any malformed construct.  The pass is then
                unusable and nothing should be emitted from it.
        """
        if self._built:
            return self
        # Names are issued on first access of these properties.
        self.scopes()
        self.service_name = self.allocator.get("Service")
        for resource in self.resources():
            resource.service_name
        self.type_graph.resolve(self.document.schemas)
        for schema in self.type_graph.schemas():
            schema.name
        for method in self.top_level_methods():
            method.call_name
            method.arguments()
        for resource in self.resources():
            for method in resource.methods():
                method.call_name
                method.arguments()
        self._built = True
        logger.debug(
            "Built %s: %d schemas, %d resources, %d names issued",
            self.id, len(self.type_graph), len(self.resources()), len(self.allocator),
        )
        return self

    # -- enumeration --------------------------------------------------------

    def scopes(self) -> list[Scope]:
        """Return the OAuth2 scopes sorted by URL.

        Raises:
            ScopeURLError: If a scope URL lacks the required prefix.
        """
        if self._scopes is None:
            auth = self.document.auth
            declared = auth.oauth2.scopes if auth and auth.oauth2 else {}
            self._scopes = [
                Scope(
                    url=url,
                    identifier=self.allocator.get(scope_identifier(url)),
                    description=declared[url].description or "",
                )
                for url in sorted(declared)
            ]
        return self._scopes

    def resources(self) -> list[Resource]:
        """Return the top-level resources sorted by name."""
        if self._resources is None:
            self._assign_root_members()
        return self._resources

    def top_level_methods(self) -> list[Method]:
        """Return the methods attached to the API root, sorted by name."""
        if self._methods is None:
            self._assign_root_members()
        return self._methods

    def methods(self) -> list[Method]:
        """Top-level methods followed by each resource's methods."""
        out = list(self.top_level_methods())
        for resource in self.resources():
            out.extend(resource.methods())
        return out

    def _assign_root_members(self) -> None:
        # Resource attributes and top-level methods share the root service's
        # namespace.
        members = NameAllocator(SERVICE_MEMBERS)
        doc = self.document
        self._resources = [
            Resource(self, name, doc.resources[name], members.get(python_identifier(name)))
            for name in sorted(doc.resources)
        ]
        self._methods = [
            Method(self, name, doc.methods[name], None, members.get(python_identifier(name)))
            for name in sorted(doc.methods)
        ]
