"""Canonical Pydantic models shared across all discogen modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Discovery document models** -- the strict, typed view of a discovery
document produced by :func:`~discogen.parser.document.parse_document`:
    :class:`JsonSchema`, :class:`SchemaRef`, :class:`MediaUpload`,
    :class:`MethodDef`, :class:`ResourceDef`, :class:`AuthInfo` and
    :class:`DiscoveryDocument`.

**Directory models** -- the API listing served by the discovery service:
    :class:`DirectoryItem` and :class:`DirectoryList`.

Document models ignore keys they do not know about (discovery documents
carry plenty that generation never reads) but reject known keys whose JSON
type is wrong, so a malformed document fails at ingestion rather than deep
inside the type graph.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DIRECTORY_URL = "https://www.googleapis.com/discovery/v1/apis"
"""Discovery directory listing every public API."""


# --- Configuration ---


class CacheConfig(BaseModel):
    """Discovery document cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Cache fetched documents")
    ttl_seconds: int = Field(default=86400, description="Cache TTL in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/discogen/config.json``.

    Loaded and saved by :func:`~discogen.config.load_global_config` and
    :func:`~discogen.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~discogen.config.resolve_config`.
    """

    directory_url: str = Field(
        default=DEFAULT_DIRECTORY_URL, description="API directory listing URL"
    )
    gendir: str = Field(
        default="gen", description="Directory generated packages are written to"
    )
    jobs: int = Field(default=1, description="APIs generated in parallel")
    check: bool = Field(
        default=False, description="Byte-compile generated modules after writing"
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Discovery document ---


class JsonSchema(BaseModel):
    """One schema object in the discovery dialect of JSON Schema.

    Used for entries of the top-level ``schemas`` map, for nested
    ``properties`` and ``items``, and for method parameters (which add
    ``required``, ``repeated`` and ``location``).

    Exactly one of ``type`` and ``ref`` is normally present; ``type`` is one
    of ``object``, ``array``, ``string``, ``number``, ``integer``,
    ``boolean`` or ``any``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    type: Optional[str] = None
    ref: Optional[str] = Field(default=None, alias="$ref")
    format: Optional[str] = None
    description: Optional[str] = None
    properties: dict[str, JsonSchema] = Field(default_factory=dict)
    items: Optional[JsonSchema] = None
    enum: Optional[list[str]] = None
    enum_descriptions: Optional[list[str]] = Field(
        default=None, alias="enumDescriptions"
    )
    default: Any = None
    pattern: Optional[str] = None
    minimum: Any = None
    maximum: Any = None
    # Parameter-only fields
    required: bool = False
    repeated: bool = False
    location: Optional[str] = None


class SchemaRef(BaseModel):
    """A ``{"$ref": "Name"}`` pointer used by method ``request``/``response``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ref: Optional[str] = Field(default=None, alias="$ref")


class MediaProtocol(BaseModel):
    """One upload protocol entry (``simple`` or ``resumable``)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    multipart: bool = True
    path: Optional[str] = None


class MediaProtocols(BaseModel):
    """Upload protocols a media method supports."""

    model_config = ConfigDict(extra="ignore")

    simple: Optional[MediaProtocol] = None
    resumable: Optional[MediaProtocol] = None


class MediaUpload(BaseModel):
    """Media upload description attached to a method."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    accept: list[str] = Field(default_factory=list)
    max_size: Optional[str] = Field(default=None, alias="maxSize")
    protocols: MediaProtocols = Field(default_factory=MediaProtocols)


class MethodDef(BaseModel):
    """A single API operation as declared in ``methods`` maps."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    http_method: str = Field(default="GET", alias="httpMethod")
    path: str = ""
    description: Optional[str] = None
    parameters: dict[str, JsonSchema] = Field(default_factory=dict)
    parameter_order: list[str] = Field(default_factory=list, alias="parameterOrder")
    request: Optional[SchemaRef] = None
    response: Optional[SchemaRef] = None
    media_upload: Optional[MediaUpload] = Field(default=None, alias="mediaUpload")
    scopes: list[str] = Field(default_factory=list)


class ResourceDef(BaseModel):
    """A named group of methods (and possibly nested resources)."""

    model_config = ConfigDict(extra="ignore")

    methods: dict[str, MethodDef] = Field(default_factory=dict)
    resources: dict[str, ResourceDef] = Field(default_factory=dict)


class ScopeInfo(BaseModel):
    """Description attached to one OAuth2 scope URL."""

    model_config = ConfigDict(extra="ignore")

    description: Optional[str] = None


class OAuth2Info(BaseModel):
    model_config = ConfigDict(extra="ignore")

    scopes: dict[str, ScopeInfo] = Field(default_factory=dict)


class AuthInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    oauth2: Optional[OAuth2Info] = None


class DiscoveryDocument(BaseModel):
    """Typed view of a complete discovery document.

    Produced by :func:`~discogen.parser.document.parse_document` and
    consumed by :class:`~discogen.generator.api.API`, which owns the
    per-document generation state.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Optional[str] = None
    discovery_version: Optional[str] = Field(default=None, alias="discoveryVersion")
    id: str = ""
    name: str
    version: str
    revision: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    documentation_link: Optional[str] = Field(default=None, alias="documentationLink")
    protocol: Optional[str] = None
    root_url: Optional[str] = Field(default=None, alias="rootUrl")
    service_path: Optional[str] = Field(default=None, alias="servicePath")
    base_path: Optional[str] = Field(default=None, alias="basePath")
    features: list[str] = Field(default_factory=list)
    auth: Optional[AuthInfo] = None
    schemas: dict[str, JsonSchema] = Field(default_factory=dict)
    resources: dict[str, ResourceDef] = Field(default_factory=dict)
    methods: dict[str, MethodDef] = Field(default_factory=dict)


# --- Directory ---


class DirectoryItem(BaseModel):
    """One API listed by the discovery directory."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    version: str
    title: Optional[str] = None
    description: Optional[str] = None
    discovery_link: Optional[str] = Field(default=None, alias="discoveryLink")
    discovery_rest_url: Optional[str] = Field(default=None, alias="discoveryRestUrl")
    preferred: bool = False


class DirectoryList(BaseModel):
    """The ``{"items": [...]}`` listing returned by the directory URL."""

    model_config = ConfigDict(extra="ignore")

    items: list[DirectoryItem] = Field(default_factory=list)
