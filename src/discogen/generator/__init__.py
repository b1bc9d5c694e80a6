"""Client generator -- resolve a discovery document and render a module.

This sub-package takes a :class:`~discogen.models.DiscoveryDocument`
(produced by the parser) and turns it into the source of a Python client
module.

Typical usage::

    from discogen.generator import API, render_module

    api = API(parse_document(raw))
    source = render_module(api)

Sub-modules:

* :mod:`~discogen.generator.naming` -- Collision-free identifier issuance
  and identifier cleanup.
* :mod:`~discogen.generator.types` -- The type graph: schemas, properties
  and synthesized sub-schemas.
* :mod:`~discogen.generator.methods` -- The call model: resources,
  methods, parameters and constructor arguments.
* :mod:`~discogen.generator.api` -- One generation pass and the order in
  which it issues names.
* :mod:`~discogen.generator.emitter` -- Jinja2 rendering of the module.
* :mod:`~discogen.generator.writer` and :mod:`~discogen.generator.batch`
  -- Output layout and multi-API runs.
"""

from discogen.generator.api import API
from discogen.generator.batch import BatchResult, GenerationFailure, generate_api, generate_many
from discogen.generator.emitter import render_module

__all__ = [
    "API",
    "BatchResult",
    "GenerationFailure",
    "generate_api",
    "generate_many",
    "render_module",
]
