"""discogen -- Generate typed Python client modules from API discovery documents.

A discovery document is the JSON description of a REST API: its schemas,
resources, methods, parameters and OAuth2 scopes. discogen turns one into a
Python module with a pydantic record per schema, a fluent call-builder class
per method, a service class per resource and a constant per scope.

Typical workflow::

    discogen list                              # APIs in the directory
    discogen generate --api tasks:v1           # write ./gen/tasks/v1/
    discogen generate --document ./tasks.json  # from a local document

Modules:
    app: Typer application and console entry point.
    models: Pydantic models for configuration and discovery documents.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
    generator: Type graph, call model, emitter and batch orchestration.
    runtime: Support library imported by generated modules.
"""

__version__ = "0.5.0"
