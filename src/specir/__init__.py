"""specir -- Compile OpenAPI 3.0/3.1 documents into an SDK-ready IR.

This package turns an arbitrary, often imperfect, OpenAPI document into a
canonical intermediate representation: references resolved, combinators
normalized, inline shapes hoisted into uniquely named components, union
members named, operation IDs made unique, and pagination strategies guessed.
Code emitters consume the resulting dict read-only.

Typical workflow::

    from specir.compiler.ir import build_ir
    from specir.parser import load_spec

    ir = build_ir(load_spec("openapi.yaml"))

or from the shell::

    specir build openapi.yaml -o ir.json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Project configuration discovery and precedence resolution.
    keywords: Reserved-word tables injected into the naming rules.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
