"""Reserved-word tables for the naming rules.

Each emitter target has its own reserved words and identifier rules, so the
compiler never consults a global table directly. The sets below are the
defaults loaded into :class:`~specir.models.NamingConfig`; callers targeting
another language pass their own sets through
:class:`~specir.models.GenerateConfig`.
"""

from __future__ import annotations

TYPESCRIPT_KEYWORDS: frozenset[str] = frozenset({
    "arguments",
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "implements",
    "import",
    "in",
    "instanceof",
    "interface",
    "let",
    "new",
    "null",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "static",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
})
"""Words a generated TypeScript client cannot use as a bare identifier."""

DART_KEYWORDS: frozenset[str] = frozenset({
    "abstract",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "default",
    "deferred",
    "do",
    "dynamic",
    "else",
    "enum",
    "export",
    "extends",
    "extension",
    "external",
    "factory",
    "final",
    "finally",
    "for",
    "Function",
    "get",
    "hide",
    "if",
    "implements",
    "import",
    "in",
    "interface",
    "is",
    "library",
    "mixin",
    "new",
    "null",
    "on",
    "operator",
    "part",
    "required",
    "rethrow",
    "return",
    "set",
    "show",
})
"""Words a generated Dart client cannot use as an enum member name."""

SDK_RESERVED_NAMES: frozenset[str] = frozenset({
    "ClientError",
    "ConflictError",
    "Error",
    "check",
    "get",
    "list",
})
"""Names already taken by members of the generated client runtime."""

SCHEMA_RESERVED_NAMES: frozenset[str] = frozenset({"Error", "Function"})
"""Component names that would shadow runtime types in generated models."""
