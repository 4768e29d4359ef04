"""Error taxonomy for the generator.

ParseError aborts the whole run. SchemaError and NamingConflictError are
localized: the pipeline turns them into diagnostics and keeps emitting
unaffected artifacts.
"""

from __future__ import annotations

from .model import Diagnostic


class CodegenError(Exception):
    """Base error carrying a kind, a document location and a message."""

    def __init__(self, kind: str, location: str, message: str) -> None:
        super().__init__(f"{kind} at {location}: {message}")
        self.kind = kind
        self.location = location
        self.message = message

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(kind=self.kind, location=self.location, message=self.message)


class ParseError(CodegenError):
    """Malformed or incomplete contract document."""


class SchemaError(CodegenError):
    """Unsupported or unresolvable construct in a schema or operation."""


class NamingConflictError(CodegenError):
    """Derived identifiers inside one resource could not be made unique."""


class ConfigError(CodegenError):
    """Invalid generator settings."""

    def __init__(self, message: str, location: str = "settings") -> None:
        super().__init__("InvalidSetting", location, message)
