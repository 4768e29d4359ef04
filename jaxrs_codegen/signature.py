"""Resolve each operation's Java method signature.

Parameter order is fixed: path parameters in template order, then header
parameters, then query parameters (both in declaration order), then at most
one body parameter. Return types are resolved once here; dialect
capabilities are applied later by ResolvedSignature.return_type_for.
"""

from __future__ import annotations

import structlog

from .config import GeneratorSettings
from .errors import SchemaError
from .model import (
    ANY_MEDIA_TYPE,
    BINARY,
    PARAMETER_LOCATIONS,
    RAW_RESPONSE,
    VOID,
    Operation,
    Parameter,
    ParameterBinding,
    RequestBody,
    ResolvedSignature,
    ResponseSpec,
    SchemaDef,
    TypeRef,
)
from .naming import java_identifier, type_name
from .parser import path_placeholders
from .type_mapper import TypeMapper, primitive_type

logger = structlog.get_logger(__name__)

DEFAULT_BODY_NAME = "data"
_STRING = primitive_type("string", None)


def _status_order(response: ResponseSpec) -> int:
    code = response.code
    return int(code) if code.isdigit() else int(code[0]) * 100 + 99


def _schema_key(schema: SchemaDef | None) -> tuple[str, str]:
    if schema is None:
        return ("none", "")
    if schema.kind == "reference":
        return ("ref", schema.ref or "")
    if schema.kind == "binary":
        return ("binary", "")
    return ("inline", schema.location)


def _declared(content: dict[str, SchemaDef | None]) -> list[str]:
    """Media types for @Consumes/@Produces; a lone wildcard is the JAX-RS default."""
    media_types = list(content)
    return [] if media_types == [ANY_MEDIA_TYPE] else media_types


class SignatureBuilder:
    def __init__(self, mapper: TypeMapper, settings: GeneratorSettings) -> None:
        self.mapper = mapper
        self.settings = settings

    def resolve(self, operation: Operation, method_name: str) -> ResolvedSignature:
        """Build the signature for one operation.

        Raises SchemaError; type table entries synthesized for a failed
        operation are rolled back.
        """
        mark = self.mapper.checkpoint()
        try:
            return self._resolve(operation, method_name)
        except SchemaError:
            self.mapper.rollback(mark)
            raise

    def _resolve(self, operation: Operation, method_name: str) -> ResolvedSignature:
        for param in operation.parameters:
            if param.location not in PARAMETER_LOCATIONS:
                raise SchemaError(
                    "UnsupportedParameter",
                    operation.label,
                    f"{param.location} parameter {param.name!r} cannot be bound",
                )
        if len(operation.request_bodies) > 1:
            names = ", ".join(b.name or DEFAULT_BODY_NAME for b in operation.request_bodies)
            raise SchemaError(
                "MultipleBodyParameters",
                operation.label,
                f"at most one body parameter is allowed, found {len(operation.request_bodies)}"
                f" ({names})",
            )

        signature = ResolvedSignature(method_name=method_name)
        used: set[str] = set()
        for param in self._ordered_parameters(operation):
            signature.parameters.append(ParameterBinding(
                name=param.name,
                identifier=self._identifier(param.name, param.location, used),
                location=param.location,
                type=self._parameter_type(param, method_name),
                required=param.required,
                description=param.description,
            ))

        body = operation.request_body
        if body is not None:
            signature.parameters.append(ParameterBinding(
                name=body.name or DEFAULT_BODY_NAME,
                identifier=self._identifier(body.name or DEFAULT_BODY_NAME, "body", used),
                location="body",
                type=self._body_type(body, method_name),
                required=body.required,
                description=body.description,
            ))
            signature.consumes = _declared(body.content)

        primary = self._primary_response(operation)
        if primary is not None:
            signature.return_type = self._response_type(primary, method_name)
            signature.produces = _declared(primary.content)

        signature.is_async = operation.is_async
        if signature.is_async and signature.return_type == VOID:
            raise SchemaError(
                "UnsupportedAsyncWrapping",
                operation.label,
                "x-codegen-async requires a response body to wrap",
            )
        return signature

    # -- parameters ---------------------------------------------------------

    def _ordered_parameters(self, operation: Operation) -> list[Parameter]:
        placeholders = path_placeholders(operation.path)
        path_params = sorted(
            (p for p in operation.parameters if p.location == "path"),
            key=lambda p: placeholders.index(p.name),
        )
        headers = [p for p in operation.parameters if p.location == "header"]
        queries = [p for p in operation.parameters if p.location == "query"]
        return path_params + headers + queries

    @staticmethod
    def _identifier(name: str, location: str, used: set[str]) -> str:
        identifier = java_identifier(name)
        if identifier in used:
            identifier += type_name(location)
        counter = 2
        base = identifier
        while identifier in used:
            identifier = f"{base}{counter}"
            counter += 1
        used.add(identifier)
        return identifier

    def _parameter_type(self, param: Parameter, method_name: str) -> TypeRef:
        if param.schema is None:
            return _STRING
        # Enum-valued parameters (e.g. a type discriminator header) become
        # typed enumerations; inline ones are named <method><parameter>.
        return self.mapper.map_schema(param.schema, method_name, param.name)

    def _body_type(self, body: RequestBody, method_name: str) -> TypeRef:
        schemas = list(body.content.values())
        distinct = {_schema_key(s) for s in schemas}
        if len(distinct) != 1:
            return BINARY
        schema = schemas[0]
        if schema is None or self.mapper.is_binary(schema):
            return BINARY
        return self.mapper.map_schema(schema, method_name, "Body")

    # -- responses ----------------------------------------------------------

    def _primary_response(self, operation: Operation) -> ResponseSpec | None:
        candidates = [r for r in operation.responses.values() if r.is_success and r.content]
        if not candidates:
            return None
        if self.settings.primary_response == "first":
            primary = candidates[0]
        else:
            primary = min(candidates, key=_status_order)
        if len(candidates) > 1:
            shapes = {tuple((mt, _schema_key(s)) for mt, s in r.content.items()) for r in candidates}
            if len(shapes) > 1:
                logger.warning(
                    "ambiguous_success_response",
                    operation=operation.label,
                    codes=[r.code for r in candidates],
                    chosen=primary.code,
                    rule=self.settings.primary_response,
                )
        return primary

    def _response_type(self, response: ResponseSpec, method_name: str) -> TypeRef:
        if len(response.content) != 1:
            return RAW_RESPONSE
        schema = next(iter(response.content.values()))
        if schema is None or self.mapper.is_binary(schema):
            return RAW_RESPONSE
        return self.mapper.map_schema(schema, method_name, "Response")
