"""Parse a raw contract tree into a ContractDocument.

Handles:
- OpenAPI 3.x (components.schemas, requestBody, content maps)
- Swagger 2.0 (definitions, in: body parameters, consumes/produces)
- Path-item level parameters merged into each operation
- $ref parameters, request bodies and responses
- Schema $ref validation against the components table
- Duplicate (method, path) detection on normalized templates

Unsupported schema keywords are not parse errors; they are carried as
``kind="unsupported"`` nodes and reported by the type mapper.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import ParseError
from .loader import get_paths, get_schemas, ref_name, resolve_ref
from .model import (
    ANY_MEDIA_TYPE,
    ContractDocument,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    ResponseSpec,
    SchemaDef,
)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")
_PRIMITIVE_TYPES = {"string", "integer", "number", "boolean"}
_UNSUPPORTED_KEYWORDS = ("oneOf", "anyOf", "not")


def pointer(*tokens: str) -> str:
    """Build a JSON pointer from raw tokens."""
    escaped = [t.replace("~", "~0").replace("/", "~1") for t in tokens]
    return "#/" + "/".join(escaped)


def path_placeholders(template: str) -> list[str]:
    """Placeholder names in template order."""
    return _PLACEHOLDER_RE.findall(template)


def normalize_template(template: str) -> str:
    """Template with placeholder names erased, for overlap detection."""
    normalized = _PLACEHOLDER_RE.sub("{}", template).rstrip("/")
    return normalized or "/"


class _Parser:
    def __init__(self, raw: dict[str, Any]) -> None:
        self.raw = raw
        self.swagger = "swagger" in raw
        if self.swagger:
            self.schema_prefix = "#/definitions/"
        else:
            self.schema_prefix = "#/components/schemas/"
        self.schema_names = set(get_schemas(raw))

    # -- schemas ------------------------------------------------------------

    def schema(self, node: Any, location: str) -> SchemaDef:
        if not isinstance(node, dict):
            raise ParseError("MalformedDocument", location, "schema must be an object")

        if "$ref" in node:
            ref = node["$ref"]
            name = ref_name(ref) if isinstance(ref, str) else ""
            if (
                not isinstance(ref, str)
                or not ref.startswith(self.schema_prefix)
                or name not in self.schema_names
            ):
                raise ParseError(
                    "UnresolvedReference", location, f"no component matches {ref!r}",
                )
            return SchemaDef(kind="reference", location=location, ref=name)

        description = node.get("description") or node.get("title") or ""
        external = node.get("x-codegen-type")
        schema = self._schema_body(node, location)
        schema.description = description
        schema.external_type = external
        return schema

    def _schema_body(self, node: dict[str, Any], location: str) -> SchemaDef:
        for keyword in _UNSUPPORTED_KEYWORDS:
            if keyword in node:
                return SchemaDef(kind="unsupported", location=location, unsupported=keyword)

        schema_type = node.get("type")
        if isinstance(schema_type, list):
            non_null = [t for t in schema_type if t != "null"]
            schema_type = non_null[0] if len(non_null) == 1 else None
            if schema_type is None and non_null:
                return SchemaDef(kind="unsupported", location=location, unsupported="type")

        if "allOf" in node:
            members = [
                self.schema(sub, f"{location}/allOf/{i}")
                for i, sub in enumerate(node["allOf"])
            ]
            own = self._object(node, location)
            own.members = members
            return own

        if "enum" in node:
            return SchemaDef(
                kind="enum",
                location=location,
                type=schema_type or "string",
                values=list(node["enum"]),
            )

        if schema_type == "array":
            items = node.get("items")
            item_schema = (
                self.schema(items, f"{location}/items")
                if items is not None
                else SchemaDef(kind="any", location=f"{location}/items")
            )
            return SchemaDef(kind="array", location=location, type="array", items=item_schema)

        if schema_type == "object" or "properties" in node or "additionalProperties" in node:
            return self._object(node, location)

        if schema_type == "file" or (schema_type == "string" and node.get("format") == "binary"):
            return SchemaDef(kind="binary", location=location, type="string", format="binary")

        if schema_type in _PRIMITIVE_TYPES:
            return SchemaDef(
                kind="primitive", location=location, type=schema_type, format=node.get("format"),
            )

        if schema_type is None:
            return SchemaDef(kind="any", location=location)

        return SchemaDef(kind="unsupported", location=location, unsupported=f"type {schema_type}")

    def _object(self, node: dict[str, Any], location: str) -> SchemaDef:
        properties = {
            name: self.schema(prop, f"{location}/properties/{name}")
            for name, prop in (node.get("properties") or {}).items()
        }
        additional = node.get("additionalProperties")
        if not properties and additional not in (None, False) and "allOf" not in node:
            value = (
                self.schema(additional, f"{location}/additionalProperties")
                if isinstance(additional, dict)
                else SchemaDef(kind="any", location=f"{location}/additionalProperties")
            )
            return SchemaDef(kind="map", location=location, type="object", additional=value)
        return SchemaDef(
            kind="object",
            location=location,
            type="object",
            properties=properties,
            required=frozenset(node.get("required") or ()),
        )

    # -- references ---------------------------------------------------------

    def deref(self, node: Any, location: str) -> Any:
        """Follow a non-schema $ref (parameter, body, response)."""
        seen: set[str] = set()
        while isinstance(node, dict) and "$ref" in node:
            ref = node["$ref"]
            if ref in seen:
                raise ParseError("UnresolvedReference", location, f"circular reference {ref!r}")
            seen.add(ref)
            try:
                node = resolve_ref(self.raw, ref)
            except KeyError:
                raise ParseError(
                    "UnresolvedReference", location, f"{ref!r} does not resolve",
                ) from None
        return node

    # -- operations ---------------------------------------------------------

    def parameter_schema(self, node: dict[str, Any], location: str) -> SchemaDef | None:
        if "schema" in node:
            return self.schema(node["schema"], f"{location}/schema")
        if "content" in node:
            for media_type, media in node["content"].items():
                if isinstance(media, dict) and "schema" in media:
                    return self.schema(media["schema"], f"{location}/content/{media_type}/schema")
            return None
        # Swagger 2 keeps the schema keywords on the parameter itself.
        inline = {
            key: node[key]
            for key in ("type", "format", "items", "enum", "x-codegen-type")
            if key in node
        }
        return self.schema(inline, location) if inline else None

    def media_types(self, node: dict[str, Any], key: str) -> list[str]:
        return list(node.get(key) or self.raw.get(key) or [ANY_MEDIA_TYPE])

    def operation(
        self, path: str, method: str, node: dict[str, Any], shared: list[Any],
    ) -> Operation:
        location = pointer("paths", path, method)
        if not isinstance(node, dict):
            raise ParseError("MalformedDocument", location, "operation must be an object")

        op = Operation(
            method=method,
            path=path,
            operation_id=node.get("operationId"),
            summary=node.get("summary") or "",
            description=node.get("description") or "",
            tags=list(node.get("tags") or []),
            extensions={k: v for k, v in node.items() if k.startswith("x-")},
        )

        merged: dict[tuple[str, str], tuple[dict[str, Any], str]] = {}
        for index, raw_param in enumerate(shared):
            param_location = f"{pointer('paths', path)}/parameters/{index}"
            param = self.deref(raw_param, param_location)
            if not isinstance(param, dict):
                raise ParseError("MalformedDocument", param_location, "parameter must be an object")
            merged[(param.get("in", ""), param.get("name", ""))] = (param, param_location)

        own_keys: set[tuple[str, str]] = set()
        for index, raw_param in enumerate(node.get("parameters") or []):
            param_location = f"{location}/parameters/{index}"
            param = self.deref(raw_param, param_location)
            if not isinstance(param, dict) or "name" not in param or "in" not in param:
                raise ParseError(
                    "MalformedDocument", param_location, "parameter needs 'name' and 'in'",
                )
            key = (param["in"], param["name"])
            if key in own_keys:
                raise ParseError(
                    "DuplicateParameter",
                    param_location,
                    f"{param['in']} parameter {param['name']!r} declared twice on {op.label}",
                )
            own_keys.add(key)
            merged[key] = (param, param_location)

        for (where, name), (param, param_location) in merged.items():
            if where == "body":
                body_schema = self.schema(param.get("schema") or {}, f"{param_location}/schema")
                op.request_bodies.append(RequestBody(
                    content={mt: body_schema for mt in self.media_types(node, "consumes")},
                    required=bool(param.get("required")),
                    name=name,
                    description=param.get("description") or "",
                ))
                continue
            op.parameters.append(Parameter(
                name=name,
                location=where,
                required=bool(param.get("required")) or where == "path",
                schema=self.parameter_schema(param, param_location),
                description=param.get("description") or "",
            ))

        if "requestBody" in node:
            body_location = f"{location}/requestBody"
            body = self.deref(node["requestBody"], body_location)
            content = {
                media_type: (
                    self.schema(media["schema"], f"{body_location}/content/{media_type}/schema")
                    if isinstance(media, dict) and "schema" in media
                    else None
                )
                for media_type, media in (body.get("content") or {}).items()
            }
            op.request_bodies.append(RequestBody(
                content=content,
                required=bool(body.get("required")),
                name=body.get("x-codegen-name"),
                description=body.get("description") or "",
            ))

        for code, raw_response in (node.get("responses") or {}).items():
            code = str(code)
            response_location = f"{location}/responses/{code}"
            response = self.deref(raw_response, response_location)
            if not isinstance(response, dict):
                raise ParseError("MalformedDocument", response_location, "response must be an object")
            op.responses[code] = self.response(code, response, node, response_location)

        self._check_path_parameters(op, location)
        return op

    def response(
        self, code: str, node: dict[str, Any], operation: dict[str, Any], location: str,
    ) -> ResponseSpec:
        result = ResponseSpec(code=code, description=node.get("description") or "")
        if self.swagger:
            if "schema" in node:
                schema = self.schema(node["schema"], f"{location}/schema")
                result.content = {mt: schema for mt in self.media_types(operation, "produces")}
            return result
        for media_type, media in (node.get("content") or {}).items():
            result.content[media_type] = (
                self.schema(media["schema"], f"{location}/content/{media_type}/schema")
                if isinstance(media, dict) and "schema" in media
                else None
            )
        return result

    def _check_path_parameters(self, op: Operation, location: str) -> None:
        placeholders = path_placeholders(op.path)
        declared = [p.name for p in op.parameters if p.location == "path"]
        for name in placeholders:
            if name not in declared:
                raise ParseError(
                    "MissingPathParameter",
                    location,
                    f"placeholder {{{name}}} has no path parameter on {op.label}",
                )
        for name in declared:
            if name not in placeholders:
                raise ParseError(
                    "UnknownPathParameter",
                    location,
                    f"path parameter {name!r} does not occur in {op.path}",
                )

    # -- document -----------------------------------------------------------

    def document(self) -> ContractDocument:
        info = self.raw.get("info") or {}
        doc = ContractDocument(
            title=str(info.get("title") or ""),
            version=str(info.get("version") or ""),
        )
        for name, node in get_schemas(self.raw).items():
            doc.schemas[name] = self.schema(node, self.schema_prefix + name)

        seen: dict[tuple[str, str], str] = {}
        for path, raw_item in get_paths(self.raw).items():
            item_location = pointer("paths", path)
            raw_item = self.deref(raw_item, item_location)
            if not isinstance(raw_item, dict):
                raise ParseError("MalformedDocument", item_location, "path item must be an object")
            item = PathItem(template=path)
            shared = raw_item.get("parameters") or []
            for method, node in raw_item.items():
                method = method.lower()
                if method not in HTTP_METHODS:
                    continue
                key = (method, normalize_template(path))
                if key in seen:
                    raise ParseError(
                        "DuplicatePath",
                        pointer("paths", path, method),
                        f"{method.upper()} {path} duplicates {method.upper()} {seen[key]}",
                    )
                seen[key] = path
                item.operations[method] = self.operation(path, method, node, shared)
            doc.paths.append(item)
        return doc


def parse_document(raw: Any) -> ContractDocument:
    """Parse a decoded contract tree. Raises ParseError on structural problems."""
    if not isinstance(raw, dict):
        raise ParseError("MalformedDocument", "#", "document root must be an object")
    openapi = str(raw.get("openapi", ""))
    swagger = str(raw.get("swagger", ""))
    if not openapi.startswith("3") and swagger != "2.0":
        raise ParseError(
            "MalformedDocument", "#", "expected 'openapi: 3.x' or 'swagger: \"2.0\"'",
        )
    if not isinstance(raw.get("paths"), dict):
        raise ParseError("MalformedDocument", "#/paths", "document has no paths object")
    return _Parser(raw).document()
