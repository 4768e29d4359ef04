"""Build Jinja2 template contexts from the resolved model.

Turns Resources, Beans and enum types into plain dicts for the
resource/bean/enum templates: Java type text, sorted imports, annotation
lines and Javadoc lines. No generation decisions are made here beyond
applying the dialect's capability flags.
"""

from __future__ import annotations

import json
from typing import Any

from .config import GeneratorSettings
from .dialects import Dialect
from .javadoc import operation_javadoc, render_description
from .model import Bean, EnumType, Resource, TypeRef
from .naming import constant_name, java_identifier

_HTTP_ANNOTATIONS = {
    "get": "GET",
    "post": "POST",
    "put": "PUT",
    "delete": "DELETE",
    "patch": "PATCH",
    "head": "HEAD",
    "options": "OPTIONS",
}

_PARAM_ANNOTATIONS = {
    "path": "PathParam",
    "header": "HeaderParam",
    "query": "QueryParam",
}

_JACKSON = "com.fasterxml.jackson.annotation"


class _Imports:
    """Collects imports for one compilation unit, skipping its own package."""

    def __init__(self, package: str) -> None:
        self.package = package
        self.names: set[str] = set()

    def add(self, qualified: str) -> None:
        if qualified.rsplit(".", 1)[0] not in (self.package, "java.lang"):
            self.names.add(qualified)

    def sorted(self) -> list[str]:
        return sorted(self.names)


def java_type(
    ref: TypeRef, dialect: Dialect | None, settings: GeneratorSettings, imports: _Imports,
) -> str:
    """Java source text for a type descriptor, registering the imports it needs."""
    kind = ref.kind
    if kind == "void":
        return "void"
    if kind == "primitive":
        if ref.qualified:
            imports.add(ref.qualified)
        return ref.name
    if kind in ("bean", "enum"):
        imports.add(f"{settings.bean_package}.{ref.name}")
        return ref.name
    if kind == "external":
        imports.add(ref.qualified or ref.name)
        return ref.name
    if kind == "list":
        imports.add("java.util.List")
        return f"List<{java_type(ref.element, dialect, settings, imports)}>"
    if kind == "map":
        imports.add("java.util.Map")
        return f"Map<String, {java_type(ref.element, dialect, settings, imports)}>"
    if kind == "binary":
        imports.add("java.io.InputStream")
        return "InputStream"
    if kind == "raw_response" and dialect is not None:
        imports.add(dialect.raw_response_type)
        return "Response"
    if kind == "async" and dialect is not None:
        imports.add(dialect.async_type)
        simple = dialect.async_type.rsplit(".", 1)[-1]
        return f"{simple}<{java_type(ref.element, dialect, settings, imports)}>"
    return "Object"


def _string_literal(value: Any) -> str:
    return json.dumps(str(value))


def _media_annotation(name: str, media_types: list[str]) -> str:
    if len(media_types) == 1:
        return f"@{name}({_string_literal(media_types[0])})"
    return f"@{name}({{{', '.join(_string_literal(m) for m in media_types)}}})"


def _http_annotation(method: str, dialect: Dialect, imports: _Imports) -> list[str]:
    simple = _HTTP_ANNOTATIONS.get(method)
    if simple is None:
        imports.add(dialect.annotation("HttpMethod"))
        return [f"@HttpMethod({_string_literal(method.upper())})"]
    imports.add(dialect.annotation(simple))
    return [f"@{simple}"]


def build_resource_context(
    resource: Resource, dialect: Dialect, settings: GeneratorSettings,
) -> dict[str, Any]:
    """Context for resource.java.j2. Every operation must carry a signature."""
    imports = _Imports(settings.java_package)
    imports.add(dialect.annotation("Path"))
    methods: list[dict[str, Any]] = []

    for entry in resource.operations:
        operation = entry.operation
        signature = operation.signature
        if signature is None:
            raise ValueError(f"{operation.label} has no resolved signature")

        annotations: list[str] = []
        if entry.relative_path:
            annotations.append(f"@Path({_string_literal(entry.relative_path)})")
        annotations.extend(_http_annotation(operation.method, dialect, imports))

        return_type = signature.return_type_for(dialect)
        if return_type.kind != "void" and signature.produces:
            imports.add(dialect.annotation("Produces"))
            annotations.append(_media_annotation("Produces", signature.produces))
        if signature.consumes:
            imports.add(dialect.annotation("Consumes"))
            annotations.append(_media_annotation("Consumes", signature.consumes))

        parameters: list[str] = []
        for binding in signature.parameters:
            type_text = java_type(binding.type, dialect, settings, imports)
            annotation = _PARAM_ANNOTATIONS.get(binding.location)
            if annotation is None:
                parameters.append(f"{type_text} {binding.identifier}")
                continue
            imports.add(dialect.annotation(annotation))
            parameters.append(
                f"@{annotation}({_string_literal(binding.name)}) {type_text} {binding.identifier}"
            )

        methods.append({
            "name": signature.method_name,
            "javadoc": operation_javadoc(operation),
            "annotations": annotations,
            "return_type": java_type(return_type, dialect, settings, imports),
            "parameters": parameters,
        })

    return {
        "package": settings.java_package,
        "imports": imports.sorted(),
        "description": dialect.description,
        "name": resource.name,
        "path": resource.path,
        "methods": methods,
    }


def _accessor(prefix: str, identifier: str) -> str:
    return prefix + identifier[:1].upper() + identifier[1:]


def build_bean_context(bean: Bean, settings: GeneratorSettings) -> dict[str, Any]:
    """Context for bean.java.j2; fields keep schema-declaration order."""
    imports = _Imports(settings.bean_package)
    fields: list[dict[str, Any]] = []
    used: set[str] = set()
    if bean.fields:
        for simple in ("JsonInclude", "JsonProperty", "JsonPropertyOrder"):
            imports.add(f"{_JACKSON}.{simple}")

    for bean_field in bean.fields:
        identifier = java_identifier(bean_field.name)
        base, counter = identifier, 2
        while identifier in used:
            identifier = f"{base}{counter}"
            counter += 1
        used.add(identifier)

        javadoc = render_description(bean_field.description) if bean_field.description else []
        if bean_field.required:
            javadoc.append("(Required)")
        fields.append({
            "literal": _string_literal(bean_field.name),
            "identifier": identifier,
            "type": java_type(bean_field.type, None, settings, imports),
            "getter": _accessor("get", identifier),
            "setter": _accessor("set", identifier),
            "javadoc": javadoc,
        })

    return {
        "package": settings.bean_package,
        "imports": imports.sorted(),
        "name": bean.name,
        "javadoc": render_description(bean.description),
        "fields": fields,
    }


def _enum_value_type(values: list[Any]) -> str:
    if values and all(isinstance(v, bool) for v in values):
        return "Boolean"
    if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "Long" if any(abs(v) >= 2**31 for v in values) else "Integer"
    if values and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "Double"
    return "String"


def _json_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def build_enum_context(enum: EnumType, settings: GeneratorSettings) -> dict[str, Any]:
    """Context for enum.java.j2; constants keep declaration order.

    A ``null`` entry only marks the enum as nullable and gets no constant.
    Non-string values are rendered from their JSON text.
    """
    values = [v for v in enum.values if v is not None]
    value_type = _enum_value_type(values)
    constants: list[dict[str, str]] = []
    used: set[str] = set()
    for value in values:
        name = constant_name(_json_text(value))
        base, counter = name, 2
        while name in used:
            name = f"{base}_{counter}"
            counter += 1
        used.add(name)
        if value_type == "String":
            literal = json.dumps(_json_text(value))
        elif value_type == "Long":
            literal = f"{value}L"
        elif value_type == "Double":
            literal = repr(float(value))
        else:
            literal = json.dumps(value)
        constants.append({"name": name, "literal": literal})

    return {
        "package": settings.bean_package,
        "imports": [f"{_JACKSON}.JsonCreator", f"{_JACKSON}.JsonValue"],
        "name": enum.name,
        "javadoc": render_description(enum.description),
        "value_type": value_type,
        "constants": constants,
    }
