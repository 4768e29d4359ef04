"""Map schema definitions to Java type descriptors.

Handles:
- Primitive types and formats (int64 -> Long, date-time -> Date, ...)
- Arrays as ordered lists (uniqueItems is ignored, never a set)
- Binary payloads as byte streams
- Named objects as Beans, named enums as enum types
- Anonymous inline objects/enums as synthesized <Owner><Role> names
- allOf composition merged into a single Bean
- x-codegen-type overrides pointing at existing Java types
- Failure isolation: an unsupported component only fails itself and the
  components that depend on it
"""

from __future__ import annotations

from typing import Iterator

import structlog

from .errors import SchemaError
from .model import (
    ANY,
    BINARY,
    Bean,
    BeanField,
    ContractDocument,
    Diagnostic,
    EnumType,
    SchemaDef,
    TypeRef,
    list_of,
)
from .naming import type_name

logger = structlog.get_logger(__name__)

# (type, format) -> (simple name, qualified name for imports)
_PRIMITIVES: dict[tuple[str, str | None], tuple[str, str | None]] = {
    ("string", None): ("String", None),
    ("string", "date"): ("Date", "java.util.Date"),
    ("string", "date-time"): ("Date", "java.util.Date"),
    ("integer", None): ("Integer", None),
    ("integer", "int32"): ("Integer", None),
    ("integer", "int64"): ("Long", None),
    ("number", None): ("Double", None),
    ("number", "double"): ("Double", None),
    ("number", "float"): ("Float", None),
    ("boolean", None): ("Boolean", None),
}


def primitive_type(schema_type: str, schema_format: str | None) -> TypeRef:
    """Java type for a primitive (type, format) pair; unknown formats use the type default."""
    name, qualified = _PRIMITIVES.get(
        (schema_type, schema_format), _PRIMITIVES.get((schema_type, None), ("Object", None)),
    )
    return TypeRef("primitive", name=name, qualified=qualified)


def _walk(schema: SchemaDef | None) -> Iterator[SchemaDef]:
    if schema is None:
        return
    yield schema
    yield from _walk(schema.items)
    yield from _walk(schema.additional)
    for prop in schema.properties.values():
        yield from _walk(prop)
    for member in schema.members:
        yield from _walk(member)


class TypeMapper:
    """Owns the global Bean and enum tables for one generation run."""

    def __init__(self, document: ContractDocument) -> None:
        self.document = document
        self._failed: dict[str, SchemaError] = {}
        self._resolving: set[str] = set()
        self._reset()

    def _reset(self) -> None:
        self.beans: dict[str, Bean] = {}
        self.enums: dict[str, EnumType] = {}
        self._taken: set[str] = set()
        self._aliases: dict[str, TypeRef] = {}
        self._component_types: dict[str, str] = {}
        for name in self.document.schemas:
            self._component_types[name] = self._unique(type_name(name))

    # -- names --------------------------------------------------------------

    def _unique(self, base: str) -> str:
        candidate = base
        counter = 2
        while candidate in self._taken:
            candidate = f"{base}{counter}"
            counter += 1
        self._taken.add(candidate)
        return candidate

    def synthesize_name(self, owner: str, role: str) -> str:
        """Name for an anonymous schema: owner + role, numbered on collision."""
        return self._unique(type_name(owner) + (type_name(role) if role else ""))

    def checkpoint(self) -> tuple[int, int, frozenset[str], frozenset[str]]:
        return len(self.beans), len(self.enums), frozenset(self._taken), frozenset(self._aliases)

    def rollback(self, mark: tuple[int, int, frozenset[str], frozenset[str]]) -> None:
        """Drop tables entries added since ``mark`` (used when a mapping fails)."""
        beans, enums, taken, aliases = mark
        for name in list(self.beans)[beans:]:
            del self.beans[name]
        for name in list(self.enums)[enums:]:
            del self.enums[name]
        for name in set(self._aliases) - aliases:
            del self._aliases[name]
        self._taken = set(taken)

    # -- components ---------------------------------------------------------

    def build_tables(self) -> list[Diagnostic]:
        """Map every component schema. Returns one diagnostic per failed component.

        A component that fails while being mapped also fails the components
        referencing it, including those mapped before it, so the tables are
        rebuilt until a pass adds no new failure.
        """
        while True:
            self._reset()
            self._find_failures()
            if self._map_components():
                break
        diagnostics = [
            self._failed[name].to_diagnostic()
            for name in self.document.schemas
            if name in self._failed
        ]
        logger.debug("type_tables_built", beans=len(self.beans), enums=len(self.enums),
                     failed=len(self._failed))
        return diagnostics

    def _map_components(self) -> bool:
        for name, schema in self.document.schemas.items():
            if name in self._failed:
                continue
            mark = self.checkpoint()
            try:
                self._map_component(name, schema)
            except SchemaError as exc:
                self.rollback(mark)
                self._failed[name] = SchemaError(exc.kind, exc.location, f"schema {name}: {exc.message}")
                logger.debug("component_failed", schema=name, kind=exc.kind)
                return False
        return True

    def _find_failures(self) -> None:
        refs: dict[str, set[str]] = {}
        for name, schema in self.document.schemas.items():
            refs[name] = set()
            for node in _walk(schema):
                if node.kind == "unsupported" and name not in self._failed:
                    self._failed[name] = SchemaError(
                        "UnsupportedSchema",
                        node.location,
                        f"'{node.unsupported}' is not supported (schema {name})",
                    )
                if node.kind == "reference" and node.ref:
                    refs[name].add(node.ref)

        changed = True
        while changed:
            changed = False
            for name, targets in refs.items():
                if name in self._failed:
                    continue
                broken = sorted(t for t in targets if t in self._failed)
                if broken:
                    self._failed[name] = SchemaError(
                        "UnsupportedSchema",
                        self.document.schemas[name].location,
                        f"schema {name} depends on unsupported schema {broken[0]}"
                        f" ({self._failed[broken[0]].location})",
                    )
                    changed = True

    def _map_component(self, name: str, schema: SchemaDef) -> None:
        java_name = self._component_types[name]
        if schema.external_type:
            return
        if schema.kind == "object":
            self._build_bean(java_name, schema)
        elif schema.kind == "enum":
            self.enums[java_name] = EnumType(
                name=java_name,
                values=list(schema.values),
                description=schema.description,
                location=schema.location,
            )
        else:
            # Aliases (arrays, primitives, maps) are validated now and
            # resolved again wherever they are referenced.
            self.reference(name, schema.location)

    def _build_bean(self, java_name: str, schema: SchemaDef) -> Bean:
        properties, required = self._merged_properties(schema)
        bean = Bean(name=java_name, description=schema.description, location=schema.location)
        for prop_name, prop in properties.items():
            bean.fields.append(BeanField(
                name=prop_name,
                type=self.map_schema(prop, java_name, prop_name),
                required=prop_name in required,
                description=prop.description,
            ))
        self.beans[java_name] = bean
        logger.debug("bean_mapped", bean=java_name, fields=len(bean.fields))
        return bean

    def _merged_properties(
        self, schema: SchemaDef, seen: frozenset[str] = frozenset(),
    ) -> tuple[dict[str, SchemaDef], set[str]]:
        properties: dict[str, SchemaDef] = {}
        required: set[str] = set()
        for member in schema.members:
            target = member
            if member.kind == "reference":
                if member.ref in seen:
                    raise SchemaError(
                        "UnsupportedSchema", member.location,
                        f"allOf cycle through schema {member.ref}",
                    )
                seen = seen | {member.ref}
                target = self.target(member)
            if target.kind != "object":
                raise SchemaError(
                    "UnsupportedSchema", member.location, "allOf member is not an object schema",
                )
            member_props, member_required = self._merged_properties(target, seen)
            properties.update(member_props)
            required |= member_required
        properties.update(schema.properties)
        required |= set(schema.required)
        return properties, required

    # -- lookups ------------------------------------------------------------

    def target(self, schema: SchemaDef) -> SchemaDef:
        """Follow references to the underlying component schema."""
        seen: set[str] = set()
        while schema.kind == "reference" and schema.ref and not schema.external_type:
            if schema.ref in seen:
                raise SchemaError(
                    "UnsupportedSchema", schema.location, f"circular alias through {schema.ref}",
                )
            seen.add(schema.ref)
            schema = self.document.schemas[schema.ref]
        return schema

    def is_binary(self, schema: SchemaDef | None) -> bool:
        return schema is not None and self.target(schema).kind == "binary"

    def reference(self, name: str, location: str) -> TypeRef:
        """Type of a named component; Beans and enums are referenced by name."""
        if name in self._failed:
            raise SchemaError(
                "UnsupportedSchema",
                location,
                f"depends on unsupported schema {name} ({self._failed[name].location})",
            )
        schema = self.document.schemas[name]
        java_name = self._component_types[name]
        if schema.external_type:
            return _external(schema.external_type)
        if schema.kind == "object":
            return TypeRef("bean", name=java_name)
        if schema.kind == "enum":
            return TypeRef("enum", name=java_name)
        if name in self._aliases:
            return self._aliases[name]
        if name in self._resolving:
            raise SchemaError("UnsupportedSchema", location, f"circular alias through {name}")
        self._resolving.add(name)
        try:
            resolved = self.map_schema(schema, java_name, "")
        finally:
            self._resolving.discard(name)
        self._aliases[name] = resolved
        return resolved

    # -- mapping ------------------------------------------------------------

    def map_schema(self, schema: SchemaDef | None, owner: str, role: str) -> TypeRef:
        """Map one schema node. Anonymous objects and enums get synthesized names."""
        if schema is None:
            return ANY
        if schema.external_type:
            return _external(schema.external_type)

        kind = schema.kind
        if kind == "reference":
            return self.reference(schema.ref or "", schema.location)
        if kind == "unsupported":
            raise SchemaError(
                "UnsupportedSchema", schema.location, f"'{schema.unsupported}' is not supported",
            )
        if kind == "primitive":
            return primitive_type(schema.type or "string", schema.format)
        if kind == "binary":
            return BINARY
        if kind == "array":
            return list_of(self.map_schema(schema.items, owner, f"{role}Item"))
        if kind == "map":
            return TypeRef("map", args=(self.map_schema(schema.additional, owner, f"{role}Value"),))
        if kind == "enum":
            name = self.synthesize_name(owner, role)
            self.enums[name] = EnumType(
                name=name,
                values=list(schema.values),
                description=schema.description,
                location=schema.location,
            )
            return TypeRef("enum", name=name)
        if kind == "object":
            if not schema.properties and not schema.members:
                return TypeRef("map", args=(ANY,))
            name = self.synthesize_name(owner, role)
            self._build_bean(name, schema)
            return TypeRef("bean", name=name)
        return ANY


def _external(qualified: str) -> TypeRef:
    return TypeRef("external", name=qualified.rsplit(".", 1)[-1], qualified=qualified)
