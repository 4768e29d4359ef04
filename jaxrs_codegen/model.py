"""In-memory model shared by every generation stage.

The parser builds the contract types, the type mapper fills the Bean and enum
tables, the grouper builds Resources and the signature builder attaches one
ResolvedSignature per Operation. Emitters only read this model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

PARAMETER_LOCATIONS = ("path", "query", "header")
# Media type recorded for Swagger 2 payloads without consumes/produces.
ANY_MEDIA_TYPE = "*/*"


# ---------------------------------------------------------------------------
# Contract document
# ---------------------------------------------------------------------------

@dataclass
class SchemaDef:
    """One schema node. References point at components by name."""

    kind: str
    location: str
    type: str | None = None
    format: str | None = None
    items: SchemaDef | None = None
    properties: dict[str, SchemaDef] = field(default_factory=dict)
    required: frozenset[str] = frozenset()
    values: list[Any] = field(default_factory=list)
    ref: str | None = None
    additional: SchemaDef | None = None
    members: list[SchemaDef] = field(default_factory=list)
    description: str = ""
    external_type: str | None = None
    unsupported: str | None = None


@dataclass
class Parameter:
    name: str
    location: str
    required: bool = False
    schema: SchemaDef | None = None
    description: str = ""


@dataclass
class RequestBody:
    content: dict[str, SchemaDef | None]
    required: bool = False
    name: str | None = None
    description: str = ""


@dataclass
class ResponseSpec:
    code: str
    description: str = ""
    content: dict[str, SchemaDef | None] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.code.startswith("2")


@dataclass
class Operation:
    method: str
    path: str
    operation_id: str | None = None
    summary: str = ""
    description: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    request_bodies: list[RequestBody] = field(default_factory=list)
    responses: dict[str, ResponseSpec] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)
    _signature: ResolvedSignature | None = field(default=None, repr=False)

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"

    @property
    def request_body(self) -> RequestBody | None:
        return self.request_bodies[0] if self.request_bodies else None

    @property
    def is_async(self) -> bool:
        return bool(self.extensions.get("x-codegen-async"))

    @property
    def signature(self) -> ResolvedSignature | None:
        return self._signature

    @signature.setter
    def signature(self, value: ResolvedSignature) -> None:
        if self._signature is not None:
            raise RuntimeError(f"signature of {self.label} is already resolved")
        self._signature = value


@dataclass
class PathItem:
    template: str
    operations: dict[str, Operation] = field(default_factory=dict)


@dataclass
class ContractDocument:
    title: str
    version: str
    paths: list[PathItem] = field(default_factory=list)
    schemas: dict[str, SchemaDef] = field(default_factory=dict)

    def operations(self) -> list[Operation]:
        """All operations in document order."""
        return [op for item in self.paths for op in item.operations.values()]


# ---------------------------------------------------------------------------
# Mapped types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TypeRef:
    """Target type descriptor.

    kind is one of: void, primitive, bean, enum, external, list, map, binary,
    raw_response, async, any. ``name`` holds the simple Java name for
    primitives, beans and enums, or the fully qualified name for externals.
    """

    kind: str
    name: str = ""
    qualified: str | None = None
    args: tuple[TypeRef, ...] = ()

    @property
    def element(self) -> TypeRef:
        return self.args[0]


VOID = TypeRef("void")
BINARY = TypeRef("binary")
RAW_RESPONSE = TypeRef("raw_response")
ANY = TypeRef("any")


def list_of(item: TypeRef) -> TypeRef:
    return TypeRef("list", args=(item,))


def async_of(item: TypeRef) -> TypeRef:
    return TypeRef("async", args=(item,))


@dataclass
class BeanField:
    name: str
    type: TypeRef
    required: bool = False
    description: str = ""


@dataclass
class Bean:
    name: str
    fields: list[BeanField] = field(default_factory=list)
    description: str = ""
    location: str = ""


@dataclass
class EnumType:
    name: str
    values: list[Any] = field(default_factory=list)
    description: str = ""
    location: str = ""


# ---------------------------------------------------------------------------
# Resources and signatures
# ---------------------------------------------------------------------------

@dataclass
class ParameterBinding:
    name: str
    identifier: str
    location: str
    type: TypeRef
    required: bool = False
    description: str = ""


@dataclass
class ResolvedSignature:
    method_name: str
    parameters: list[ParameterBinding] = field(default_factory=list)
    return_type: TypeRef = VOID
    is_async: bool = False
    produces: list[str] = field(default_factory=list)
    consumes: list[str] = field(default_factory=list)

    def return_type_for(self, dialect: Any) -> TypeRef:
        """Return type legal under the dialect's capabilities."""
        resolved = self.return_type
        if resolved.kind == "raw_response" and not dialect.supports_raw_response:
            resolved = BINARY
        if self.is_async and dialect.supports_async:
            resolved = async_of(resolved)
        return resolved


@dataclass
class ResourceOperation:
    operation: Operation
    method_name: str
    relative_path: str


@dataclass
class Resource:
    name: str
    path: str
    key: str
    operations: list[ResourceOperation] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Diagnostic:
    kind: str
    location: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind}] {self.location}: {self.message}"


@dataclass(frozen=True)
class Artifact:
    name: str
    kind: str
    package: str
    body: str
    dialect: str

    @property
    def relative_path(self) -> str:
        return "/".join([self.dialect, *self.package.split("."), f"{self.name}.java"])
