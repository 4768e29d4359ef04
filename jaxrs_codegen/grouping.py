"""Partition operations into Resources (one generated interface each).

Assigns each operation to a grouping key, derives method names and makes
them unique inside their Resource.
"""

from __future__ import annotations

import structlog

from .config import GeneratorSettings
from .errors import NamingConflictError
from .model import ContractDocument, Diagnostic, Operation, Resource, ResourceOperation
from .naming import (
    build_method_name,
    operation_id_to_method_name,
    resource_name,
    static_segments,
    type_name,
)
from .parser import path_placeholders

logger = structlog.get_logger(__name__)

RESOURCE_EXTENSION = "x-codegen-resource"


def grouping_key(operation: Operation, settings: GeneratorSettings) -> str:
    """Extension hint, then first tag (opt-in), then first static path segment."""
    hint = operation.extensions.get(RESOURCE_EXTENSION)
    if hint:
        return str(hint)
    if settings.group_by_tags and operation.tags:
        return operation.tags[0]
    parts = static_segments(operation.path)
    return parts[0] if parts else ""


def method_name(operation: Operation) -> str:
    """Explicit operationId if present, otherwise derived from method + path."""
    if operation.operation_id:
        return operation_id_to_method_name(operation.operation_id)
    return build_method_name(operation.method, operation.path)


def _hinted(operation: Operation, settings: GeneratorSettings) -> bool:
    return bool(
        operation.extensions.get(RESOURCE_EXTENSION)
        or (settings.group_by_tags and operation.tags)
    )


def _leading_static(path: str) -> list[str]:
    leading = []
    for part in (p for p in path.split("/") if p):
        if part.startswith("{"):
            break
        leading.append(part)
    return leading


def _resource_path(operations: list[Operation], limit: int | None = None) -> str:
    """Longest common leading static prefix, at most ``limit`` segments deep."""
    prefix = _leading_static(operations[0].path)
    for operation in operations[1:]:
        segments = _leading_static(operation.path)
        common = 0
        while common < min(len(prefix), len(segments)) and prefix[common] == segments[common]:
            common += 1
        prefix = prefix[:common]
    if limit is not None:
        prefix = prefix[:limit]
    return "/" + "/".join(prefix)


def _relative_path(template: str, resource_path: str) -> str:
    if resource_path == "/":
        relative = template
    else:
        relative = template[len(resource_path):]
    relative = relative.rstrip("/")
    if relative and not relative.startswith("/"):
        relative = "/" + relative
    return relative


def _discriminators(operation: Operation, first: Operation, base: str) -> list[str]:
    """Candidate names for a colliding operation, most specific first."""
    candidates: list[str] = []
    first_parts = set(static_segments(first.path))
    differing = [s for s in static_segments(operation.path) if s not in first_parts]
    if differing:
        candidates.append(base + "".join(type_name(s) for s in differing))
    placeholders = path_placeholders(operation.path)
    if placeholders:
        candidates.append(f"{base}By{type_name(placeholders[-1])}")
    if len(placeholders) > 1:
        candidates.append(f"{base}By" + "And".join(type_name(p) for p in placeholders))
    if operation.parameters:
        candidates.append(f"{base}With" + "And".join(type_name(p.name) for p in operation.parameters))
    return candidates


def _deduplicate_method_names(resource: Resource) -> None:
    """Ensure all method names in a resource are unique.

    The first operation keeps its name; later ones get a discriminator.
    Raises NamingConflictError when no discriminator is free.
    """
    taken = {entry.method_name for entry in resource.operations}
    derived = [(entry.method_name, entry.operation.label) for entry in resource.operations]
    owners: dict[str, Operation] = {}
    for entry in resource.operations:
        name = entry.method_name
        if name not in owners:
            owners[name] = entry.operation
            continue
        first = owners[name]
        for candidate in _discriminators(entry.operation, first, name):
            if candidate not in taken:
                entry.method_name = candidate
                taken.add(candidate)
                owners[candidate] = entry.operation
                break
        else:
            conflicting = ", ".join(label for derived_name, label in derived if derived_name == name)
            raise NamingConflictError(
                "AmbiguousOperationName",
                entry.operation.label,
                f"method name {name!r} in {resource.name} is shared by {conflicting}"
                " and no discriminator is free",
            )


def group_operations(
    document: ContractDocument, settings: GeneratorSettings,
) -> tuple[list[Resource], list[Diagnostic]]:
    """Build Resources in first-encounter order; drop those with naming conflicts."""
    groups: dict[str, list[Operation]] = {}
    keys: dict[str, str] = {}
    for operation in document.operations():
        key = grouping_key(operation, settings)
        name = resource_name(key)
        keys.setdefault(name, key)
        groups.setdefault(name, []).append(operation)

    resources: list[Resource] = []
    diagnostics: list[Diagnostic] = []
    for name, operations in groups.items():
        limit = None if any(_hinted(op, settings) for op in operations) else 1
        path = _resource_path(operations, limit)
        resource = Resource(name=name, path=path, key=keys[name])
        for operation in operations:
            resource.operations.append(ResourceOperation(
                operation=operation,
                method_name=method_name(operation),
                relative_path=_relative_path(operation.path, path),
            ))
        try:
            _deduplicate_method_names(resource)
        except NamingConflictError as exc:
            logger.warning("resource_dropped", resource=resource.name, reason=exc.message)
            diagnostics.append(exc.to_diagnostic())
            continue
        logger.debug("resource_grouped", resource=resource.name, operations=len(operations))
        resources.append(resource)
    return resources, diagnostics
