"""Run the full generation pipeline for one contract document.

parse -> map types -> group resources -> resolve signatures -> render
each configured dialect. A ParseError aborts the run with no artifacts;
schema and naming errors become diagnostics while unaffected artifacts are
still produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from .codegen import render_artifacts
from .config import GeneratorSettings
from .errors import SchemaError
from .grouping import group_operations
from .model import Artifact, ContractDocument, Diagnostic, Resource
from .parser import parse_document
from .signature import SignatureBuilder
from .type_mapper import TypeMapper

logger = structlog.get_logger(__name__)


@dataclass
class GenerationResult:
    artifacts: dict[str, list[Artifact]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def all_artifacts(self) -> list[Artifact]:
        return [a for artifacts in self.artifacts.values() for a in artifacts]


def resolve_resources(
    document: ContractDocument, mapper: TypeMapper, settings: GeneratorSettings,
) -> tuple[list[Resource], list[Diagnostic]]:
    """Group operations and attach signatures; failed operations are left out."""
    resources, diagnostics = group_operations(document, settings)
    builder = SignatureBuilder(mapper, settings)
    resolved: list[Resource] = []
    for resource in resources:
        kept = []
        for entry in resource.operations:
            try:
                entry.operation.signature = builder.resolve(entry.operation, entry.method_name)
            except SchemaError as exc:
                logger.warning(
                    "operation_failed",
                    resource=resource.name,
                    operation=entry.operation.label,
                    kind=exc.kind,
                )
                diagnostics.append(exc.to_diagnostic())
                continue
            kept.append(entry)
        if kept:
            resolved.append(Resource(
                name=resource.name, path=resource.path, key=resource.key, operations=kept,
            ))
    return resolved, diagnostics


def generate_from_document(
    document: ContractDocument, settings: GeneratorSettings,
) -> GenerationResult:
    """Generate from an already parsed document (signatures are set exactly once)."""
    mapper = TypeMapper(document)
    diagnostics = mapper.build_tables()
    resources, resource_diagnostics = resolve_resources(document, mapper, settings)
    diagnostics.extend(resource_diagnostics)

    result = GenerationResult(diagnostics=diagnostics)
    beans = list(mapper.beans.values())
    enums = list(mapper.enums.values())
    for dialect in settings.selected_dialects():
        result.artifacts[dialect.name] = render_artifacts(resources, beans, enums, dialect, settings)

    for diagnostic in diagnostics:
        logger.warning(
            "generation_diagnostic",
            kind=diagnostic.kind,
            location=diagnostic.location,
            message=diagnostic.message,
        )
    logger.info(
        "generation_finished",
        title=document.title,
        resources=len(resources),
        diagnostics=len(diagnostics),
    )
    return result


def generate(raw: Any, settings: GeneratorSettings | None = None) -> GenerationResult:
    """Generate artifacts for every configured dialect from a decoded contract tree.

    Raises ParseError for malformed documents; nothing is emitted then.
    """
    settings = settings or GeneratorSettings()
    document = parse_document(raw)
    return generate_from_document(document, settings)
