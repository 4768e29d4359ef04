"""Render templates into artifacts and write them out.

Takes the resolved model and produces one Artifact per Resource, Bean and
enum type for a dialect. Rendering is a pure read of the model.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from pathlib import Path

import jinja2
import structlog

from .config import GeneratorSettings
from .context_builder import build_bean_context, build_enum_context, build_resource_context
from .dialects import Dialect
from .model import Artifact, Bean, EnumType, Resource

TEMPLATE_DIR = Path(__file__).parent / "templates"

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=1)
def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["java_string"] = lambda value: json.dumps(str(value))
    return env


def render_resource(resource: Resource, dialect: Dialect, settings: GeneratorSettings) -> Artifact:
    template = _environment().get_template("resource.java.j2")
    body = template.render(**build_resource_context(resource, dialect, settings))
    return Artifact(
        name=resource.name,
        kind="resource",
        package=settings.java_package,
        body=body,
        dialect=dialect.name,
    )


def render_bean(bean: Bean, dialect: Dialect, settings: GeneratorSettings) -> Artifact:
    template = _environment().get_template("bean.java.j2")
    body = template.render(**build_bean_context(bean, settings))
    return Artifact(
        name=bean.name, kind="bean", package=settings.bean_package, body=body, dialect=dialect.name,
    )


def render_enum(enum: EnumType, dialect: Dialect, settings: GeneratorSettings) -> Artifact:
    template = _environment().get_template("enum.java.j2")
    body = template.render(**build_enum_context(enum, settings))
    return Artifact(
        name=enum.name, kind="enum", package=settings.bean_package, body=body, dialect=dialect.name,
    )


def render_artifacts(
    resources: list[Resource],
    beans: list[Bean],
    enums: list[EnumType],
    dialect: Dialect,
    settings: GeneratorSettings,
) -> list[Artifact]:
    """Render every artifact for one dialect: resources, then beans, then enums.

    With settings.workers > 1 resources render in a thread pool; the result
    order is the input order either way.
    """
    if settings.workers > 1 and len(resources) > 1:
        with ThreadPoolExecutor(max_workers=min(settings.workers, len(resources))) as pool:
            artifacts = list(pool.map(lambda r: render_resource(r, dialect, settings), resources))
    else:
        artifacts = [render_resource(r, dialect, settings) for r in resources]
    artifacts.extend(render_bean(b, dialect, settings) for b in beans)
    artifacts.extend(render_enum(e, dialect, settings) for e in enums)
    logger.info(
        "artifacts_rendered",
        dialect=dialect.name,
        resources=len(resources),
        beans=len(beans),
        enums=len(enums),
    )
    return artifacts


def write_artifacts(artifacts: list[Artifact], output_dir: Path) -> list[Path]:
    """Write artifacts under <output_dir>/<dialect>/<package path>/<Name>.java."""
    written: list[Path] = []
    for artifact in artifacts:
        output_path = output_dir / artifact.relative_path
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(artifact.body, encoding="utf-8")
        written.append(output_path)
    logger.info("artifacts_written", output_dir=str(output_dir), count=len(written))
    return written
