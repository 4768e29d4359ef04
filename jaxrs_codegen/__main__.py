"""Entry point: python -m jaxrs_codegen CONTRACT

Reads a JSON/YAML contract, generates JAX-RS interfaces and beans for each
configured dialect and writes them under the output directory.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

import structlog

from .codegen import write_artifacts
from .config import GeneratorSettings, load_settings
from .errors import ConfigError, ParseError
from .loader import load_document
from .logging_utils import LOG_FORMATS, configure_logging
from .pipeline import generate

logger = structlog.get_logger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jaxrs_codegen",
        description="Generate JAX-RS interfaces and beans from an OpenAPI contract.",
    )
    parser.add_argument("contract", type=Path, help="OpenAPI/Swagger document (JSON or YAML)")
    parser.add_argument("--out", type=Path, default=Path("generated"), help="output directory")
    parser.add_argument("--dialect", action="append", dest="dialects", help="output dialect")
    parser.add_argument("--package", help="Java package for generated interfaces")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--log-level", default="info")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="console")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    try:
        settings = load_settings(args.config) if args.config else GeneratorSettings()
        overrides = {}
        if args.dialects:
            overrides["dialects"] = tuple(args.dialects)
        if args.package:
            overrides["java_package"] = args.package
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
        result = generate(load_document(args.contract), settings)
    except (ParseError, ConfigError) as exc:
        logger.error("generation_aborted", kind=exc.kind, location=exc.location, message=exc.message)
        return 2
    except OSError as exc:
        logger.error("generation_aborted", kind="IOError", message=str(exc))
        return 2

    write_artifacts(result.all_artifacts(), args.out)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
