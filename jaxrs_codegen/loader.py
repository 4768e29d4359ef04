"""Load a contract document from disk.

Reads JSON or YAML into a plain dict and offers small lookups over the raw
tree (paths, schemas, local $ref pointers).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError


def load_document(path: Path | str) -> Any:
    """Load a JSON or YAML contract from disk.

    Raises ParseError when the file cannot be decoded.
    """
    doc_file = Path(path)
    with open(doc_file, encoding="utf-8") as f:
        try:
            if doc_file.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ParseError("MalformedDocument", str(doc_file), f"cannot decode contract: {exc}") from exc


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return document.get("paths") or {}


def get_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Extract reusable schemas (OpenAPI 3 components or Swagger 2 definitions)."""
    if "swagger" in document:
        return document.get("definitions") or {}
    return (document.get("components") or {}).get("schemas") or {}


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def resolve_ref(document: dict[str, Any], ref: str) -> Any:
    """Resolve a local $ref pointer in the document.

    Raises KeyError when the pointer does not lead anywhere.
    """
    if not ref.startswith("#/"):
        raise KeyError(ref)
    node: Any = document
    for part in ref[2:].split("/"):
        part = _unescape(part)
        if isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        elif isinstance(node, dict) and part in node:
            node = node[part]
        else:
            raise KeyError(ref)
    return node


def ref_name(ref: str) -> str:
    """Last segment of a $ref pointer, e.g. the schema name."""
    return _unescape(ref.rsplit("/", 1)[-1])
