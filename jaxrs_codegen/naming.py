"""Convert HTTP method + path to Java identifiers.

Pattern: {verb}{Resource}
  - GET collection      -> list{Plural}
  - GET collection/{id} -> get{Singular}
  - POST collection     -> create{Singular}
  - PUT collection/{id} -> update{Singular}
  - DELETE col/{id}     -> delete{Singular}

Every static segment but the last is singularized, so nested collections
read naturally.

Examples:
  GET    /artifacts                              -> listArtifacts
  GET    /artifacts/{artifactId}                 -> getArtifact
  POST   /artifacts                              -> createArtifact
  GET    /artifacts/{artifactId}/versions        -> listArtifactVersions
  DELETE /artifacts/{artifactId}/versions/{v}    -> deleteArtifactVersion
  PUT    /artifacts/{artifactId}/meta            -> updateArtifactMeta
"""

from __future__ import annotations

import re

# Standard HTTP method to verb mapping
_METHOD_VERBS: dict[str, str] = {
    "get": "list",
    "post": "create",
    "put": "update",
    "delete": "delete",
    "patch": "update",
}

_JAVA_KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "true", "false", "null",
    "var", "record", "yield",
})

# Irregular plural/singular pairs
_PLURALS: dict[str, str] = {
    "search": "searches",
    "status": "statuses",
    "index": "indexes",
    "child": "children",
    "person": "people",
    "data": "data",
    "meta": "meta",
    "metadata": "metadata",
}

_SINGULARS: dict[str, str] = {v: k for k, v in _PLURALS.items()}


def _pluralize(word: str) -> str:
    """Return the plural form of a lowercase word."""
    if word in _PLURALS:
        return _PLURALS[word]
    if word in _SINGULARS or _singularize(word) != word:
        return word
    if word.endswith("y") and word[-2:-1] not in ("a", "e", "i", "o", "u"):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    return word + "s"


def _singularize(word: str) -> str:
    """Return the singular form of a lowercase word."""
    if word in _SINGULARS:
        return _SINGULARS[word]
    if word in _PLURALS:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def split_words(name: str) -> list[str]:
    """Split camelCase, PascalCase, kebab, snake or spaced text into lowercase words."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1 \2", s1)
    return [w.lower() for w in re.split(r"[^A-Za-z0-9]+", s2) if w]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _guard(identifier: str) -> str:
    if not identifier:
        return "value"
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    if identifier in _JAVA_KEYWORDS:
        identifier += "_"
    return identifier


def type_name(name: str) -> str:
    """PascalCase Java type name. Existing PascalCase names are kept as-is."""
    if re.fullmatch(r"[A-Z][A-Za-z0-9]*", name):
        return name
    return _guard("".join(_capitalize(w) for w in split_words(name)))


def java_identifier(name: str) -> str:
    """lowerCamelCase Java identifier, e.g. X-Registry-ArtifactType -> xRegistryArtifactType."""
    words = split_words(name)
    if not words:
        return "value"
    return _guard(words[0] + "".join(_capitalize(w) for w in words[1:]))


def constant_name(value: object) -> str:
    """UPPER_SNAKE enum constant for a declared enum value."""
    words = split_words(str(value))
    return _guard("_".join(w.upper() for w in words) or "EMPTY")


def operation_id_to_method_name(operation_id: str) -> str:
    """Sanitize an explicit operationId, e.g. 'Register a Client' -> registerAClient."""
    if re.fullmatch(r"[a-z][A-Za-z0-9]*", operation_id):
        return _guard(operation_id)
    words = re.split(r"[^A-Za-z0-9]+", operation_id)
    words = [w for w in words if w]
    if not words:
        return "operation"
    first = words[0][:1].lower() + words[0][1:]
    return _guard(first + "".join(_capitalize(w) for w in words[1:]))


def static_segments(path: str) -> list[str]:
    """Path segments with {placeholders} removed."""
    return [p for p in path.split("/") if p and not p.startswith("{")]


def resource_name(key: str) -> str:
    """Interface name for a grouping key: clients -> ClientsResource."""
    base = type_name(key) if key else "Root"
    return f"{base}Resource"


def build_method_name(method: str, path: str) -> str:
    """Build a method name from HTTP method and path.

    Returns a name like 'listArtifacts' or 'getArtifactVersion'.
    """
    method_lower = method.lower()
    parts = static_segments(path)
    segments = [p for p in path.split("/") if p]
    ends_with_id = bool(segments) and segments[-1].startswith("{")

    if method_lower == "get":
        verb = "get" if ends_with_id or not parts else "list"
    else:
        verb = _METHOD_VERBS.get(method_lower, method_lower)

    if not parts:
        return f"{verb}Root"

    words: list[str] = []
    for index, part in enumerate(parts):
        part_words = split_words(part) or ["x"]
        last = index == len(parts) - 1
        if not last or ends_with_id or verb == "create":
            part_words[-1] = _singularize(part_words[-1])
        elif verb == "list":
            part_words[-1] = _pluralize(part_words[-1])
        words.extend(part_words)

    return _guard(verb + "".join(_capitalize(w) for w in words))
