"""Generator settings.

Only these values influence generated output. Settings come from keyword
arguments, a mapping, or a YAML file.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .dialects import Dialect, get_dialect
from .errors import ConfigError

PRIMARY_RESPONSE_RULES = ("lowest", "first")


@dataclass(frozen=True)
class GeneratorSettings:
    java_package: str = "org.example.api"
    beans_package: str | None = None
    dialects: tuple[str, ...] = ("jaxrs",)
    group_by_tags: bool = False
    primary_response: str = "lowest"
    workers: int = 1

    def __post_init__(self) -> None:
        if not self.dialects:
            raise ConfigError("at least one dialect is required", "dialects")
        for name in self.dialects:
            get_dialect(name)
        if self.primary_response not in PRIMARY_RESPONSE_RULES:
            raise ConfigError(
                f"primary_response must be one of {', '.join(PRIMARY_RESPONSE_RULES)}",
                "primary_response",
            )
        if not isinstance(self.workers, int) or isinstance(self.workers, bool) or self.workers < 1:
            raise ConfigError("workers must be a positive integer", "workers")
        if not isinstance(self.group_by_tags, bool):
            raise ConfigError("group_by_tags must be true or false", "group_by_tags")
        for key in ("java_package", "beans_package"):
            package = getattr(self, key)
            if package is None and key == "beans_package":
                continue
            if not isinstance(package, str) or not all(p.isidentifier() for p in package.split(".")):
                raise ConfigError(f"invalid Java package {package!r}", key)

    @property
    def bean_package(self) -> str:
        return self.beans_package or f"{self.java_package}.beans"

    def selected_dialects(self) -> list[Dialect]:
        return [get_dialect(name) for name in self.dialects]

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> GeneratorSettings:
        """Build settings from a plain mapping, rejecting unknown keys."""
        if not isinstance(data, dict):
            raise ConfigError("settings must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown setting(s): {', '.join(unknown)}")
        values = dict(data)
        if "dialects" in values:
            dialects = values["dialects"]
            values["dialects"] = (dialects,) if isinstance(dialects, str) else tuple(dialects)
        return cls(**values)


def load_settings(path: Path | str) -> GeneratorSettings:
    """Read settings from a YAML file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot read settings file {path}: {exc}") from exc
    return GeneratorSettings.from_mapping(data)
