"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from contracts import build_gateway_contract, build_registry_contract
from jaxrs_codegen.config import GeneratorSettings
from jaxrs_codegen.parser import parse_document
from jaxrs_codegen.type_mapper import TypeMapper


@pytest.fixture
def registry_contract() -> dict[str, Any]:
    return build_registry_contract()


@pytest.fixture
def gateway_contract() -> dict[str, Any]:
    return build_gateway_contract()


@pytest.fixture
def settings() -> GeneratorSettings:
    return GeneratorSettings(dialects=("jaxrs", "thorntail"))


@pytest.fixture
def registry_mapper(registry_contract) -> TypeMapper:
    """Type mapper over the registry contract with component tables built."""
    mapper = TypeMapper(parse_document(registry_contract))
    assert mapper.build_tables() == []
    return mapper
