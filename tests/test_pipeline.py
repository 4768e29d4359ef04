"""End-to-end tests for the generation pipeline and the command-line entry point."""

import json

import pytest

from jaxrs_codegen.__main__ import main
from jaxrs_codegen.config import GeneratorSettings
from jaxrs_codegen.errors import ParseError
from jaxrs_codegen.parser import parse_document
from jaxrs_codegen.pipeline import generate, generate_from_document

from contracts import minimal_contract

_OK = {"204": {"description": "ok"}}


def _json(schema):
    return {"application/json": {"schema": schema}}


def _names(result, dialect="jaxrs"):
    return [a.name for a in result.artifacts[dialect]]


class TestProperties:
    """Whole-pipeline properties over the registry contract."""

    def test_every_operation_once_per_dialect(self, registry_contract, settings):
        document = parse_document(registry_contract)
        result = generate_from_document(document, settings)
        assert result.ok
        operation_ids = [op.operation_id for op in document.operations()]
        for dialect in ("jaxrs", "thorntail"):
            resources = [a.body for a in result.artifacts[dialect] if a.kind == "resource"]
            for operation_id in operation_ids:
                declarations = sum(body.count(f" {operation_id}(") for body in resources)
                assert declarations == 1, f"{operation_id} in {dialect}"

    def test_signatures_resolved_once(self, registry_contract, settings):
        document = parse_document(registry_contract)
        generate_from_document(document, settings)
        op = document.operations()[0]
        assert op.signature is not None
        with pytest.raises(RuntimeError):
            op.signature = op.signature

    def test_put_clients(self, gateway_contract):
        result = generate(gateway_contract)
        assert _names(result) == ["ClientsResource", "Client"]
        body = result.artifacts["jaxrs"][0].body
        assert body.count(");\n") == 1
        assert "  void registerAClient(Client body);\n" in body

    def test_duplicate_path_emits_nothing(self):
        raw = minimal_contract({
            "/items/{id}": {"parameters": [{"name": "id", "in": "path", "required": True}],
                            "get": {"responses": _OK}},
            "/items/{key}": {"parameters": [{"name": "key", "in": "path", "required": True}],
                             "get": {"responses": _OK}},
        })
        with pytest.raises(ParseError) as exc:
            generate(raw, GeneratorSettings(dialects=("jaxrs", "thorntail")))
        assert exc.value.kind == "DuplicatePath"

    def test_custom_package(self, gateway_contract):
        result = generate(gateway_contract, GeneratorSettings(java_package="io.apiman.gateway"))
        artifacts = {a.name: a for a in result.artifacts["jaxrs"]}
        assert artifacts["ClientsResource"].body.startswith("package io.apiman.gateway;\n")
        assert "import io.apiman.gateway.beans.Client;\n" in artifacts["ClientsResource"].body
        assert artifacts["Client"].package == "io.apiman.gateway.beans"


class TestDiagnostics:
    def test_unsupported_schema_is_localized(self):
        raw = minimal_contract(
            {
                "/pets": {"get": {"operationId": "listPets", "responses": {
                    "200": {"description": "ok", "content": _json({"$ref": "#/components/schemas/Pet"})},
                }}},
                "/owners": {"get": {"operationId": "listOwners", "responses": {
                    "200": {"description": "ok", "content": _json({"$ref": "#/components/schemas/Owner"})},
                }}},
            },
            {
                "Pet": {"oneOf": [{"type": "string"}, {"type": "integer"}]},
                "Owner": {"type": "object", "properties": {"name": {"type": "string"}}},
            },
        )
        result = generate(raw)
        assert not result.ok
        assert [d.kind for d in result.diagnostics] == ["UnsupportedSchema", "UnsupportedSchema"]
        component, operation = result.diagnostics
        assert component.location == "#/components/schemas/Pet"
        assert operation.location.startswith("#/paths/~1pets/get/responses/200")
        assert "Pet" in operation.message
        assert _names(result) == ["OwnersResource", "Owner"]

    def test_failed_operation_leaves_rest_of_resource(self):
        raw = minimal_contract({"/items": {
            "get": {"operationId": "listItems", "responses": {
                "200": {"description": "ok", "content": _json({"type": "string"})},
            }},
            "delete": {"operationId": "purgeItems", "x-codegen-async": True, "responses": _OK},
        }})
        result = generate(raw)
        assert [d.kind for d in result.diagnostics] == ["UnsupportedAsyncWrapping"]
        body = result.artifacts["jaxrs"][0].body
        assert "listItems(" in body
        assert "purgeItems(" not in body

    def test_naming_conflict_drops_resource(self):
        raw = minimal_contract({
            "/items": {
                "get": {"operationId": "fetch", "responses": _OK},
                "post": {"operationId": "fetch", "responses": _OK},
            },
            "/rules": {"get": {"responses": _OK}},
        })
        result = generate(raw)
        assert [d.kind for d in result.diagnostics] == ["AmbiguousOperationName"]
        assert _names(result) == ["RulesResource"]

    def test_cookie_parameter(self):
        raw = minimal_contract({"/items": {"get": {
            "parameters": [{"name": "session", "in": "cookie", "schema": {"type": "string"}}],
            "responses": _OK,
        }}})
        result = generate(raw)
        assert [d.kind for d in result.diagnostics] == ["UnsupportedParameter"]
        assert _names(result) == []

    def test_diagnostic_text(self):
        raw = minimal_contract({"/items": {"post": {
            "x-codegen-async": True, "responses": _OK,
        }}})
        diagnostic = generate(raw).diagnostics[0]
        assert str(diagnostic).startswith("[UnsupportedAsyncWrapping] POST /items: ")


class TestMain:
    def test_writes_artifacts(self, tmp_path, gateway_contract):
        contract = tmp_path / "gateway.json"
        contract.write_text(json.dumps(gateway_contract))
        out = tmp_path / "out"
        code = main([str(contract), "--out", str(out), "--dialect", "thorntail", "--log-level", "error"])
        assert code == 0
        assert (out / "thorntail/org/example/api/ClientsResource.java").exists()
        assert not (out / "jaxrs").exists()

    def test_config_file_and_package_override(self, tmp_path, gateway_contract):
        contract = tmp_path / "gateway.json"
        contract.write_text(json.dumps(gateway_contract))
        config = tmp_path / "codegen.yaml"
        config.write_text("java_package: org.acme\ndialects: [jaxrs, thorntail]\n")
        out = tmp_path / "out"
        code = main([
            str(contract), "--out", str(out), "--config", str(config),
            "--package", "org.acme.api", "--log-level", "error",
        ])
        assert code == 0
        assert (out / "jaxrs/org/acme/api/ClientsResource.java").exists()
        assert (out / "thorntail/org/acme/api/beans/Client.java").exists()

    def test_diagnostics_exit_code(self, tmp_path):
        raw = minimal_contract({"/items": {"post": {"x-codegen-async": True, "responses": _OK}}})
        contract = tmp_path / "bad.json"
        contract.write_text(json.dumps(raw))
        assert main([str(contract), "--out", str(tmp_path / "out"), "--log-level", "error"]) == 1

    def test_parse_error_exit_code(self, tmp_path):
        contract = tmp_path / "broken.yaml"
        contract.write_text("swagger: '1.2'\npaths: {}\n")
        out = tmp_path / "out"
        assert main([str(contract), "--out", str(out), "--log-level", "error"]) == 2
        assert not out.exists()

    def test_unknown_dialect_exit_code(self, tmp_path, gateway_contract):
        contract = tmp_path / "gateway.json"
        contract.write_text(json.dumps(gateway_contract))
        code = main([str(contract), "--dialect", "spring", "--out", str(tmp_path), "--log-level", "error"])
        assert code == 2

    def test_missing_contract(self, tmp_path):
        assert main([str(tmp_path / "nope.yaml"), "--log-level", "error"]) == 2
