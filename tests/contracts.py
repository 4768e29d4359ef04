"""Contract documents shared by the tests.

The registry contract is OpenAPI 3; the gateway contract is Swagger 2.0.
Every builder returns a fresh document so tests can mutate it freely.
"""

from __future__ import annotations

from typing import Any


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: dict[str, Any]) -> dict[str, Any]:
    return {"application/json": {"schema": schema}}


_ARTIFACT_ID = {
    "name": "artifactId", "in": "path", "required": True, "schema": {"type": "string"},
}
_VERSION = {
    "name": "version", "in": "path", "required": True, "schema": {"type": "integer"},
}
_ARTIFACT_TYPE_HEADER = {
    "name": "X-Registry-ArtifactType", "in": "header", "schema": _ref("ArtifactType"),
}
_FILE_CONTENT = {
    "application/json": {"schema": _ref("FileContent")},
    "application/x-yaml": {"schema": _ref("FileContent")},
}


def build_registry_contract() -> dict[str, Any]:
    return {
        "openapi": "3.0.2",
        "info": {"title": "Apicurio Registry API", "version": "1.0.0"},
        "paths": {
            "/artifacts": {
                "post": {
                    "operationId": "createArtifact",
                    "summary": "Create Artifact",
                    "description": (
                        "Creates a new artifact by POSTing the artifact content. The body of"
                        " the request should be the raw content of the artifact.\n\n"
                        "The registry will attempt to figure out what kind of artifact is"
                        " being added from the following supported list:\n\n"
                        "* Avro (`AVRO`)\n"
                        "* Protobuff (`PROTOBUFF`)\n"
                        "* JSON Schema (`JSON`)\n"
                    ),
                    "parameters": [
                        _ARTIFACT_TYPE_HEADER,
                        {"name": "X-Registry-ArtifactId", "in": "header", "schema": {"type": "string"}},
                    ],
                    "requestBody": {"content": _FILE_CONTENT, "required": True},
                    "responses": {
                        "200": {
                            "description": "Artifact was successfully created.",
                            "content": _json(_ref("ArtifactMetaData")),
                        },
                        "400": {"description": "An invalid `ArtifactType` was indicated"},
                        "500": {"description": "A server error occurred"},
                    },
                    "x-codegen-async": True,
                },
            },
            "/artifacts/{artifactId}": {
                "parameters": [_ARTIFACT_ID],
                "get": {
                    "operationId": "getLatestArtifact",
                    "description": "Returns the latest version of the artifact in its raw form.",
                    "responses": {
                        "200": {"description": "The content", "content": _FILE_CONTENT},
                        "404": {"description": "No artifact with this `artifactId` exists"},
                    },
                },
                "put": {
                    "operationId": "updateArtifact",
                    "parameters": [_ARTIFACT_TYPE_HEADER],
                    "requestBody": {"content": _FILE_CONTENT, "required": True},
                    "responses": {
                        "200": {"description": "ok", "content": _json(_ref("ArtifactMetaData"))},
                    },
                },
                "delete": {
                    "operationId": "deleteArtifact",
                    "responses": {"204": {"description": "Artifact deleted"}},
                },
            },
            "/artifacts/{artifactId}/meta": {
                "parameters": [_ARTIFACT_ID],
                "get": {
                    "operationId": "getArtifactMetaData",
                    "responses": {
                        "200": {"description": "ok", "content": _json(_ref("ArtifactMetaData"))},
                    },
                },
                "put": {
                    "operationId": "updateArtifactMetaData",
                    "requestBody": {"content": _json(_ref("EditableMetaData"))},
                    "responses": {"204": {"description": "updated"}},
                },
            },
            "/artifacts/{artifactId}/versions": {
                "parameters": [_ARTIFACT_ID],
                "get": {
                    "operationId": "listArtifactVersions",
                    "description": "Returns a list of all version numbers for the artifact.",
                    "responses": {
                        "200": {
                            "description": "List of all artifact versions.",
                            "content": _json({
                                "type": "array",
                                "items": {"type": "integer", "format": "int64"},
                            }),
                        },
                    },
                },
                "post": {
                    "operationId": "createArtifactVersion",
                    "parameters": [_ARTIFACT_TYPE_HEADER],
                    "requestBody": {"content": _FILE_CONTENT, "required": True},
                    "responses": {
                        "200": {"description": "ok", "content": _json(_ref("VersionMetaData"))},
                    },
                },
            },
            "/artifacts/{artifactId}/versions/{version}": {
                "parameters": [_ARTIFACT_ID, _VERSION],
                "get": {
                    "operationId": "getArtifactVersion",
                    "responses": {"200": {"description": "content", "content": _FILE_CONTENT}},
                },
                "delete": {
                    "operationId": "deleteArtifactVersion",
                    "responses": {"204": {"description": "deleted"}},
                },
            },
            "/artifacts/{artifactId}/rules": {
                "parameters": [_ARTIFACT_ID],
                "get": {
                    "operationId": "listArtifactRules",
                    "responses": {
                        "200": {
                            "description": "rules",
                            "content": _json({"type": "array", "items": _ref("RuleType")}),
                        },
                    },
                },
                "post": {
                    "operationId": "createArtifactRule",
                    "requestBody": {"content": _json(_ref("Rule"))},
                    "responses": {"204": {"description": "created"}},
                },
            },
            "/artifacts/{artifactId}/rules/{rule}": {
                "parameters": [
                    {"name": "rule", "in": "path", "required": True, "schema": {"type": "string"}},
                    _ARTIFACT_ID,
                ],
                "put": {
                    "operationId": "updateArtifactRuleConfig",
                    "requestBody": {"content": _json(_ref("Rule"))},
                    "responses": {"200": {"description": "ok", "content": _json(_ref("Rule"))}},
                },
            },
            "/rules": {
                "get": {
                    "operationId": "listGlobalRules",
                    "responses": {
                        "200": {
                            "description": "rules",
                            "content": _json({"type": "array", "items": _ref("RuleType")}),
                        },
                    },
                },
            },
        },
        "components": {
            "schemas": {
                "FileContent": {"type": "string", "format": "binary"},
                "ArtifactType": {
                    "type": "string",
                    "enum": ["AVRO", "PROTOBUFF", "JSON", "OPENAPI", "ASYNCAPI"],
                },
                "ArtifactMetaData": {
                    "type": "object",
                    "title": "Root Type for ArtifactMetaData",
                    "properties": {
                        "name": {"type": "string"},
                        "description": {"type": "string"},
                        "createdOn": {"type": "string", "format": "date-time"},
                        "id": {"type": "string"},
                        "version": {"type": "integer"},
                        "type": _ref("ArtifactType"),
                        "labels": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["id", "version"],
                },
                "VersionMetaData": {
                    "type": "object",
                    "properties": {
                        "version": {"type": "integer"},
                        "type": _ref("ArtifactType"),
                    },
                },
                "EditableMetaData": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "description": {"type": "string"},
                    },
                },
                "Rule": {
                    "type": "object",
                    "properties": {
                        "config": {"type": "string"},
                        "type": _ref("RuleType"),
                    },
                    "required": ["config"],
                },
                "RuleType": {
                    "type": "string",
                    "enum": ["VALIDITY", "COMPATIBILITY"],
                    "x-codegen-type": "io.apicurio.registry.types.RuleType",
                },
            },
        },
    }


def build_gateway_contract() -> dict[str, Any]:
    return {
        "swagger": "2.0",
        "info": {"title": "Gateway API", "version": "1.0"},
        "consumes": ["application/json"],
        "produces": ["application/json"],
        "paths": {
            "/clients": {
                "put": {
                    "operationId": "Register a Client",
                    "description": (
                        "Register a Client and make it immediately available on the gateway."
                    ),
                    "parameters": [
                        {
                            "in": "body",
                            "name": "body",
                            "required": True,
                            "schema": {"$ref": "#/definitions/Client"},
                        },
                    ],
                    "responses": {"204": {"description": "Client registered"}},
                },
            },
        },
        "definitions": {
            "Client": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Client name."},
                    "secret": {"type": "string"},
                },
                "required": ["name"],
            },
        },
    }


def minimal_contract(paths: dict[str, Any], schemas: dict[str, Any] | None = None) -> dict[str, Any]:
    """OpenAPI 3 document with the given paths and component schemas."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Test", "version": "1"},
        "paths": paths,
        "components": {"schemas": schemas or {}},
    }
